"""Tests for recurring rule materialization."""

import pytest
from datetime import date
from decimal import Decimal

from caixa.errors import ForbiddenError, ValidationFailed
from caixa.models import Transaction, TransactionStatus
from caixa.services.recurring_service import RecurringService, month_name
from caixa.services.transaction_service import TransactionService, recurrence_key


class TestMonthName:
    """Test month number to Portuguese name mapping."""

    def test_january(self):
        assert month_name(1) == "Janeiro"

    def test_march_is_accented(self):
        assert month_name(3) == "Março"

    def test_december(self):
        assert month_name(12) == "Dezembro"


class TestProcessForPeriod:
    """Test generating a month of transactions from a company's rules."""

    def test_creates_one_open_transaction_per_rule(self, db_session, owner, company, sample_rules):
        """Each rule should become an ABERTO transaction in the period."""
        created = RecurringService(db_session).process_for_period(owner.id, company.id, "Abril", 2025)
        assert created == 3

        rows = db_session.query(Transaction).filter(Transaction.company_id == company.id).all()
        assert len(rows) == 3
        assert {r.description for r in rows} == {"Aluguel", "Internet", "Academia"}
        assert all(r.status == TransactionStatus.ABERTO for r in rows)
        assert all((r.month, r.year) == ("Abril", 2025) for r in rows)
        aluguel = next(r for r in rows if r.description == "Aluguel")
        assert aluguel.amount == Decimal("1500.00")
        assert aluguel.recurrence_key == recurrence_key("Aluguel", "Abril", 2025)

    def test_second_run_creates_nothing(self, db_session, owner, company, sample_rules):
        """Processing the same period twice should be idempotent."""
        service = RecurringService(db_session)
        assert service.process_for_period(owner.id, company.id, "Abril", 2025) == 3
        assert service.process_for_period(owner.id, company.id, "Abril", 2025) == 0
        assert db_session.query(Transaction).count() == 3

    def test_other_period_is_independent(self, db_session, owner, company, sample_rules):
        service = RecurringService(db_session)
        service.process_for_period(owner.id, company.id, "Abril", 2025)
        assert service.process_for_period(owner.id, company.id, "Maio", 2025) == 3

    def test_unaccented_march(self, db_session, owner, company, sample_rules):
        RecurringService(db_session).process_for_period(owner.id, company.id, "Marco", 2025)
        months = {m for (m,) in db_session.query(Transaction.month)}
        assert months == {"Março"}

    def test_concurrent_insert_is_skipped(self, db_session, owner, company, sample_rules, monkeypatch):
        """A row created by a racing run trips the unique key and is counted as skipped."""
        rule = sample_rules[0]
        db_session.add(TransactionService(db_session).build_from_recurring(rule, "Junho", 2025))
        db_session.commit()

        # Simulate the race: the existence check has not seen the other run's row yet
        monkeypatch.setattr(TransactionService, "exists_for_period", lambda *args: False)

        created = RecurringService(db_session).process_for_period(owner.id, company.id, "Junho", 2025)
        assert created == 2
        assert db_session.query(Transaction).filter(Transaction.description == "Aluguel").count() == 1
        assert db_session.query(Transaction).count() == 3

    def test_invalid_period(self, db_session, owner, company, sample_rules):
        with pytest.raises(ValidationFailed) as exc_info:
            RecurringService(db_session).process_for_period(owner.id, company.id, "June", 1990)
        assert {e.field for e in exc_info.value.errors} == {"month", "year"}

    def test_foreign_company(self, db_session, intruder, company, sample_rules):
        with pytest.raises(ForbiddenError):
            RecurringService(db_session).process_for_period(intruder.id, company.id, "Abril", 2025)


class TestProcessAllDueToday:
    """Test the daily job entry point."""

    def test_only_rules_due_today(self, db_session, company, sample_rules):
        """Only rules whose day matches today's day of month should run."""
        created = RecurringService(db_session).process_all_due_today(today=date(2025, 3, 10))
        assert created == 2

        rows = db_session.query(Transaction).all()
        assert {r.description for r in rows} == {"Internet", "Academia"}
        assert all((r.month, r.year) == ("Março", 2025) for r in rows)

    def test_rerun_same_day(self, db_session, company, sample_rules):
        service = RecurringService(db_session)
        service.process_all_due_today(today=date(2025, 3, 5))
        assert service.process_all_due_today(today=date(2025, 3, 5)) == 0

    def test_nothing_due(self, db_session, company, sample_rules):
        assert RecurringService(db_session).process_all_due_today(today=date(2025, 3, 1)) == 0
