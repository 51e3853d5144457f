"""Service for recurring transaction rules and their monthly materialization."""

import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from caixa.errors import raise_if_invalid
from caixa.models import RecurringTransaction
from caixa.ownership import OwnershipResolver
from caixa.sanitization import sanitize_string
from caixa.schemas.recurring import RecurringCreate, RecurringUpdate
from caixa.services.base import merged, to_decimal
from caixa.services.transaction_service import TransactionService
from caixa.validation import (
    MONTHS,
    canonical_month,
    collect,
    validate_amount,
    validate_day_of_month,
    validate_month,
    validate_text,
    validate_year,
)

logger = logging.getLogger(__name__)


def validate_rule(data: Dict[str, Any]):
    return collect(
        validate_text(data.get("description"), "description", 200, required=True),
        validate_amount(data.get("amount"), "amount"),
        validate_text(data.get("category"), "category", 50, required=True),
        validate_day_of_month(data.get("day_of_month")),
    )


def month_name(month_number: int) -> str:
    """Portuguese name for a 1-based month number."""
    return MONTHS[month_number - 1]


class RecurringService:
    """CRUD for recurring rules plus idempotent generation of transactions."""

    def __init__(self, db: Session):
        self.db = db
        self.ownership = OwnershipResolver(db)
        self.transactions = TransactionService(db)

    def list_for_company(self, user_id: str, company_id: str) -> List[RecurringTransaction]:
        company = self.ownership.authorize_company(user_id, company_id)
        return self.db.query(RecurringTransaction).filter(
            RecurringTransaction.company_id == company.id
        ).order_by(RecurringTransaction.day_of_month).all()

    def get_by_id(self, user_id: str, rule_id: str) -> RecurringTransaction:
        return self.ownership.authorize_child(
            user_id, RecurringTransaction, rule_id, "Transação recorrente"
        )

    def create(self, user_id: str, payload: RecurringCreate) -> RecurringTransaction:
        company = self.ownership.authorize_company(user_id, payload.company_id)

        data = payload.model_dump()
        raise_if_invalid(validate_rule(data))

        rule = RecurringTransaction(company_id=company.id, **self._clean(data))
        self.db.add(rule)
        self.db.commit()
        self.db.refresh(rule)
        return rule

    def update(self, user_id: str, rule_id: str, payload: RecurringUpdate) -> RecurringTransaction:
        rule = self.get_by_id(user_id, rule_id)

        current = {
            "description": rule.description,
            "amount": float(rule.amount),
            "category": rule.category,
            "day_of_month": rule.day_of_month,
        }
        data = merged(current, payload.model_dump(exclude_unset=True))
        raise_if_invalid(validate_rule(data))

        for key, value in self._clean(data).items():
            setattr(rule, key, value)
        self.db.commit()
        self.db.refresh(rule)
        return rule

    def delete(self, user_id: str, rule_id: str) -> None:
        rule = self.get_by_id(user_id, rule_id)
        self.db.delete(rule)
        self.db.commit()

    def process_for_period(self, user_id: str, company_id: str, month: Optional[str], year: Any) -> int:
        """
        Materialize every rule of a company for one month/year.

        Returns the number of transactions created. Running it again for the
        same period creates nothing.
        """
        company = self.ownership.authorize_company(user_id, company_id)
        raise_if_invalid(collect(validate_month(month), validate_year(year)))

        rules = self.db.query(RecurringTransaction).filter(
            RecurringTransaction.company_id == company.id
        ).all()
        created = self._materialize(rules, canonical_month(month), year)
        logger.info(
            "Processed %d recurring rules for company %s (%s/%s): %d created",
            len(rules), company.id, month, year, created,
        )
        return created

    def process_all_due_today(self, today: Optional[date] = None) -> int:
        """Materialize, across all companies, the rules due on today's day of month."""
        today = today or date.today()
        rules = self.db.query(RecurringTransaction).filter(
            RecurringTransaction.day_of_month == today.day
        ).all()
        created = self._materialize(rules, month_name(today.month), today.year)
        logger.info("Processed %d rules due on %s: %d created", len(rules), today, created)
        return created

    def _materialize(self, rules: Iterable[RecurringTransaction], month: str, year: int) -> int:
        created = 0
        for rule in rules:
            # Fast path; the unique recurrence key is the real guard
            if self.transactions.exists_for_period(rule.company_id, rule.description, month, year):
                continue

            self.db.add(self.transactions.build_from_recurring(rule, month, year))
            try:
                self.db.commit()
            except IntegrityError:
                # A concurrent run created it first
                self.db.rollback()
                logger.info(
                    "Recurring rule %s already materialized for %s/%s", rule.id, month, year
                )
                continue
            created += 1
        return created

    def _clean(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "description": sanitize_string(data["description"]),
            "amount": to_decimal(data["amount"]),
            "category": sanitize_string(data["category"]),
            "day_of_month": data["day_of_month"],
        }
