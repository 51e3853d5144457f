"""Service for monthly transactions: CRUD, paging, status toggling and stats."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import case
from sqlalchemy.orm import Session

from caixa.errors import NotFoundError, raise_if_invalid
from caixa.models import RecurringTransaction, Transaction, TransactionStatus
from caixa.ownership import OwnershipResolver
from caixa.sanitization import sanitize_optional, sanitize_string
from caixa.schemas.transaction import TransactionCreate, TransactionUpdate
from caixa.services.base import merged, paginate, to_decimal
from caixa.validation import (
    MONTHS,
    ACCUMULATED_MONTH,
    canonical_month,
    collect,
    validate_amount,
    validate_month,
    validate_status,
    validate_text,
    validate_year,
)

# Calendar order for sorting; "Acumulado" closes the year
MONTH_ORDER = {name: i for i, name in enumerate(MONTHS, start=1)}
MONTH_ORDER[ACCUMULATED_MONTH] = 13


def validate_transaction(data: Dict[str, Any]):
    return collect(
        validate_amount(data.get("amount"), "amount"),
        validate_text(data.get("category"), "category", 50, required=True),
        validate_text(data.get("description"), "description", 200),
        validate_month(data.get("month")),
        validate_year(data.get("year")),
        validate_status(data.get("status")),
    )


def recurrence_key(description: str, month: str, year: int) -> str:
    return f"{description}|{month}|{year}"


def _month_sort():
    return case(MONTH_ORDER, value=Transaction.month, else_=0)


class TransactionService:
    """Transactions belong to a company; every access is authorized through it."""

    def __init__(self, db: Session):
        self.db = db
        self.ownership = OwnershipResolver(db)

    def _scoped_query(self, user_id: str, company_id: Optional[str]):
        """Transactions of one owned company, or of all of the user's companies."""
        query = self.db.query(Transaction)
        if company_id:
            company = self.ownership.authorize_company(user_id, company_id)
            return query.filter(Transaction.company_id == company.id)
        return query.filter(
            Transaction.company_id.in_(self.ownership.company_ids_for_user(user_id))
        )

    def list_paginated(
        self,
        user_id: str,
        company_id: Optional[str],
        page: Any = 1,
        limit: Any = 50,
    ) -> Tuple[List[Transaction], Dict[str, int]]:
        query = self._scoped_query(user_id, company_id).order_by(
            Transaction.year.desc(),
            _month_sort().desc(),
            Transaction.created_at.desc(),
        )
        return paginate(query, page, limit)

    def list_for_company(self, user_id: str, company_id: str) -> List[Transaction]:
        return self._scoped_query(user_id, company_id).order_by(
            Transaction.year.desc(), _month_sort().desc()
        ).all()

    def get_by_id(self, user_id: str, transaction_id: str) -> Transaction:
        return self.ownership.authorize_child(user_id, Transaction, transaction_id, "Transação")

    def create(self, user_id: str, payload: TransactionCreate) -> Transaction:
        company = self.ownership.authorize_company(user_id, payload.company_id)

        data = payload.model_dump()
        raise_if_invalid(validate_transaction(data))

        txn = Transaction(company_id=company.id, **self._clean(data))
        self.db.add(txn)
        self.db.commit()
        self.db.refresh(txn)
        return txn

    def update(self, user_id: str, transaction_id: str, payload: TransactionUpdate) -> Transaction:
        txn = self.get_by_id(user_id, transaction_id)

        current = {
            "month": txn.month,
            "year": txn.year,
            "amount": float(txn.amount),
            "category": txn.category,
            "status": txn.status.value,
            "description": txn.description,
        }
        data = merged(current, payload.model_dump(exclude_unset=True))
        raise_if_invalid(validate_transaction(data))

        for key, value in self._clean(data).items():
            setattr(txn, key, value)
        self.db.commit()
        self.db.refresh(txn)
        return txn

    def delete(self, user_id: str, transaction_id: str) -> None:
        txn = self.get_by_id(user_id, transaction_id)
        self.db.delete(txn)
        self.db.commit()

    def toggle_status(self, user_id: str, transaction_id: str) -> Transaction:
        """Flip PAGO <-> ABERTO with a single conditional UPDATE."""
        txn = self.get_by_id(user_id, transaction_id)

        flipped = case(
            (Transaction.status == TransactionStatus.ABERTO, TransactionStatus.PAGO.name),
            else_=TransactionStatus.ABERTO.name,
        )
        updated = self.db.query(Transaction).filter(Transaction.id == txn.id).update(
            {Transaction.status: flipped, Transaction.updated_at: datetime.utcnow()},
            synchronize_session=False,
        )
        if not updated:
            raise NotFoundError("Transação não encontrada")
        self.db.commit()
        self.db.refresh(txn)
        return txn

    def get_stats(
        self,
        user_id: str,
        company_id: Optional[str] = None,
        month: Optional[str] = None,
        year: Optional[int] = None,
    ) -> Dict[str, float]:
        """Sum of paid, open and all amounts for the given scope."""
        checks = []
        if month:
            checks.append(validate_month(month))
        if year is not None:
            checks.append(validate_year(year))
        raise_if_invalid(collect(*checks))

        query = self._scoped_query(user_id, company_id)
        if month:
            query = query.filter(Transaction.month == canonical_month(month))
        if year is not None:
            query = query.filter(Transaction.year == year)

        paid = open_ = 0.0
        for status, amount in query.with_entities(Transaction.status, Transaction.amount):
            if status == TransactionStatus.PAGO:
                paid += float(amount)
            else:
                open_ += float(amount)
        return {"paid": round(paid, 2), "open": round(open_, 2), "total": round(paid + open_, 2)}

    # Recurring materialization support

    def exists_for_period(self, company_id: str, description: str, month: str, year: int) -> bool:
        return self.db.query(Transaction.id).filter(
            Transaction.company_id == company_id,
            Transaction.description == description,
            Transaction.month == month,
            Transaction.year == year,
        ).first() is not None

    def build_from_recurring(self, rule: RecurringTransaction, month: str, year: int) -> Transaction:
        """An unsaved ABERTO transaction for ``rule`` in the given period."""
        return Transaction(
            company_id=rule.company_id,
            month=month,
            year=year,
            amount=rule.amount,
            category=rule.category,
            status=TransactionStatus.ABERTO,
            description=rule.description,
            recurrence_key=recurrence_key(rule.description, month, year),
        )

    def _clean(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "month": canonical_month(data["month"]),
            "year": data["year"],
            "amount": to_decimal(data["amount"]),
            "category": sanitize_string(data["category"]),
            "status": TransactionStatus(data["status"].strip().upper()),
            "description": sanitize_optional(data.get("description")),
        }
