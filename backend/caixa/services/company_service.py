"""Company management and tenant-wide cascade delete."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from caixa.errors import CascadeDeleteError, raise_if_invalid
from caixa.models import (
    Category,
    Company,
    Quote,
    QuoteItem,
    QuoteTemplate,
    RecurringTransaction,
    Transaction,
)
from caixa.ownership import OwnershipResolver
from caixa.schemas.company import CompanyCreate, CompanyUpdate
from caixa.services.base import clean_fields, merged
from caixa.validation import (
    collect,
    validate_cnpj,
    validate_max_length,
    validate_no_script_tags,
    validate_optional_email,
    validate_text,
)

logger = logging.getLogger(__name__)

TEXT_FIELDS = (
    "name", "legal_name", "trade_name", "phone",
    "address", "city", "state", "zip_code",
)
EDITABLE_FIELDS = TEXT_FIELDS + ("cnpj", "email", "logo_url")


@dataclass
class CascadeResult:
    """Rows removed per step of a company delete."""
    company_id: str
    deleted: Dict[str, int] = field(default_factory=dict)


def validate_company(data: Dict[str, Any]):
    return collect(
        validate_text(data.get("name"), "name", 100, required=True),
        validate_text(data.get("legal_name"), "legalName", 200),
        validate_text(data.get("trade_name"), "tradeName", 200),
        validate_cnpj(data.get("cnpj")),
        validate_optional_email(data.get("email")),
        validate_text(data.get("phone"), "phone", 30),
        validate_text(data.get("address"), "address", 300),
        validate_text(data.get("city"), "city", 100),
        validate_max_length(data.get("state"), 2, "state"),
        validate_text(data.get("zip_code"), "zipCode", 10),
        validate_max_length(data.get("logo_url"), 500, "logoUrl"),
        validate_no_script_tags(data.get("logo_url"), "logoUrl"),
    )


class CompanyService:
    """CRUD for companies owned by the acting user."""

    def __init__(self, db: Session):
        self.db = db
        self.ownership = OwnershipResolver(db)

    def list_for_user(self, user_id: str) -> List[Company]:
        return self.db.query(Company).filter(
            Company.user_id == user_id
        ).order_by(Company.created_at).all()

    def get_by_id(self, user_id: str, company_id: str) -> Company:
        return self.ownership.authorize_company(user_id, company_id)

    def create(self, user_id: str, payload: CompanyCreate) -> Company:
        data = payload.model_dump()
        raise_if_invalid(validate_company(data))

        company = Company(user_id=user_id, **self._clean(data))
        self.db.add(company)
        self.db.commit()
        self.db.refresh(company)
        logger.info("Company %s created for user %s", company.id, user_id)
        return company

    def update(self, user_id: str, company_id: str, payload: CompanyUpdate) -> Company:
        company = self.ownership.authorize_company(user_id, company_id)

        current = {f: getattr(company, f) for f in EDITABLE_FIELDS}
        data = merged(current, payload.model_dump(exclude_unset=True))
        raise_if_invalid(validate_company(data))

        # user_id is never part of an update
        for key, value in self._clean(data).items():
            setattr(company, key, value)
        self.db.commit()
        self.db.refresh(company)
        return company

    def delete(self, user_id: str, company_id: str) -> CascadeResult:
        """
        Delete a company and every record that hangs off it.

        Steps run in a fixed order inside one database transaction. If a
        step fails everything is rolled back and the failing step is
        reported; no orphaned children are left behind.
        """
        company = self.ownership.authorize_company(user_id, company_id)
        company_id = company.id
        result = CascadeResult(company_id=company_id)
        completed: List[str] = []
        step = None

        try:
            for step, run in self._cascade_steps():
                result.deleted[step] = run(company_id)
                completed.append(step)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Cascade delete of company %s failed at step %s (completed: %s)",
                company_id, step, ", ".join(completed) or "none",
            )
            raise CascadeDeleteError(step, completed)

        logger.info("Company %s deleted: %s", company_id, result.deleted)
        return result

    def _cascade_steps(self) -> List[Tuple[str, Callable[[str], int]]]:
        # Children before anything they reference
        return [
            ("transactions", self._delete_transactions),
            ("recurring", self._delete_recurring),
            ("quote_items", self._delete_quote_items),
            ("quotes", self._delete_quotes),
            ("quote_templates", self._delete_quote_templates),
            ("categories", self._delete_categories),
            ("company", self._delete_company),
        ]

    def _delete_transactions(self, company_id: str) -> int:
        return self.db.query(Transaction).filter(
            Transaction.company_id == company_id
        ).delete(synchronize_session=False)

    def _delete_recurring(self, company_id: str) -> int:
        return self.db.query(RecurringTransaction).filter(
            RecurringTransaction.company_id == company_id
        ).delete(synchronize_session=False)

    def _delete_quote_items(self, company_id: str) -> int:
        quote_ids = select(Quote.id).where(Quote.company_id == company_id)
        return self.db.query(QuoteItem).filter(
            QuoteItem.quote_id.in_(quote_ids)
        ).delete(synchronize_session=False)

    def _delete_quotes(self, company_id: str) -> int:
        return self.db.query(Quote).filter(
            Quote.company_id == company_id
        ).delete(synchronize_session=False)

    def _delete_quote_templates(self, company_id: str) -> int:
        return self.db.query(QuoteTemplate).filter(
            QuoteTemplate.company_id == company_id
        ).delete(synchronize_session=False)

    def _delete_categories(self, company_id: str) -> int:
        return self.db.query(Category).filter(
            Category.company_id == company_id
        ).delete(synchronize_session=False)

    def _delete_company(self, company_id: str) -> int:
        return self.db.query(Company).filter(
            Company.id == company_id
        ).delete(synchronize_session=False)

    def _clean(self, data: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = clean_fields(data, *TEXT_FIELDS)
        cleaned["cnpj"] = (data.get("cnpj") or "").strip() or None
        cleaned["email"] = (data.get("email") or "").strip().lower() or None
        cleaned["logo_url"] = (data.get("logo_url") or "").strip() or None
        if cleaned.get("state"):
            cleaned["state"] = cleaned["state"].upper()
        return cleaned
