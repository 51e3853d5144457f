"""
Tenant authorization.

Every service goes through :class:`OwnershipResolver` before touching an
existing tenant record. Checks run in a strict order:

1. ID format (malformed -> :class:`BadRequestError`)
2. existence (missing record or parent -> :class:`NotFoundError`)
3. ownership (company belongs to someone else -> :class:`ForbiddenError`)
"""

import logging
import uuid
from typing import List, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from caixa.errors import BadRequestError, ForbiddenError, NotFoundError
from caixa.models import Company

logger = logging.getLogger(__name__)

T = TypeVar("T")


def parse_id(raw: Optional[str], field: str = "id") -> str:
    """Return the canonical form of a record ID or raise BadRequestError."""
    if not raw or not isinstance(raw, str):
        raise BadRequestError(f"{field} inválido", code="INVALID_ID")
    try:
        parsed = uuid.UUID(raw.strip())
    except ValueError:
        raise BadRequestError(f"{field} inválido", code="INVALID_ID")
    return str(parsed)


def is_valid_id(raw: Optional[str]) -> bool:
    try:
        parse_id(raw)
    except BadRequestError:
        return False
    return True


class OwnershipResolver:
    """Resolves a record to its owning company and checks the acting user."""

    def __init__(self, db: Session):
        self.db = db

    def authorize_company(self, user_id: str, company_id: Optional[str]) -> Company:
        company_id = parse_id(company_id, "companyId")

        company = self.db.query(Company).filter(Company.id == company_id).first()
        if not company:
            raise NotFoundError("Empresa não encontrada")

        if company.user_id != user_id:
            logger.warning(
                "[SECURITY] user %s denied access to company %s", user_id, company_id
            )
            raise ForbiddenError("Acesso negado a esta empresa")

        return company

    def authorize_child(
        self,
        user_id: str,
        model: Type[T],
        child_id: Optional[str],
        label: str = "Registro",
    ) -> T:
        """
        Load a company-scoped record and authorize via its parent company.

        ``model`` must have a ``company_id`` column.
        """
        child_id = parse_id(child_id)

        record = self.db.query(model).filter(model.id == child_id).first()
        if not record:
            raise NotFoundError(f"{label} não encontrado")

        self.authorize_company(user_id, record.company_id)
        return record

    def company_ids_for_user(self, user_id: str) -> List[str]:
        rows = self.db.query(Company.id).filter(Company.user_id == user_id).all()
        return [row[0] for row in rows]
