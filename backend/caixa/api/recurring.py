"""
Recurring transaction API endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from caixa.database import get_db
from caixa.dependencies import get_current_user, limit_by_user
from caixa.errors import BadRequestError
from caixa.models import User
from caixa.ratelimit import HEAVY, MODERATE, STRICT
from caixa.schemas.recurring import (
    ProcessResponse,
    RecurringCreate,
    RecurringResponse,
    RecurringUpdate,
)
from caixa.services.recurring_service import RecurringService

router = APIRouter(prefix="/recurring", tags=["recurring"])


@router.get("", response_model=List[RecurringResponse])
def list_recurring(
    company_id: Optional[str] = Query(None, alias="companyId"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not company_id:
        raise BadRequestError("companyId é obrigatório", code="MISSING_COMPANY_ID")
    return RecurringService(db).list_for_company(user.id, company_id)


@router.post(
    "",
    response_model=RecurringResponse,
    status_code=201,
    dependencies=[Depends(limit_by_user(MODERATE))],
)
def create_recurring(
    body: RecurringCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return RecurringService(db).create(user.id, body)


@router.post(
    "/process",
    response_model=ProcessResponse,
    dependencies=[Depends(limit_by_user(HEAVY))],
)
def process_recurring(
    company_id: Optional[str] = Query(None, alias="companyId"),
    month: Optional[str] = None,
    year: Optional[int] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Generate this period's transactions from the company's rules. Safe to repeat."""
    created = RecurringService(db).process_for_period(user.id, company_id, month, year)
    return ProcessResponse(message="Processed", created=created)


@router.get("/{rule_id}", response_model=RecurringResponse)
def get_recurring(
    rule_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return RecurringService(db).get_by_id(user.id, rule_id)


@router.put("/{rule_id}", response_model=RecurringResponse)
def update_recurring(
    rule_id: str,
    body: RecurringUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return RecurringService(db).update(user.id, rule_id, body)


@router.delete(
    "/{rule_id}",
    status_code=204,
    dependencies=[Depends(limit_by_user(STRICT))],
)
def delete_recurring(
    rule_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    RecurringService(db).delete(user.id, rule_id)
    return None
