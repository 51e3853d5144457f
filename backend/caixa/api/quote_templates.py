"""
Quote template API endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from caixa.database import get_db
from caixa.dependencies import get_current_user, limit_by_user
from caixa.errors import BadRequestError
from caixa.models import User
from caixa.ratelimit import MODERATE, STRICT
from caixa.schemas.quote import (
    QuoteTemplateCreate,
    QuoteTemplateResponse,
    QuoteTemplateUpdate,
)
from caixa.services.quote_template_service import QuoteTemplateService

router = APIRouter(prefix="/quote-templates", tags=["quote-templates"])


@router.get("", response_model=List[QuoteTemplateResponse])
def list_templates(
    company_id: Optional[str] = Query(None, alias="companyId"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not company_id:
        raise BadRequestError("companyId é obrigatório", code="MISSING_COMPANY_ID")
    return QuoteTemplateService(db).list_for_company(user.id, company_id)


@router.post(
    "",
    response_model=QuoteTemplateResponse,
    status_code=201,
    dependencies=[Depends(limit_by_user(MODERATE))],
)
def create_template(
    body: QuoteTemplateCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return QuoteTemplateService(db).create(user.id, body)


@router.get("/{template_id}", response_model=QuoteTemplateResponse)
def get_template(
    template_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return QuoteTemplateService(db).get_by_id(user.id, template_id)


@router.put("/{template_id}", response_model=QuoteTemplateResponse)
def update_template(
    template_id: str,
    body: QuoteTemplateUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return QuoteTemplateService(db).update(user.id, template_id, body)


@router.delete(
    "/{template_id}",
    status_code=204,
    dependencies=[Depends(limit_by_user(STRICT))],
)
def delete_template(
    template_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    QuoteTemplateService(db).delete(user.id, template_id)
    return None
