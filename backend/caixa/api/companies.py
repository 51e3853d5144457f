"""
Company API endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from caixa.database import get_db
from caixa.dependencies import get_current_user, limit_by_user
from caixa.models import User
from caixa.ratelimit import MODERATE, STRICT
from caixa.schemas.company import (
    CascadeDeleteResponse,
    CompanyCreate,
    CompanyResponse,
    CompanyUpdate,
)
from caixa.services.company_service import CompanyService

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get("", response_model=List[CompanyResponse])
def list_companies(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the current user's companies."""
    return CompanyService(db).list_for_user(user.id)


@router.post(
    "",
    response_model=CompanyResponse,
    status_code=201,
    dependencies=[Depends(limit_by_user(MODERATE))],
)
def create_company(
    body: CompanyCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return CompanyService(db).create(user.id, body)


@router.get("/{company_id}", response_model=CompanyResponse)
def get_company(
    company_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return CompanyService(db).get_by_id(user.id, company_id)


@router.put("/{company_id}", response_model=CompanyResponse)
def update_company(
    company_id: str,
    body: CompanyUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return CompanyService(db).update(user.id, company_id, body)


@router.delete(
    "/{company_id}",
    response_model=CascadeDeleteResponse,
    dependencies=[Depends(limit_by_user(STRICT))],
)
def delete_company(
    company_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a company together with all of its data."""
    result = CompanyService(db).delete(user.id, company_id)
    return CascadeDeleteResponse(message="Empresa excluída com sucesso", deleted=result.deleted)
