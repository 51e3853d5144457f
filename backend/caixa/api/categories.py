"""
Category API endpoints.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from caixa.database import get_db
from caixa.dependencies import get_current_user, limit_by_user
from caixa.errors import BadRequestError
from caixa.models import User
from caixa.ratelimit import MODERATE, STRICT
from caixa.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from caixa.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


def _require_company(company_id: Optional[str]) -> str:
    if not company_id:
        raise BadRequestError("companyId é obrigatório", code="MISSING_COMPANY_ID")
    return company_id


@router.get("", response_model=List[CategoryResponse])
def list_categories(
    company_id: Optional[str] = Query(None, alias="companyId"),
    category_type: Optional[str] = Query(None, alias="type"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List a company's categories, optionally filtered by type."""
    return CategoryService(db).list_for_company(user.id, _require_company(company_id), category_type)


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=201,
    dependencies=[Depends(limit_by_user(MODERATE))],
)
def create_category(
    body: CategoryCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return CategoryService(db).create(user.id, body)


@router.get("/budget", response_model=Dict[str, float])
def category_budget(
    company_id: Optional[str] = Query(None, alias="companyId"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Total budget of a company's categories, overall and per type."""
    return CategoryService(db).budget_summary(user.id, _require_company(company_id))


@router.post(
    "/defaults",
    response_model=List[CategoryResponse],
    status_code=201,
    dependencies=[Depends(limit_by_user(MODERATE))],
)
def seed_default_categories(
    company_id: Optional[str] = Query(None, alias="companyId"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create the default category set for a company."""
    return CategoryService(db).seed_defaults(user.id, _require_company(company_id))


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(
    category_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return CategoryService(db).get_by_id(user.id, category_id)


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: str,
    body: CategoryUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return CategoryService(db).update(user.id, category_id, body)


@router.delete(
    "/{category_id}",
    status_code=204,
    dependencies=[Depends(limit_by_user(STRICT))],
)
def delete_category(
    category_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    CategoryService(db).delete(user.id, category_id)
    return None
