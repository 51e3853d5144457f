"""
Quote API endpoints.
"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query

from caixa.dependencies import get_current_user, get_quote_service, limit_by_user
from caixa.errors import BadRequestError
from caixa.models import User
from caixa.ratelimit import MODERATE, STRICT
from caixa.schemas.common import Page
from caixa.schemas.quote import (
    QuoteComparison,
    QuoteCreate,
    QuoteResponse,
    QuoteStatusUpdate,
    QuoteSummaryEntry,
    QuoteUpdate,
)
from caixa.services.quote_service import QuoteService

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.get("", response_model=Page[QuoteResponse])
def list_quotes(
    company_id: Optional[str] = Query(None, alias="companyId"),
    status: Optional[str] = None,
    expired: bool = False,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user: User = Depends(get_current_user),
    quotes: QuoteService = Depends(get_quote_service),
):
    """List a company's quotes, optionally by status or only expired open ones."""
    if not company_id:
        raise BadRequestError("companyId é obrigatório", code="MISSING_COMPANY_ID")
    rows, pagination = quotes.list_for_company(user.id, company_id, status, expired, page, limit)
    return {"data": rows, "pagination": pagination}


@router.post(
    "",
    response_model=QuoteResponse,
    status_code=201,
    dependencies=[Depends(limit_by_user(MODERATE))],
)
def create_quote(
    body: QuoteCreate,
    user: User = Depends(get_current_user),
    quotes: QuoteService = Depends(get_quote_service),
):
    return quotes.create(user.id, body)


@router.get("/summary", response_model=Dict[str, QuoteSummaryEntry])
def quote_summary(
    company_id: Optional[str] = Query(None, alias="companyId"),
    user: User = Depends(get_current_user),
    quotes: QuoteService = Depends(get_quote_service),
):
    """Count and total value per status."""
    if not company_id:
        raise BadRequestError("companyId é obrigatório", code="MISSING_COMPANY_ID")
    return quotes.summary(user.id, company_id)


@router.get("/{quote_id}", response_model=QuoteResponse)
def get_quote(
    quote_id: str,
    user: User = Depends(get_current_user),
    quotes: QuoteService = Depends(get_quote_service),
):
    return quotes.get_by_id(user.id, quote_id)


@router.put("/{quote_id}", response_model=QuoteResponse)
def update_quote(
    quote_id: str,
    body: QuoteUpdate,
    user: User = Depends(get_current_user),
    quotes: QuoteService = Depends(get_quote_service),
):
    """Edit a quote. Executed quotes are read-only."""
    return quotes.update(user.id, quote_id, body)


@router.delete(
    "/{quote_id}",
    status_code=204,
    dependencies=[Depends(limit_by_user(STRICT))],
)
def delete_quote(
    quote_id: str,
    user: User = Depends(get_current_user),
    quotes: QuoteService = Depends(get_quote_service),
):
    quotes.delete(user.id, quote_id)
    return None


@router.patch("/{quote_id}/status", response_model=QuoteResponse)
def update_quote_status(
    quote_id: str,
    body: QuoteStatusUpdate,
    user: User = Depends(get_current_user),
    quotes: QuoteService = Depends(get_quote_service),
):
    return quotes.update_status(user.id, quote_id, body.status)


@router.post(
    "/{quote_id}/duplicate",
    response_model=QuoteResponse,
    status_code=201,
    dependencies=[Depends(limit_by_user(MODERATE))],
)
def duplicate_quote(
    quote_id: str,
    user: User = Depends(get_current_user),
    quotes: QuoteService = Depends(get_quote_service),
):
    """Copy a quote into a new DRAFT with its own number."""
    return quotes.duplicate(user.id, quote_id)


@router.get("/{quote_id}/comparison", response_model=QuoteComparison)
def quote_comparison(
    quote_id: str,
    user: User = Depends(get_current_user),
    quotes: QuoteService = Depends(get_quote_service),
):
    return quotes.comparison(user.id, quote_id)
