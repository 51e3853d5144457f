"""
Transaction API endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from caixa.database import get_db
from caixa.dependencies import get_current_user, limit_by_user
from caixa.models import User
from caixa.ratelimit import MODERATE, STRICT
from caixa.schemas.common import Page
from caixa.schemas.transaction import (
    TransactionCreate,
    TransactionResponse,
    TransactionStats,
    TransactionUpdate,
)
from caixa.services.transaction_service import TransactionService

router = APIRouter(tags=["transactions"])


@router.get("/transactions", response_model=Page[TransactionResponse])
def list_transactions(
    company_id: Optional[str] = Query(None, alias="companyId"),
    page: Optional[str] = None,
    limit: Optional[str] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    List transactions, newest period first.

    Without ``companyId`` the list spans all of the user's companies.
    ``page`` and ``limit`` are clamped rather than rejected.
    """
    rows, pagination = TransactionService(db).list_paginated(user.id, company_id, page, limit)
    return {"data": rows, "pagination": pagination}


@router.post(
    "/transactions",
    response_model=TransactionResponse,
    status_code=201,
    dependencies=[Depends(limit_by_user(MODERATE))],
)
def create_transaction(
    body: TransactionCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return TransactionService(db).create(user.id, body)


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return TransactionService(db).get_by_id(user.id, transaction_id)


@router.put("/transactions/{transaction_id}", response_model=TransactionResponse)
def update_transaction(
    transaction_id: str,
    body: TransactionUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return TransactionService(db).update(user.id, transaction_id, body)


@router.delete(
    "/transactions/{transaction_id}",
    status_code=204,
    dependencies=[Depends(limit_by_user(STRICT))],
)
def delete_transaction(
    transaction_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    TransactionService(db).delete(user.id, transaction_id)
    return None


@router.patch("/transactions/{transaction_id}/toggle-status", response_model=TransactionResponse)
def toggle_transaction_status(
    transaction_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Flip a transaction between PAGO and ABERTO."""
    return TransactionService(db).toggle_status(user.id, transaction_id)


@router.get("/stats", response_model=TransactionStats)
def transaction_stats(
    company_id: Optional[str] = Query(None, alias="companyId"),
    month: Optional[str] = None,
    year: Optional[int] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Paid, open and total amounts."""
    return TransactionService(db).get_stats(user.id, company_id, month, year)
