"""
Transaction schemas.
"""

from datetime import datetime
from typing import Optional

from caixa.models.transaction import TransactionStatus
from caixa.schemas.common import CamelModel


class TransactionCreate(CamelModel):
    company_id: Optional[str] = None
    month: Optional[str] = None
    year: Optional[int] = None
    amount: Optional[float] = None
    category: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None


class TransactionUpdate(CamelModel):
    month: Optional[str] = None
    year: Optional[int] = None
    amount: Optional[float] = None
    category: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None


class TransactionResponse(CamelModel):
    id: str
    company_id: str
    month: str
    year: int
    amount: float
    category: str
    status: TransactionStatus
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TransactionStats(CamelModel):
    """Paid/open totals for a filter."""
    paid: float
    open: float
    total: float
