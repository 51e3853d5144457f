"""Pydantic schemas for recurring transaction rules."""

from datetime import datetime
from typing import Optional

from caixa.schemas.common import CamelModel


class RecurringCreate(CamelModel):
    company_id: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[float] = None
    category: Optional[str] = None
    day_of_month: Optional[int] = None


class RecurringUpdate(CamelModel):
    description: Optional[str] = None
    amount: Optional[float] = None
    category: Optional[str] = None
    day_of_month: Optional[int] = None


class RecurringResponse(CamelModel):
    id: str
    company_id: str
    description: str
    amount: float
    category: str
    day_of_month: int
    created_at: datetime
    updated_at: datetime


class ProcessResponse(CamelModel):
    message: str
    created: int
