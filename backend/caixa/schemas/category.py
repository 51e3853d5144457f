"""
Category schemas.
"""

from datetime import datetime
from typing import Optional

from caixa.models.category import CategoryType
from caixa.schemas.common import CamelModel


class CategoryCreate(CamelModel):
    company_id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    budget: Optional[float] = None


class CategoryUpdate(CamelModel):
    name: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    budget: Optional[float] = None


class CategoryResponse(CamelModel):
    id: str
    company_id: str
    name: str
    type: CategoryType
    color: Optional[str] = None
    budget: float
    created_at: datetime
    updated_at: datetime
