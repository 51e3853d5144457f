"""
Company schemas.
"""

from datetime import datetime
from typing import Dict, Optional

from caixa.schemas.common import CamelModel


class CompanyBase(CamelModel):
    cnpj: Optional[str] = None
    legal_name: Optional[str] = None
    trade_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    logo_url: Optional[str] = None


class CompanyCreate(CompanyBase):
    name: Optional[str] = None


class CompanyUpdate(CompanyBase):
    name: Optional[str] = None


class CompanyResponse(CompanyBase):
    id: str
    user_id: str
    name: str
    created_at: datetime
    updated_at: datetime


class CascadeDeleteResponse(CamelModel):
    message: str
    deleted: Dict[str, int]
