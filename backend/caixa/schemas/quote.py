"""
Quote and quote template schemas.
"""

from datetime import datetime
from typing import List, Optional

from caixa.models.quote import DiscountType, QuoteStatus
from caixa.schemas.common import CamelModel


class QuoteItemInput(CamelModel):
    description: Optional[str] = None
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    category_id: Optional[str] = None


class QuoteFields(CamelModel):
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_document: Optional[str] = None
    client_address: Optional[str] = None
    client_city: Optional[str] = None
    client_state: Optional[str] = None
    client_zip_code: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    discount: Optional[float] = None
    discount_type: Optional[str] = None
    valid_until: Optional[str] = None
    template_id: Optional[str] = None
    items: Optional[List[QuoteItemInput]] = None


class QuoteCreate(QuoteFields):
    company_id: Optional[str] = None


class QuoteUpdate(QuoteFields):
    pass


class QuoteStatusUpdate(CamelModel):
    status: Optional[str] = None


class QuoteItemResponse(CamelModel):
    id: str
    description: str
    quantity: float
    unit_price: float
    total: float
    category_id: Optional[str] = None


class QuoteResponse(CamelModel):
    id: str
    company_id: str
    template_id: Optional[str] = None
    number: str
    client_name: str
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_document: Optional[str] = None
    client_address: Optional[str] = None
    client_city: Optional[str] = None
    client_state: Optional[str] = None
    client_zip_code: Optional[str] = None
    title: str
    description: Optional[str] = None
    notes: Optional[str] = None
    items: List[QuoteItemResponse]
    subtotal: float
    discount: float
    discount_type: DiscountType
    total: float
    status: QuoteStatus
    valid_until: str
    executed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class QuoteSummaryEntry(CamelModel):
    count: int
    total: float


class ComparisonItem(CamelModel):
    description: str
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    quoted: float
    executed: float
    variance: float


class QuoteComparison(CamelModel):
    """Quoted versus executed amounts for a quote."""
    quote_id: str
    quoted_total: float
    executed_total: float
    variance: float
    variance_percent: float
    items: List[ComparisonItem]


class QuoteTemplateCreate(CamelModel):
    company_id: Optional[str] = None
    name: Optional[str] = None
    header_text: Optional[str] = None
    footer_text: Optional[str] = None
    terms_text: Optional[str] = None
    primary_color: Optional[str] = None
    logo_url: Optional[str] = None
    is_default: Optional[bool] = None


class QuoteTemplateUpdate(CamelModel):
    name: Optional[str] = None
    header_text: Optional[str] = None
    footer_text: Optional[str] = None
    terms_text: Optional[str] = None
    primary_color: Optional[str] = None
    logo_url: Optional[str] = None
    is_default: Optional[bool] = None


class QuoteTemplateResponse(CamelModel):
    id: str
    company_id: str
    name: str
    header_text: Optional[str] = None
    footer_text: Optional[str] = None
    terms_text: Optional[str] = None
    primary_color: str
    logo_url: Optional[str] = None
    is_default: bool
    created_at: datetime
    updated_at: datetime
