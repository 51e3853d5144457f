"""
Pydantic schemas package.
"""

from caixa.schemas.common import CamelModel, Page, Pagination, MessageResponse
from caixa.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    RefreshRequest,
    UserResponse,
    AuthResponse,
    LogoutAllResponse,
)
from caixa.schemas.company import (
    CompanyCreate,
    CompanyUpdate,
    CompanyResponse,
    CascadeDeleteResponse,
)
from caixa.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from caixa.schemas.transaction import (
    TransactionCreate,
    TransactionUpdate,
    TransactionResponse,
    TransactionStats,
)
from caixa.schemas.recurring import (
    RecurringCreate,
    RecurringUpdate,
    RecurringResponse,
    ProcessResponse,
)
from caixa.schemas.quote import (
    QuoteItemInput,
    QuoteCreate,
    QuoteUpdate,
    QuoteStatusUpdate,
    QuoteResponse,
    QuoteComparison,
    QuoteTemplateCreate,
    QuoteTemplateUpdate,
    QuoteTemplateResponse,
)
from caixa.schemas.cnpj import CnpjInfo

__all__ = [
    "CamelModel",
    "Page",
    "Pagination",
    "MessageResponse",
    "RegisterRequest",
    "LoginRequest",
    "RefreshRequest",
    "UserResponse",
    "AuthResponse",
    "LogoutAllResponse",
    "CompanyCreate",
    "CompanyUpdate",
    "CompanyResponse",
    "CascadeDeleteResponse",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "TransactionCreate",
    "TransactionUpdate",
    "TransactionResponse",
    "TransactionStats",
    "RecurringCreate",
    "RecurringUpdate",
    "RecurringResponse",
    "ProcessResponse",
    "QuoteItemInput",
    "QuoteCreate",
    "QuoteUpdate",
    "QuoteStatusUpdate",
    "QuoteResponse",
    "QuoteComparison",
    "QuoteTemplateCreate",
    "QuoteTemplateUpdate",
    "QuoteTemplateResponse",
    "CnpjInfo",
]
