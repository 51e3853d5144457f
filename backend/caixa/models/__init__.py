"""
Database models package.
"""

from caixa.models.user import User, RefreshToken
from caixa.models.company import Company
from caixa.models.category import Category, CategoryType
from caixa.models.transaction import Transaction, TransactionStatus
from caixa.models.recurring import RecurringTransaction
from caixa.models.quote import Quote, QuoteItem, QuoteTemplate, QuoteStatus, DiscountType

__all__ = [
    "User",
    "RefreshToken",
    "Company",
    "Category",
    "CategoryType",
    "Transaction",
    "TransactionStatus",
    "RecurringTransaction",
    "Quote",
    "QuoteItem",
    "QuoteTemplate",
    "QuoteStatus",
    "DiscountType",
]
