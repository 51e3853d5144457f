"""
Category database model.
"""

import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Enum, Numeric, ForeignKey, Index
from caixa.database import Base


class CategoryType(str, enum.Enum):
    """Category type enumeration."""
    EXPENSE = "EXPENSE"
    INCOME = "INCOME"


class Category(Base):
    """Category model, scoped to one company."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False)
    name = Column(String(50), nullable=False)
    type = Column(Enum(CategoryType), nullable=False, default=CategoryType.EXPENSE)
    color = Column(String(7), nullable=True)  # Hex color
    budget = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_category_company", "company_id"),
    )
