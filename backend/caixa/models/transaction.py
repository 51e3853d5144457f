"""
Transaction database model.
"""

import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, Enum, Numeric, ForeignKey, Index, UniqueConstraint
from caixa.database import Base


class TransactionStatus(str, enum.Enum):
    """Payment status enumeration."""
    PAGO = "PAGO"
    ABERTO = "ABERTO"


class Transaction(Base):
    """A monthly ledger entry for a company."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False)
    month = Column(String(20), nullable=False)  # Portuguese month name or "Acumulado"
    year = Column(Integer, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String(50), nullable=False)  # Free text, matches Category.name by convention
    status = Column(Enum(TransactionStatus), nullable=False, default=TransactionStatus.ABERTO)
    description = Column(String(200), nullable=True)
    # Set only on rows generated from a recurring rule: "<description>|<month>|<year>"
    recurrence_key = Column(String(240), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Indexes for common queries
    __table_args__ = (
        Index("idx_transaction_company_period", "company_id", "year", "month"),
        UniqueConstraint("company_id", "recurrence_key", name="uq_transaction_recurrence"),
    )
