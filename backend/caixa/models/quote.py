"""
Quote, quote item and quote template database models.
"""

import uuid
import enum
from datetime import datetime
from sqlalchemy import (
    Column, String, Integer, Boolean, Text, DateTime, Enum, Numeric,
    ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from caixa.database import Base


class QuoteStatus(str, enum.Enum):
    """Quote lifecycle states. EXECUTED is terminal."""
    DRAFT = "DRAFT"
    SENT = "SENT"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    EXECUTED = "EXECUTED"


class DiscountType(str, enum.Enum):
    PERCENT = "PERCENT"
    VALUE = "VALUE"


class Quote(Base):
    """A priced estimate sent to a client."""

    __tablename__ = "quotes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False)
    template_id = Column(String(36), ForeignKey("quote_templates.id"), nullable=True)
    number = Column(String(20), nullable=False)  # ORC-<year>-<seq>

    client_name = Column(String(100), nullable=False)
    client_email = Column(String(255), nullable=True)
    client_phone = Column(String(30), nullable=True)
    client_document = Column(String(20), nullable=True)
    client_address = Column(String(300), nullable=True)
    client_city = Column(String(100), nullable=True)
    client_state = Column(String(2), nullable=True)
    client_zip_code = Column(String(10), nullable=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    subtotal = Column(Numeric(14, 2), nullable=False, default=0)
    discount = Column(Numeric(14, 2), nullable=False, default=0)
    discount_type = Column(Enum(DiscountType), nullable=False, default=DiscountType.VALUE)
    total = Column(Numeric(14, 2), nullable=False, default=0)

    status = Column(Enum(QuoteStatus), nullable=False, default=QuoteStatus.DRAFT)
    valid_until = Column(String(10), nullable=False)  # YYYY-MM-DD
    executed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    items = relationship(
        "QuoteItem",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteItem.position",
    )

    __table_args__ = (
        UniqueConstraint("company_id", "number", name="uq_quote_number"),
        Index("idx_quote_company_status", "company_id", "status"),
    )


class QuoteItem(Base):
    """A line of a quote. Owned exclusively by its quote."""

    __tablename__ = "quote_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    quote_id = Column(String(36), ForeignKey("quotes.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    description = Column(String(200), nullable=False)
    quantity = Column(Numeric(14, 4), nullable=False)
    unit_price = Column(Numeric(14, 2), nullable=False)
    total = Column(Numeric(14, 2), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=True)

    quote = relationship("Quote", back_populates="items")

    __table_args__ = (
        Index("idx_quote_item_quote", "quote_id"),
    )


class QuoteTemplate(Base):
    """Branding and boilerplate applied to a company's quotes."""

    __tablename__ = "quote_templates"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False)
    name = Column(String(100), nullable=False)
    header_text = Column(Text, nullable=True)
    footer_text = Column(Text, nullable=True)
    terms_text = Column(Text, nullable=True)
    primary_color = Column(String(7), nullable=False, default="#3b82f6")
    logo_url = Column(String(500), nullable=True)
    is_default = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_quote_template_company", "company_id"),
    )
