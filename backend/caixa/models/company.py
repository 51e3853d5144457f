"""
Company database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from caixa.database import Base


class Company(Base):
    """
    Root of a tenant's data tree.

    ``user_id`` is stamped at creation and never changes; every other
    tenant record hangs off a company through ``company_id``.
    """

    __tablename__ = "companies"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    name = Column(String(100), nullable=False)

    # Optional legal fields (CNPJ lookup fills most of these)
    cnpj = Column(String(18), nullable=True)
    legal_name = Column(String(200), nullable=True)
    trade_name = Column(String(200), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    address = Column(String(300), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(2), nullable=True)
    zip_code = Column(String(10), nullable=True)
    logo_url = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="companies")

    __table_args__ = (
        Index("idx_company_user", "user_id"),
    )
