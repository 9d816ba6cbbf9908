"""
RevenueEntry Entity

Append-only ledger line written by reconciliation. Amounts are in minor units.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import RevenueCategory


class RevenueEntry(SQLModel, table=True):
    """
    RevenueEntry entity - one ledger line.

    Business Rules:
    - Immutable (never updated or deleted)
    - At most one entry per (tenant_id, stripe_payment_ref): this is the
      idempotency guard for ledger writes
    - receipt_number is unique within (tenant_id, category)
    """

    __tablename__ = "revenue"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    amount: int = Field(ge=0)
    platform_fee: int = Field(default=0, ge=0)
    category: RevenueCategory = Field(nullable=False)
    description: str = Field(max_length=500)
    notes: Optional[str] = Field(default=None, max_length=1000)

    invoice_id: Optional[UUID] = Field(default=None, foreign_key="invoices.id")
    product_id: Optional[UUID] = Field(default=None, foreign_key="products.id")
    invoice_number: Optional[str] = Field(default=None, max_length=50)
    receipt_number: Optional[str] = Field(default=None, max_length=50)

    customer_name: Optional[str] = Field(default=None, max_length=255)
    customer_email: Optional[str] = Field(default=None, max_length=255)

    entry_date: date = Field(default_factory=lambda: utcnow().date())
    stripe_payment_ref: str = Field(max_length=255)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_revenue_tenant_payment_ref", "tenant_id", "stripe_payment_ref", unique=True),
        Index(
            "idx_revenue_tenant_category_receipt",
            "tenant_id",
            "category",
            "receipt_number",
            unique=True,
        ),
    )
