"""
Invoice Entity

A billable document. Amounts are in minor units.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import InvoiceStatus


class Invoice(SQLModel, table=True):
    """
    Invoice entity - a billable document.

    Business Rules:
    - invoice_number is unique within a tenant
    - total = subtotal + tax_amount and amount_paid <= total
    - Status never regresses from paid
    - Marked paid exactly once by reconciliation
    - Terminal sales create the invoice already paid, keyed by the
      checkout session id (unique within a tenant)
    """

    __tablename__ = "invoices"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    invoice_number: str = Field(max_length=50)

    customer_name: str = Field(default="Customer", max_length=255)
    customer_email: Optional[str] = Field(default=None, max_length=255)

    status: InvoiceStatus = Field(default=InvoiceStatus.draft)

    # [{"description", "quantity", "unit_price", "total"}]
    line_items: list = Field(default_factory=list, sa_column=Column(JSON))
    subtotal: int = Field(default=0, ge=0)
    tax_amount: int = Field(default=0, ge=0)
    total_amount: int = Field(default=0, ge=0)
    amount_paid: int = Field(default=0, ge=0)

    due_date: Optional[date] = Field(default=None)
    paid_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Payment provider references
    stripe_checkout_session_id: Optional[str] = Field(default=None, max_length=255)
    stripe_payment_intent_id: Optional[str] = Field(default=None, max_length=255)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_invoice_tenant_number", "tenant_id", "invoice_number", unique=True),
        Index(
            "idx_invoice_tenant_checkout_session",
            "tenant_id",
            "stripe_checkout_session_id",
            unique=True,
        ),
        Index("idx_invoice_status", "status"),
    )
