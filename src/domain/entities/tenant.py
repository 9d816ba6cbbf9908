"""
Tenant Entity

A merchant account on the platform.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class Tenant(SQLModel, table=True):
    """
    Tenant entity - a merchant account.

    Business Rules:
    - slug is unique and human readable
    - Payment sub-account (stripe_account_id) is attached once
    - founding_member_number is set iff is_founding_member is true
    - Founding status is assigned at most once and never revoked
    - stripe_subscription_id is recorded once per tenant lifetime
    - stripe_subscription_schedule_id is the annual fee schedule; the
      subscription it starts goes in stripe_subscription_id
    """

    __tablename__ = "tenants"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    slug: str = Field(max_length=100, unique=True, index=True)
    business_name: str = Field(max_length=255)
    contact_email: Optional[str] = Field(default=None, max_length=255)

    platform_fee_percent: Decimal = Field(
        default=Decimal("1.5"), max_digits=5, decimal_places=2
    )

    # Payment provider references
    stripe_account_id: Optional[str] = Field(default=None, max_length=255)
    stripe_customer_id: Optional[str] = Field(default=None, max_length=255)
    stripe_subscription_id: Optional[str] = Field(default=None, max_length=255)
    stripe_subscription_schedule_id: Optional[str] = Field(default=None, max_length=255)

    # Founding member program
    is_founding_member: bool = Field(default=False)
    founding_member_number: Optional[int] = Field(default=None, unique=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_tenant_founding", "is_founding_member"),)
