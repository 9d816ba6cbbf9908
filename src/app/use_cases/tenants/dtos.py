"""
Tenant Use Case DTOs (Data Transfer Objects)

Command and Response classes for the tenant domain.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from src.app.use_cases.founding_members.dtos import SlotStatus


# ============================================================================
# Command DTOs
# ============================================================================


class CreateTenantCommand(BaseModel):
    """Command for creating a merchant tenant"""

    slug: str = Field(min_length=3, max_length=100, pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$")
    business_name: str = Field(min_length=1, max_length=255)
    contact_email: Optional[EmailStr] = None
    platform_fee_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)


# ============================================================================
# Response DTOs
# ============================================================================


class CreateTenantResponse(BaseModel):
    """Response for create tenant use case"""

    tenant_id: str
    slug: str
    business_name: str
    platform_fee_percent: str
    is_founding_member: bool
    founding_member_number: Optional[int] = None
    founding_status: SlotStatus
