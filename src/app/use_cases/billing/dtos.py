"""
Billing Use Case DTOs
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class BillingSettings(BaseModel):
    """Provider prices used for the annual connectivity fee"""

    annual_fee_price_id: str = ""
    free_tier_price_id: Optional[str] = None


class ScheduleStatus(str, Enum):
    created = "created"
    waived = "waived"
    exists = "exists"


class SubscriptionScheduleResponse(BaseModel):
    """Response for create subscription schedule use case"""

    tenant_id: str
    status: ScheduleStatus
    schedule_id: Optional[str] = None
    subscription_id: Optional[str] = None


class OutboxDispatchResponse(BaseModel):
    """Response for dispatch outbox use case"""

    processed: int = 0
    succeeded: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)
