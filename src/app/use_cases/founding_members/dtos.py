"""
Founding Member Use Case DTOs
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class SlotStatus(str, Enum):
    assigned = "assigned"
    already_assigned = "already_assigned"
    exhausted = "exhausted"


class FoundingSlotResponse(BaseModel):
    """Response for assign founding slot use case"""

    tenant_id: str
    status: SlotStatus
    founding_member_number: Optional[int] = None
    remaining_spots: int


class FoundingAvailabilityResponse(BaseModel):
    """Response for founding member availability use case"""

    is_available: bool
    remaining_spots: int
    current_founding_members: int
    limit: int
