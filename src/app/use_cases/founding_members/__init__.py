"""
Founding Member Use Cases
"""

from .assign_founding_slot_use_case import AssignFoundingSlotUseCase
from .dtos import FoundingAvailabilityResponse, FoundingSlotResponse, SlotStatus
from .get_founding_availability_use_case import GetFoundingAvailabilityUseCase

__all__ = [
    "AssignFoundingSlotUseCase",
    "GetFoundingAvailabilityUseCase",
    "FoundingSlotResponse",
    "FoundingAvailabilityResponse",
    "SlotStatus",
]
