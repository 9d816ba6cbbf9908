"""
Appointment Use Cases
"""

from .create_recurring_booking_use_case import CreateRecurringBookingUseCase
from .dtos import CreateRecurringBookingCommand, OccurrenceInfo, RecurringBookingResponse

__all__ = [
    "CreateRecurringBookingUseCase",
    "CreateRecurringBookingCommand",
    "RecurringBookingResponse",
    "OccurrenceInfo",
]
