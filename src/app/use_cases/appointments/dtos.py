"""
Appointment Use Case DTOs
"""

from datetime import date, datetime, time
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from src.domain.recurrence import WEEKLY


class CreateRecurringBookingCommand(BaseModel):
    """Command for booking a weekly recurring series"""

    tenant_id: UUID
    service_id: UUID
    start_date: date
    start_time: time
    end_date: date
    recurring_pattern: str = Field(default=WEEKLY)
    customer_email: Optional[EmailStr] = None


class OccurrenceInfo(BaseModel):
    appointment_id: str
    start_time: datetime
    end_time: datetime


class RecurringBookingResponse(BaseModel):
    """Series created PENDING plus the upfront checkout quote"""

    recurring_group_id: str
    appointment_count: int
    appointments: List[OccurrenceInfo]
    unit_amount: int
    total_amount: int
    application_fee: int
    transfer_destination: str
    checkout_metadata: Dict[str, str]
