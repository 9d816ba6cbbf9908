"""
Appointment Entity

A booked service instance, optionally part of a weekly recurring series.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import AppointmentStatus


class Appointment(SQLModel, table=True):
    """
    Appointment entity - a booked service instance.

    Business Rules:
    - Created PENDING at booking time
    - Only reconciliation moves it to CONFIRMED / paid, never back
    - paid=True implies status=CONFIRMED
    - Members of a recurring group share tenant_id and recurring_group_id;
      the first occurrence is the parent of the others
    """

    __tablename__ = "appointments"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    service_id: Optional[UUID] = Field(default=None, foreign_key="services.id")
    customer_email: Optional[str] = Field(default=None, max_length=255)

    start_time: datetime = Field(sa_column=Column(DateTime, nullable=False))
    end_time: datetime = Field(sa_column=Column(DateTime, nullable=False))

    status: AppointmentStatus = Field(default=AppointmentStatus.PENDING)
    paid: bool = Field(default=False)
    stripe_payment_ref: Optional[str] = Field(default=None, max_length=255)

    # Recurring series
    recurring_group_id: Optional[UUID] = Field(default=None)
    parent_appointment_id: Optional[UUID] = Field(
        default=None, foreign_key="appointments.id"
    )
    recurring_pattern: Optional[str] = Field(default=None, max_length=20)
    recurring_end_date: Optional[date] = Field(default=None)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_appointment_tenant_group", "tenant_id", "recurring_group_id"),
        Index("idx_appointment_status", "status"),
    )
