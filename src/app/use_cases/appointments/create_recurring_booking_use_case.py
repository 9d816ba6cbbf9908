"""
Create Recurring Booking Use Case

Expands a weekly series into PENDING appointments and quotes one upfront charge.
"""

import logging
from uuid import uuid4

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Appointment, AppointmentStatus
from src.domain.events import TransactionType
from src.domain.recurrence import RecurrenceError, expand_weekly_series, quote_series

from .dtos import CreateRecurringBookingCommand, OccurrenceInfo, RecurringBookingResponse

logger = logging.getLogger(__name__)


class CreateRecurringBookingUseCase:
    """
    Use case for recurring (weekly) bookings.

    Business Rules:
    - Tenant must have a payment sub-account to receive the transfer
    - Service is looked up scoped to the tenant
    - All occurrences share one recurring_group_id; the first is the parent
    - The application fee is the per-occurrence fee times the count
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, command: CreateRecurringBookingCommand
    ) -> Result[RecurringBookingResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(command.tenant_id)
            if tenant is None:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            if not tenant.stripe_account_id:
                return Return.err(
                    Error(
                        "PAYMENTS_NOT_ENABLED",
                        "Tenant has not completed payment onboarding",
                    )
                )

            service = await self.uow.catalog.get_service(
                command.tenant_id, command.service_id
            )
            if service is None:
                return Return.err(Error("SERVICE_NOT_FOUND", "Service not found"))

            try:
                occurrences = expand_weekly_series(
                    command.start_date,
                    command.start_time,
                    command.end_date,
                    service.duration_minutes,
                    command.recurring_pattern,
                )
            except RecurrenceError as e:
                return Return.err(Error("INVALID_RECURRENCE", str(e)))

            if not occurrences:
                return Return.err(
                    Error("INVALID_RECURRENCE", "End date is before the first occurrence")
                )

            group_id = uuid4()
            parent_id = uuid4()
            appointments = [
                Appointment(
                    id=parent_id if index == 0 else uuid4(),
                    tenant_id=command.tenant_id,
                    service_id=command.service_id,
                    customer_email=command.customer_email,
                    start_time=occurrence.start,
                    end_time=occurrence.end,
                    status=AppointmentStatus.PENDING,
                    recurring_group_id=group_id,
                    parent_appointment_id=None if index == 0 else parent_id,
                    recurring_pattern=command.recurring_pattern,
                    recurring_end_date=command.end_date,
                )
                for index, occurrence in enumerate(occurrences)
            ]
            quote = quote_series(
                len(appointments), service.price, tenant.platform_fee_percent
            )
            transfer_destination = tenant.stripe_account_id
            occurrence_infos = [
                OccurrenceInfo(
                    appointment_id=str(a.id), start_time=a.start_time, end_time=a.end_time
                )
                for a in appointments
            ]

            await self.uow.appointments.create_many(appointments)
            await self.uow.commit()

        logger.info(
            f"Recurring group {group_id} created with {quote.occurrence_count} "
            f"appointments for tenant {command.tenant_id}"
        )

        return Return.ok(
            RecurringBookingResponse(
                recurring_group_id=str(group_id),
                appointment_count=quote.occurrence_count,
                appointments=occurrence_infos,
                unit_amount=quote.unit_amount,
                total_amount=quote.total_amount,
                application_fee=quote.application_fee,
                transfer_destination=transfer_destination,
                checkout_metadata={
                    "type": TransactionType.recurring_booking.value,
                    "tenant_id": str(command.tenant_id),
                    "recurring_group_id": str(group_id),
                    "appointment_count": str(quote.occurrence_count),
                },
            )
        )
