"""
Recurring Booking Handler

Confirms every appointment of a recurring series paid upfront in one charge.
"""

import logging

from libs.result import Result, Return
from src.app.services.mutation_applier import Transition
from src.domain.base import utcnow
from src.domain.entities import Appointment, AppointmentStatus
from src.domain.events import CheckoutSession, EventEnvelope

from .base import CheckoutHandler, malformed
from .dtos import HandlerStatus, WebhookOutcome
from .service_booking_handler import PAYABLE_STATUSES

logger = logging.getLogger(__name__)


class RecurringBookingHandler(CheckoutHandler):
    """
    Business Rules:
    - One conditional update over the whole group, scoped by tenant
    - Only unpaid, non-cancelled members are confirmed
    - Confirmed count is compared with appointment_count metadata
    """

    async def handle(
        self, envelope: EventEnvelope, session: CheckoutSession
    ) -> Result[WebhookOutcome]:
        tenant_id = session.tenant_id
        group_id = session.meta_uuid("recurring_group_id", "recurringGroupId")
        if tenant_id is None or group_id is None:
            return malformed("RECURRING_BOOKING requires tenant_id and recurring_group_id")

        async with self.uow:
            changed = await self.uow.applier.apply(
                Transition(
                    entity=Appointment,
                    key={"tenant_id": tenant_id, "recurring_group_id": group_id},
                    when={"paid": False, "status": PAYABLE_STATUSES},
                    values={
                        "status": AppointmentStatus.CONFIRMED,
                        "paid": True,
                        "stripe_payment_ref": session.payment_ref,
                        "updated_at": utcnow(),
                    },
                )
            )
            if changed:
                await self.uow.commit()

            members = await self.uow.appointments.list_group(tenant_id, group_id)

        if not members:
            logger.warning(f"Recurring group {group_id} not found for tenant {tenant_id}")
            return Return.ok(
                self.outcome(envelope, session, HandlerStatus.not_found, "recurring group")
            )

        if not changed:
            return Return.ok(self.outcome(envelope, session, HandlerStatus.already_applied))

        expected = session.meta("appointment_count", "appointmentCount")
        if expected is not None and expected != str(changed):
            logger.warning(
                f"Recurring group {group_id}: confirmed {changed} appointments, "
                f"checkout was for {expected}"
            )

        logger.info(f"Recurring group {group_id}: {changed} appointments confirmed")
        return Return.ok(
            self.outcome(
                envelope,
                session,
                HandlerStatus.applied,
                f"{changed} of {len(members)} appointments confirmed",
            )
        )
