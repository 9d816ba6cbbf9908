"""
Service Booking Handler

Confirms a single appointment paid through checkout.
"""

import logging

from libs.result import Result, Return
from src.app.services.mutation_applier import Transition
from src.domain.base import utcnow
from src.domain.entities import Appointment, AppointmentStatus
from src.domain.events import CheckoutSession, EventEnvelope

from .base import CheckoutHandler, malformed
from .dtos import HandlerStatus, WebhookOutcome

logger = logging.getLogger(__name__)

PAYABLE_STATUSES = [AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED]


class ServiceBookingHandler(CheckoutHandler):
    """
    Business Rules:
    - Transition: paid=false and status in (PENDING, CONFIRMED)
      -> status=CONFIRMED, paid=true
    - Lookup is scoped by tenant_id from metadata
    - A second delivery matches 0 rows and is acknowledged
    """

    async def handle(
        self, envelope: EventEnvelope, session: CheckoutSession
    ) -> Result[WebhookOutcome]:
        tenant_id = session.tenant_id
        appointment_id = session.meta_uuid("appointment_id", "appointmentId")
        if tenant_id is None or appointment_id is None:
            return malformed("SERVICE_BOOKING requires tenant_id and appointment_id")

        async with self.uow:
            changed = await self.uow.applier.apply(
                Transition(
                    entity=Appointment,
                    key={"tenant_id": tenant_id, "id": appointment_id},
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
                logger.info(f"Appointment {appointment_id} confirmed and paid")
                return Return.ok(self.outcome(envelope, session, HandlerStatus.applied))

            appointment = await self.uow.appointments.get_for_tenant(
                tenant_id, appointment_id
            )
            if appointment is None:
                logger.warning(
                    f"Appointment {appointment_id} not found for tenant {tenant_id}"
                )
                return Return.ok(
                    self.outcome(envelope, session, HandlerStatus.not_found, "appointment")
                )
            paid = appointment.paid
            current_status = appointment.status.value

        if paid:
            return Return.ok(self.outcome(envelope, session, HandlerStatus.already_applied))

        logger.error(
            f"Payment {session.payment_ref} received for {current_status} "
            f"appointment {appointment_id} - manual reconciliation required"
        )
        return Return.ok(
            self.outcome(
                envelope,
                session,
                HandlerStatus.ignored,
                f"appointment is {current_status}",
            )
        )
