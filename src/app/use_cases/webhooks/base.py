"""
Shared plumbing for checkout-session handlers.

Handlers own their transactions: each primary effect is committed in one
`async with uow` block, and secondary effects run afterwards in their own
block so their failure never rolls back the primary one.
"""

import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Result, Return
from src.app.services.bookkeeping import NumberingConflictError
from src.app.services.payment_gateway import (
    PaymentGateway,
    PaymentGatewayError,
    PaymentIntentInfo,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.events import CheckoutSession, EventEnvelope

from .dtos import HandlerStatus, WebhookOutcome

logger = logging.getLogger(__name__)

DEFAULT_CUSTOMER_NAME = "Customer"


def malformed(message: str) -> Result:
    return Return.err(Error("MALFORMED_PAYLOAD", message))


class CheckoutHandler(ABC):
    """Base class for one checkout.session.completed transaction type"""

    def __init__(self, uow: UnitOfWork, gateway: PaymentGateway):
        self.uow = uow
        self.gateway = gateway
        self.secondary_failures: List[str] = []

    @abstractmethod
    async def handle(
        self, envelope: EventEnvelope, session: CheckoutSession
    ) -> Result[WebhookOutcome]:
        pass

    def outcome(
        self,
        envelope: EventEnvelope,
        session: CheckoutSession,
        status: HandlerStatus,
        detail: Optional[str] = None,
    ) -> WebhookOutcome:
        return WebhookOutcome(
            event_id=envelope.id,
            event_type=envelope.type,
            transaction_type=session.transaction_type.value,
            status=status,
            detail=detail,
            secondary_failures=list(self.secondary_failures),
        )

    async def run_secondary(
        self, name: str, event_id: str, effect: Callable[[], Awaitable[None]]
    ) -> bool:
        """
        Run a secondary effect in its own transaction.

        Failures are logged for manual reconciliation and recorded on the
        handler; the delivery is still acknowledged.
        """
        try:
            async with self.uow:
                await effect()
                await self.uow.commit()
            return True
        except (SQLAlchemyError, PaymentGatewayError, NumberingConflictError) as e:
            logger.error(
                f"Secondary effect {name} failed for event {event_id}: {e} "
                f"- manual reconciliation required"
            )
            self.secondary_failures.append(name)
            return False

    async def retrieve_intent(
        self, session: CheckoutSession
    ) -> Optional[PaymentIntentInfo]:
        """Payment intent enrichment; None when unavailable"""
        if not session.payment_intent:
            return None
        try:
            return await self.gateway.retrieve_payment_intent(session.payment_intent)
        except PaymentGatewayError as e:
            logger.warning(
                f"Could not retrieve payment intent {session.payment_intent}: {e}"
            )
            return None

    async def resolve_customer_name(
        self, session: CheckoutSession, intent: Optional[PaymentIntentInfo]
    ) -> str:
        """Shipping name, then provider customer name, then email local part"""
        if intent is not None and intent.shipping_name:
            return intent.shipping_name

        customer_id = session.customer or (intent.customer_id if intent else None)
        if customer_id:
            try:
                name = await self.gateway.retrieve_customer_name(customer_id)
                if name:
                    return name
            except PaymentGatewayError as e:
                logger.warning(f"Could not retrieve customer {customer_id}: {e}")

        if session.customer_details is not None and session.customer_details.name:
            return session.customer_details.name

        email = session.email
        if email and "@" in email:
            return email.split("@", 1)[0]
        return DEFAULT_CUSTOMER_NAME
