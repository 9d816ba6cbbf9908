"""
Process Webhook Event Use Case

Classifies a verified event and dispatches it to exactly one handler.
"""

import logging
from typing import Dict, Optional, Type

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Result, Return
from src.app.services.bookkeeping import NumberingConflictError
from src.app.services.payment_gateway import PaymentGateway
from src.app.services.unit_of_work import UnitOfWork
from src.domain.events import (
    EventEnvelope,
    EventKind,
    MalformedEventError,
    TransactionType,
)

from .account_onboarding_handler import AccountOnboardingHandler
from .base import CheckoutHandler
from .dtos import HandlerStatus, WebhookOutcome
from .invoice_payment_handler import InvoicePaymentHandler
from .product_purchase_handler import ProductPurchaseHandler
from .recurring_booking_handler import RecurringBookingHandler
from .service_booking_handler import ServiceBookingHandler
from .subscription_activation_handler import SubscriptionActivationHandler
from .terminal_payment_handler import TerminalPaymentHandler

logger = logging.getLogger(__name__)

CHECKOUT_HANDLERS: Dict[TransactionType, Type[CheckoutHandler]] = {
    TransactionType.connectivity_fee_subscription: SubscriptionActivationHandler,
    TransactionType.recurring_booking: RecurringBookingHandler,
    TransactionType.invoice_payment: InvoicePaymentHandler,
    TransactionType.service_booking: ServiceBookingHandler,
    TransactionType.product_purchase: ProductPurchaseHandler,
    TransactionType.terminal_payment: TerminalPaymentHandler,
}


class ProcessWebhookEventUseCase:
    """
    Use case for reconciling one verified provider event.

    Business Rules:
    - Unknown event kinds and transaction types are acknowledged, no effects
    - Malformed metadata for a known type is rejected (never retried into success)
    - Datastore failures are retryable; the open transaction is rolled back
    """

    def __init__(self, uow: UnitOfWork, gateway: PaymentGateway):
        self.uow = uow
        self.gateway = gateway

    async def execute(self, envelope: EventEnvelope) -> Result[WebhookOutcome]:
        try:
            return await self._dispatch(envelope)
        except (MalformedEventError, ValidationError) as e:
            logger.warning(f"Malformed event {envelope.id} ({envelope.type}): {e}")
            return Return.err(Error("MALFORMED_PAYLOAD", str(e)))
        except (SQLAlchemyError, NumberingConflictError) as e:
            logger.error(f"Datastore failure processing event {envelope.id}: {e}")
            return Return.err(
                Error("TRANSIENT_STORE_FAILURE", "Datastore unavailable, retry later")
            )

    async def _dispatch(self, envelope: EventEnvelope) -> Result[WebhookOutcome]:
        kind = envelope.kind

        if kind == EventKind.checkout_session_completed:
            session = envelope.checkout_session()
            transaction_type = session.transaction_type
            handler_class = CHECKOUT_HANDLERS.get(transaction_type)
            if handler_class is None:
                logger.warning(
                    f"Event {envelope.id}: unknown transaction type "
                    f"{session.meta('type')!r}, acknowledged"
                )
                return Return.ok(self._ignored(envelope, transaction_type.value))

            handler = handler_class(self.uow, self.gateway)
            return await handler.handle(envelope, session)

        if kind == EventKind.account_updated:
            handler = AccountOnboardingHandler(self.uow)
            return await handler.handle(envelope, envelope.connect_account())

        logger.info(f"Event {envelope.id}: unhandled type {envelope.type}, acknowledged")
        return Return.ok(self._ignored(envelope))

    @staticmethod
    def _ignored(
        envelope: EventEnvelope, transaction_type: Optional[str] = None
    ) -> WebhookOutcome:
        return WebhookOutcome(
            event_id=envelope.id,
            event_type=envelope.type,
            transaction_type=transaction_type,
            status=HandlerStatus.ignored,
        )
