"""
Receive Webhook Use Case

Ingress: authenticate the raw delivery, parse it, and hand it to dispatch.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from libs.result import Error, Result, Return
from src.app.services.payment_gateway import PaymentGateway
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.webhook_verifier import WebhookVerificationError, WebhookVerifier
from src.domain.events import EventEnvelope

from .dtos import WebhookOutcome
from .process_webhook_event_use_case import ProcessWebhookEventUseCase

logger = logging.getLogger(__name__)


class ReceiveWebhookUseCase:
    """
    Use case for one inbound provider notification.

    Business Rules:
    - Signature is verified over the exact raw bytes before any parsing
    - Unverified deliveries never touch the datastore
    """

    def __init__(
        self, uow: UnitOfWork, gateway: PaymentGateway, verifier: WebhookVerifier
    ):
        self.uow = uow
        self.gateway = gateway
        self.verifier = verifier

    async def execute(
        self, payload: bytes, signature: Optional[str]
    ) -> Result[WebhookOutcome]:
        """
        Execute webhook ingress.

        Args:
            payload: Raw request body
            signature: Value of the Stripe-Signature header

        Returns:
            Result with WebhookOutcome, or Error (UNAUTHENTICATED,
            MALFORMED_PAYLOAD, TRANSIENT_STORE_FAILURE,
            PAYMENT_PROVIDER_UNAVAILABLE)
        """
        try:
            self.verifier.verify(payload, signature)
        except WebhookVerificationError as e:
            logger.error(f"Webhook signature verification failed: {e}")
            return Return.err(Error("UNAUTHENTICATED", "Invalid webhook signature"))

        try:
            envelope = EventEnvelope.model_validate_json(payload)
        except ValidationError as e:
            logger.warning(f"Unparseable webhook payload: {e}")
            return Return.err(Error("MALFORMED_PAYLOAD", "Invalid event payload"))

        logger.info(f"Received webhook {envelope.id} ({envelope.type})")
        return await ProcessWebhookEventUseCase(self.uow, self.gateway).execute(envelope)
