import logging
from typing import Optional

import stripe

from src.app.services.webhook_verifier import WebhookVerificationError, WebhookVerifier

logger = logging.getLogger(__name__)


class StripeWebhookVerifier(WebhookVerifier):
    """
    Verifies the Stripe-Signature header.

    The header carries a timestamp and HMAC-SHA256 signatures of
    "<timestamp>.<raw body>"; the SDK recomputes the HMAC with the endpoint
    secret, compares in constant time and enforces the timestamp tolerance.
    """

    def __init__(self, secret: str, tolerance: int = 300):
        self.secret = secret
        self.tolerance = tolerance

    def verify(self, payload: bytes, signature: Optional[str]) -> None:
        if not signature or not self.secret:
            raise WebhookVerificationError("Missing signature or secret")
        try:
            stripe.WebhookSignature.verify_header(
                payload.decode("utf-8"), signature, self.secret, self.tolerance
            )
        except (stripe.SignatureVerificationError, UnicodeDecodeError) as e:
            logger.error(f"Webhook signature verification failed: {e}")
            raise WebhookVerificationError(str(e)) from e
