"""
Stripe gateway

Enrichment lookups and subscription-schedule creation against the Stripe API.
The Stripe SDK is blocking, so each call runs in a worker thread bounded by
`timeout` seconds. Failures and timeouts surface as PaymentGatewayError so
callers can degrade or retry.
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Dict, Optional

import stripe

from src.app.services.payment_gateway import (
    PaymentGateway,
    PaymentGatewayError,
    PaymentIntentInfo,
    SubscriptionScheduleInfo,
)

logger = logging.getLogger(__name__)


def _reference_id(value) -> Optional[str]:
    # Stripe returns either an id or an expanded object
    if value is None or isinstance(value, str):
        return value
    return value.get("id")


class StripePaymentGateway(PaymentGateway):
    """PaymentGateway backed by the official Stripe SDK"""

    def __init__(self, api_key: str, max_network_retries: int = 2, timeout: float = 5.0):
        stripe.api_key = api_key
        stripe.max_network_retries = max_network_retries
        self.timeout = timeout

    async def _call(self, operation: str, fn, *args, **kwargs):
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(fn, *args, **kwargs), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Stripe {operation} timed out after {self.timeout}s")
            raise PaymentGatewayError(f"{operation} timed out") from e
        except stripe.StripeError as e:
            logger.error(f"Stripe {operation} failed: {e}")
            raise PaymentGatewayError(f"{operation} failed: {e}") from e

    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntentInfo:
        intent = await self._call(
            "payment_intent.retrieve", stripe.PaymentIntent.retrieve, payment_intent_id
        )
        shipping = intent.get("shipping")
        return PaymentIntentInfo(
            id=intent["id"],
            amount=int(intent["amount"]),
            customer_id=_reference_id(intent.get("customer")),
            shipping_name=shipping.get("name") if shipping else None,
        )

    async def retrieve_customer_name(self, customer_id: str) -> Optional[str]:
        customer = await self._call("customer.retrieve", stripe.Customer.retrieve, customer_id)
        if customer.get("deleted"):
            return None
        return customer.get("name")

    async def retrieve_subscription_trial_end(
        self, subscription_id: str
    ) -> Optional[datetime]:
        subscription = await self._call(
            "subscription.retrieve", stripe.Subscription.retrieve, subscription_id
        )
        trial_end = subscription.get("trial_end")
        if not trial_end:
            return None
        return datetime.fromtimestamp(trial_end, UTC)

    async def create_customer(
        self,
        email: Optional[str],
        name: str,
        metadata: Dict[str, str],
        idempotency_key: Optional[str] = None,
    ) -> str:
        params = {"name": name, "metadata": metadata}
        if idempotency_key:
            params["idempotency_key"] = idempotency_key
        if email:
            params["email"] = email
        customer = await self._call("customer.create", stripe.Customer.create, **params)
        return customer["id"]

    async def create_subscription_schedule(
        self,
        customer_id: str,
        annual_fee_price_id: str,
        free_tier_price_id: Optional[str],
        metadata: Dict[str, str],
        idempotency_key: Optional[str] = None,
    ) -> SubscriptionScheduleInfo:
        # Year one: a $0 price when configured, otherwise a trial phase
        if free_tier_price_id:
            first_year = {
                "items": [{"price": free_tier_price_id, "quantity": 1}],
                "iterations": 1,
            }
        else:
            first_year = {
                "items": [{"price": annual_fee_price_id, "quantity": 1}],
                "iterations": 1,
                "trial": True,
            }
        schedule = await self._call(
            "subscription_schedule.create",
            stripe.SubscriptionSchedule.create,
            customer=customer_id,
            start_date="now",
            end_behavior="release",
            phases=[
                first_year,
                {"items": [{"price": annual_fee_price_id, "quantity": 1}]},
            ],
            metadata=metadata,
            idempotency_key=idempotency_key,
        )
        return SubscriptionScheduleInfo(
            id=schedule["id"], subscription_id=_reference_id(schedule.get("subscription"))
        )
