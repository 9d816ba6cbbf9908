"""
Payment provider gateway - application layer contract

Read-only enrichment used by webhook handlers, plus the calls made by the
subscription-schedule consumer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional


class PaymentGatewayError(Exception):
    """Provider call failed or timed out"""


@dataclass(frozen=True)
class PaymentIntentInfo:
    id: str
    amount: int
    customer_id: Optional[str] = None
    shipping_name: Optional[str] = None


@dataclass(frozen=True)
class SubscriptionScheduleInfo:
    id: str
    # Subscription started by the schedule; None until its first phase begins
    subscription_id: Optional[str] = None


class PaymentGateway(ABC):
    @abstractmethod
    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntentInfo:
        pass

    @abstractmethod
    async def retrieve_customer_name(self, customer_id: str) -> Optional[str]:
        pass

    @abstractmethod
    async def retrieve_subscription_trial_end(
        self, subscription_id: str
    ) -> Optional[datetime]:
        pass

    @abstractmethod
    async def create_customer(
        self,
        email: Optional[str],
        name: str,
        metadata: Dict[str, str],
        idempotency_key: Optional[str] = None,
    ) -> str:
        """Create a platform-side billing customer. Returns its id."""
        pass

    @abstractmethod
    async def create_subscription_schedule(
        self,
        customer_id: str,
        annual_fee_price_id: str,
        free_tier_price_id: Optional[str],
        metadata: Dict[str, str],
        idempotency_key: Optional[str] = None,
    ) -> SubscriptionScheduleInfo:
        """Create the first-year-free annual fee schedule"""
        pass
