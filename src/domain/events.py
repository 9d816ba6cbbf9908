"""
Payment provider event envelope and classification.

Inbound notifications are parsed into an EventEnvelope after the transport
signature is verified. Classification is a closed set of variants: anything
outside it maps to `unknown` and is acknowledged without side effects.
"""

from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    """Top-level provider event types the engine reacts to"""

    checkout_session_completed = "checkout.session.completed"
    account_updated = "account.updated"
    unknown = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "EventKind":
        try:
            return cls(value)
        except ValueError:
            return cls.unknown


class TransactionType(str, Enum):
    """Business transaction tag carried in checkout session metadata"""

    connectivity_fee_subscription = "connectivity_fee_subscription"
    recurring_booking = "RECURRING_BOOKING"
    invoice_payment = "invoice_payment"
    service_booking = "SERVICE_BOOKING"
    product_purchase = "PRODUCT_PURCHASE"
    terminal_payment = "TERMINAL_PAYMENT"
    unknown = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> "TransactionType":
        try:
            return cls(value)
        except ValueError:
            return cls.unknown


class MalformedEventError(ValueError):
    """Payload that will never process correctly, however often it is retried"""


class _ProviderObject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def meta(self, *keys: str) -> Optional[str]:
        """First non-empty metadata value among keys, as a string"""
        for key in keys:
            value = self.metadata.get(key)
            if value not in (None, ""):
                return str(value)
        return None

    def meta_uuid(self, *keys: str) -> Optional[UUID]:
        value = self.meta(*keys)
        if value is None:
            return None
        try:
            return UUID(value)
        except ValueError:
            raise MalformedEventError(f"Metadata {keys[0]} is not a valid id: {value}")

    @property
    def tenant_id(self) -> Optional[UUID]:
        return self.meta_uuid("tenant_id", "tenantId")


class CustomerDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    name: Optional[str] = None


class CheckoutSession(_ProviderObject):
    """Completed checkout session (payload of checkout.session.completed)"""

    payment_intent: Optional[str] = None
    subscription: Optional[str] = None
    customer: Optional[str] = None
    customer_email: Optional[str] = None
    customer_details: Optional[CustomerDetails] = None
    amount_total: Optional[int] = None

    @property
    def transaction_type(self) -> TransactionType:
        return TransactionType.parse(self.meta("type"))

    @property
    def payment_ref(self) -> str:
        """Natural key of the captured payment"""
        return self.payment_intent or self.id

    @property
    def email(self) -> Optional[str]:
        if self.customer_email:
            return self.customer_email
        if self.customer_details is not None:
            return self.customer_details.email
        return None


class ConnectAccount(_ProviderObject):
    """Connected merchant account (payload of account.updated)"""

    details_submitted: bool = False

    @property
    def flagged_founding_member(self) -> bool:
        return self.meta("is_founding_member") == "true"


class EventData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    object: Dict[str, Any]


class EventEnvelope(BaseModel):
    """Verified, parsed representation of one provider notification"""

    model_config = ConfigDict(extra="ignore")

    id: str
    type: str
    created: Optional[int] = None
    livemode: bool = False
    data: EventData

    @property
    def kind(self) -> EventKind:
        return EventKind.parse(self.type)

    @property
    def metadata(self) -> Dict[str, Any]:
        return self.data.object.get("metadata") or {}

    def checkout_session(self) -> CheckoutSession:
        return CheckoutSession.model_validate(self.data.object)

    def connect_account(self) -> ConnectAccount:
        return ConnectAccount.model_validate(self.data.object)
