"""
Billing Use Cases

Platform-side connectivity fee and the outbox that defers it.
"""

from .create_subscription_schedule_use_case import CreateSubscriptionScheduleUseCase
from .dispatch_outbox_use_case import DispatchOutboxUseCase
from .dtos import (
    BillingSettings,
    OutboxDispatchResponse,
    ScheduleStatus,
    SubscriptionScheduleResponse,
)

__all__ = [
    "CreateSubscriptionScheduleUseCase",
    "BillingSettings",
    "DispatchOutboxUseCase",
    "SubscriptionScheduleResponse",
    "OutboxDispatchResponse",
    "ScheduleStatus",
]
