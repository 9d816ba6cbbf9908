"""
Webhook Reconciliation Use Cases

Ingress, classification and one handler per business transaction type.
"""

from .account_onboarding_handler import AccountOnboardingHandler, subscription_schedule_key
from .dtos import HandlerStatus, WebhookOutcome
from .invoice_payment_handler import InvoicePaymentHandler
from .process_webhook_event_use_case import ProcessWebhookEventUseCase
from .product_purchase_handler import ProductPurchaseHandler
from .receive_webhook_use_case import ReceiveWebhookUseCase
from .recurring_booking_handler import RecurringBookingHandler
from .service_booking_handler import ServiceBookingHandler
from .subscription_activation_handler import SubscriptionActivationHandler
from .terminal_payment_handler import TerminalPaymentHandler

__all__ = [
    "ReceiveWebhookUseCase",
    "ProcessWebhookEventUseCase",
    "ServiceBookingHandler",
    "RecurringBookingHandler",
    "InvoicePaymentHandler",
    "ProductPurchaseHandler",
    "TerminalPaymentHandler",
    "SubscriptionActivationHandler",
    "AccountOnboardingHandler",
    "subscription_schedule_key",
    "HandlerStatus",
    "WebhookOutcome",
]
