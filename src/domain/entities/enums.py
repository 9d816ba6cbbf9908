"""
Reconciliation Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class AppointmentStatus(str, Enum):
    """Appointment booking status"""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status (never regresses from paid)"""

    draft = "draft"
    sent = "sent"
    partially_paid = "partially_paid"
    paid = "paid"


class RevenueCategory(str, Enum):
    """Ledger category of a revenue entry"""

    invoice = "invoice"
    direct_sales = "direct_sales"
    daily_sales = "daily_sales"


class EmailStatus(str, Enum):
    """Email dispatch queue status"""

    pending = "pending"
    sent = "sent"
    failed = "failed"


class OutboxStatus(str, Enum):
    """Outbox message processing status"""

    pending = "pending"
    processing = "processing"
    done = "done"
    failed = "failed"


class OutboxKind(str, Enum):
    """Deferred actions carried by the outbox"""

    create_subscription_schedule = "create_subscription_schedule"
