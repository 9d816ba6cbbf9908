"""
Reconciliation Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AppointmentStatus,
    InvoiceStatus,
    RevenueCategory,
    EmailStatus,
    OutboxStatus,
    OutboxKind,
)

# Export all entities
from .tenant import Tenant
from .founding_member_counter import FoundingMemberCounter, GLOBAL_COUNTER_ID
from .catalog import Service, Product
from .appointment import Appointment
from .invoice import Invoice
from .revenue_entry import RevenueEntry
from .email_message import EmailMessage
from .outbox_message import OutboxMessage

__all__ = [
    # Enums
    "AppointmentStatus",
    "InvoiceStatus",
    "RevenueCategory",
    "EmailStatus",
    "OutboxStatus",
    "OutboxKind",
    # Entities
    "Tenant",
    "FoundingMemberCounter",
    "GLOBAL_COUNTER_ID",
    "Service",
    "Product",
    "Appointment",
    "Invoice",
    "RevenueEntry",
    "EmailMessage",
    "OutboxMessage",
]
