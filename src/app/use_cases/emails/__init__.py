"""
Email Queue Use Cases
"""

from .dtos import EmailDeliveryResponse, PendingEmailsResponse, QueuedEmail
from .email_queue_use_cases import ListPendingEmailsUseCase, RecordEmailDeliveryUseCase

__all__ = [
    "ListPendingEmailsUseCase",
    "RecordEmailDeliveryUseCase",
    "PendingEmailsResponse",
    "EmailDeliveryResponse",
    "QueuedEmail",
]
