"""
Webhook Use Case DTOs

Outcome of one delivery, returned to the provider as the 200 response body.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class HandlerStatus(str, Enum):
    """What a delivery did to the datastore"""

    applied = "applied"
    already_applied = "already_applied"
    not_found = "not_found"
    ignored = "ignored"


class WebhookOutcome(BaseModel):
    """Response for a processed webhook delivery"""

    event_id: str
    event_type: str
    transaction_type: Optional[str] = None
    status: HandlerStatus
    detail: Optional[str] = None
    secondary_failures: List[str] = Field(default_factory=list)
    outbox_message_ids: List[str] = Field(default_factory=list)
