"""
Email Queue Use Case DTOs
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class QueuedEmail(BaseModel):
    id: str
    tenant_id: Optional[str] = None
    to_email: str
    subject: str
    template: str
    context: Optional[dict] = None
    created_at: datetime


class PendingEmailsResponse(BaseModel):
    """Response for list pending emails use case"""

    emails: List[QueuedEmail]


class EmailDeliveryResponse(BaseModel):
    """Response for record email delivery use case"""

    id: str
    status: str
