"""
EmailMessage Entity

Email dispatch queue row. Delivery itself belongs to the email service.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import EmailStatus


class EmailMessage(SQLModel, table=True):
    """
    EmailMessage entity - queued transactional email.

    Business Rules:
    - Enqueued as pending
    - Moves once to sent or failed, only from pending
    """

    __tablename__ = "email_queue"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    tenant_id: Optional[UUID] = Field(default=None, index=True)
    to_email: str = Field(max_length=255)
    subject: str = Field(max_length=255)
    template: str = Field(max_length=100)
    context: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    status: EmailStatus = Field(default=EmailStatus.pending)
    error: Optional[str] = Field(default=None, max_length=1000)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    sent_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_email_status", "status"),)
