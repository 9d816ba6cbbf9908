"""
OutboxMessage Entity

Deferred action written in the same transaction as the change that caused it.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import OutboxKind, OutboxStatus


class OutboxMessage(SQLModel, table=True):
    """
    OutboxMessage entity - a deferred, independently retried action.

    Business Rules:
    - dedupe_key is unique, so replays enqueue the action once
    - Claimed with a conditional pending -> processing update; a claim older
      than the lease is treated as abandoned and can be claimed again
    - Returned to pending on failure until attempts run out, then failed
    """

    __tablename__ = "outbox"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    kind: OutboxKind = Field(nullable=False)
    dedupe_key: str = Field(max_length=255, unique=True, index=True)
    payload: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    status: OutboxStatus = Field(default=OutboxStatus.pending)
    attempts: int = Field(default=0)
    last_error: Optional[str] = Field(default=None, max_length=1000)

    claimed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    processed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_outbox_status", "status"),)
