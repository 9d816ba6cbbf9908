from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import OutboxMessage


class IOutboxRepository(ABC):
    """Outbox repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, message_id: UUID) -> Optional[OutboxMessage]:
        pass

    @abstractmethod
    async def get_by_dedupe_key(self, dedupe_key: str) -> Optional[OutboxMessage]:
        pass

    @abstractmethod
    async def list_pending_ids(self, stale_before: datetime, limit: int = 50) -> List[UUID]:
        """Pending messages, plus processing ones claimed before stale_before"""
        pass

    @abstractmethod
    async def claim(self, message_id: UUID, stale_before: datetime) -> bool:
        """
        pending -> processing, incrementing attempts and stamping claimed_at.

        A processing message claimed before stale_before was abandoned by a
        failed worker and is claimed again.

        Returns False when another worker already claimed the message.
        """
        pass

    @abstractmethod
    async def mark_done(self, message_id: UUID) -> bool:
        pass

    @abstractmethod
    async def release(self, message_id: UUID, error: str, max_attempts: int) -> bool:
        """processing -> pending, or -> failed once attempts reach max_attempts"""
        pass
