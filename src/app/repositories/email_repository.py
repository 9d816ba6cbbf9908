from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from src.domain.entities import EmailMessage


class IEmailRepository(ABC):
    """Email dispatch queue - application layer"""

    @abstractmethod
    async def enqueue(self, message: EmailMessage) -> EmailMessage:
        """Add a pending message"""
        pass

    @abstractmethod
    async def list_pending(self, limit: int = 50) -> List[EmailMessage]:
        pass

    @abstractmethod
    async def mark_sent(self, message_id: UUID) -> bool:
        """pending -> sent. Returns False if the message was not pending"""
        pass

    @abstractmethod
    async def mark_failed(self, message_id: UUID, error: str) -> bool:
        """pending -> failed. Returns False if the message was not pending"""
        pass
