from typing import List
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.email_repository import IEmailRepository
from src.domain.base import utcnow
from src.domain.entities import EmailMessage, EmailStatus


class EmailRepository(IEmailRepository):
    """Email queue repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def enqueue(self, message: EmailMessage) -> EmailMessage:
        self.session.add(message)
        await self.session.flush()
        await self.session.refresh(message)
        return message

    async def list_pending(self, limit: int = 50) -> List[EmailMessage]:
        stmt = (
            select(EmailMessage)
            .where(EmailMessage.status == EmailStatus.pending)
            .order_by(EmailMessage.created_at)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_sent(self, message_id: UUID) -> bool:
        stmt = (
            update(EmailMessage)
            .where(EmailMessage.id == message_id, EmailMessage.status == EmailStatus.pending)
            .values(status=EmailStatus.sent, sent_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def mark_failed(self, message_id: UUID, error: str) -> bool:
        stmt = (
            update(EmailMessage)
            .where(EmailMessage.id == message_id, EmailMessage.status == EmailStatus.pending)
            .values(status=EmailStatus.failed, error=error[:1000])
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0
