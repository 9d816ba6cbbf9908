from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, case, or_
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.outbox_repository import IOutboxRepository
from src.domain.base import utcnow
from src.domain.entities import OutboxMessage, OutboxStatus


def _claimable(stale_before: datetime):
    return or_(
        OutboxMessage.status == OutboxStatus.pending,
        and_(
            OutboxMessage.status == OutboxStatus.processing,
            OutboxMessage.claimed_at < stale_before,
        ),
    )


class OutboxRepository(IOutboxRepository):
    """Outbox repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, message_id: UUID) -> Optional[OutboxMessage]:
        stmt = select(OutboxMessage).where(OutboxMessage.id == message_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_dedupe_key(self, dedupe_key: str) -> Optional[OutboxMessage]:
        stmt = select(OutboxMessage).where(OutboxMessage.dedupe_key == dedupe_key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_pending_ids(self, stale_before: datetime, limit: int = 50) -> List[UUID]:
        stmt = (
            select(OutboxMessage.id)
            .where(_claimable(stale_before))
            .order_by(OutboxMessage.created_at)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def claim(self, message_id: UUID, stale_before: datetime) -> bool:
        stmt = (
            update(OutboxMessage)
            .where(OutboxMessage.id == message_id, _claimable(stale_before))
            .values(
                status=OutboxStatus.processing,
                attempts=OutboxMessage.attempts + 1,
                claimed_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def mark_done(self, message_id: UUID) -> bool:
        stmt = (
            update(OutboxMessage)
            .where(
                OutboxMessage.id == message_id,
                OutboxMessage.status == OutboxStatus.processing,
            )
            .values(status=OutboxStatus.done, last_error=None, processed_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def release(self, message_id: UUID, error: str, max_attempts: int) -> bool:
        next_status = case(
            (OutboxMessage.attempts >= max_attempts, OutboxStatus.failed.name),
            else_=OutboxStatus.pending.name,
        )
        stmt = (
            update(OutboxMessage)
            .where(
                OutboxMessage.id == message_id,
                OutboxMessage.status == OutboxStatus.processing,
            )
            .values(status=next_status, last_error=error[:1000])
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0
