from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.founding_member_counter_repository import (
    IFoundingMemberCounterRepository,
)
from src.domain.entities import FoundingMemberCounter, GLOBAL_COUNTER_ID


class FoundingMemberCounterRepository(IFoundingMemberCounterRepository):
    """Counter backed by a single row advanced with UPDATE ... RETURNING"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def advance(self, limit: int) -> Optional[int]:
        value = await self._increment(limit)
        if value is None and not await self._exists():
            await self._seed()
            value = await self._increment(limit)
        return value

    async def current(self) -> int:
        stmt = select(FoundingMemberCounter.value).where(
            FoundingMemberCounter.id == GLOBAL_COUNTER_ID
        )
        result = await self.session.execute(stmt)
        value = result.scalar_one_or_none()
        return value or 0

    async def _increment(self, limit: int) -> Optional[int]:
        # Compare and increment in one statement: two callers can never
        # read the same value
        stmt = (
            update(FoundingMemberCounter)
            .where(
                FoundingMemberCounter.id == GLOBAL_COUNTER_ID,
                FoundingMemberCounter.value < limit,
            )
            .values(value=FoundingMemberCounter.value + 1)
            .returning(FoundingMemberCounter.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _exists(self) -> bool:
        stmt = select(FoundingMemberCounter.id).where(
            FoundingMemberCounter.id == GLOBAL_COUNTER_ID
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def _seed(self) -> None:
        try:
            async with self.session.begin_nested():
                self.session.add(FoundingMemberCounter(id=GLOBAL_COUNTER_ID, value=0))
                await self.session.flush()
        except IntegrityError:
            # Seeded concurrently by another caller
            pass
