"""
Get Founding Availability Use Case
"""

from config import ApplicationConfig
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork

from .dtos import FoundingAvailabilityResponse


class GetFoundingAvailabilityUseCase:
    """Remaining founding-member slots, read from the global counter"""

    def __init__(self, uow: UnitOfWork, limit: int = ApplicationConfig.FOUNDING_MEMBER_LIMIT):
        self.uow = uow
        self.limit = limit

    async def execute(self) -> Result[FoundingAvailabilityResponse]:
        async with self.uow:
            current = await self.uow.founding_counter.current()

        remaining = max(0, self.limit - current)
        return Return.ok(
            FoundingAvailabilityResponse(
                is_available=remaining > 0,
                remaining_spots=remaining,
                current_founding_members=current,
                limit=self.limit,
            )
        )
