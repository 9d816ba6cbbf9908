from abc import ABC, abstractmethod
from typing import Optional


class IFoundingMemberCounterRepository(ABC):
    """Global founding-member sequence - application layer"""

    @abstractmethod
    async def advance(self, limit: int) -> Optional[int]:
        """
        Atomically increment the counter if it is below limit.

        Returns the new value, or None when the limit is already reached.
        Must be a single statement; never a read followed by a write.
        """
        pass

    @abstractmethod
    async def current(self) -> int:
        """Last issued ordinal (0 when none issued)"""
        pass
