from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import Appointment


class IAppointmentRepository(ABC):
    """Appointment repository interface - application layer"""

    @abstractmethod
    async def get_for_tenant(
        self, tenant_id: UUID, appointment_id: UUID
    ) -> Optional[Appointment]:
        """Get appointment by ID, scoped to the tenant in the same query"""
        pass

    @abstractmethod
    async def create_many(self, appointments: List[Appointment]) -> List[Appointment]:
        """Insert a batch of appointments"""
        pass

    @abstractmethod
    async def list_group(
        self, tenant_id: UUID, recurring_group_id: UUID
    ) -> List[Appointment]:
        """All members of a recurring group, ordered by start time"""
        pass
