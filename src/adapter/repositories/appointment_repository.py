from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.appointment_repository import IAppointmentRepository
from src.domain.entities import Appointment


class AppointmentRepository(IAppointmentRepository):
    """Appointment repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_tenant(
        self, tenant_id: UUID, appointment_id: UUID
    ) -> Optional[Appointment]:
        stmt = select(Appointment).where(
            Appointment.id == appointment_id, Appointment.tenant_id == tenant_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_many(self, appointments: List[Appointment]) -> List[Appointment]:
        self.session.add_all(appointments)
        await self.session.flush()
        return appointments

    async def list_group(
        self, tenant_id: UUID, recurring_group_id: UUID
    ) -> List[Appointment]:
        stmt = (
            select(Appointment)
            .where(
                Appointment.tenant_id == tenant_id,
                Appointment.recurring_group_id == recurring_group_id,
            )
            .order_by(Appointment.start_time)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
