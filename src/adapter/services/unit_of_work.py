from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.appointment_repository import AppointmentRepository
from src.adapter.repositories.catalog_repository import CatalogRepository
from src.adapter.repositories.email_repository import EmailRepository
from src.adapter.repositories.founding_member_counter_repository import (
    FoundingMemberCounterRepository,
)
from src.adapter.repositories.invoice_repository import InvoiceRepository
from src.adapter.repositories.outbox_repository import OutboxRepository
from src.adapter.repositories.revenue_repository import RevenueRepository
from src.adapter.repositories.tenant_repository import TenantRepository
from src.adapter.services.mutation_applier import SqlAlchemyMutationApplier
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.tenants = TenantRepository(self.session)
        self.founding_counter = FoundingMemberCounterRepository(self.session)
        self.catalog = CatalogRepository(self.session)
        self.appointments = AppointmentRepository(self.session)
        self.invoices = InvoiceRepository(self.session)
        self.revenue = RevenueRepository(self.session)
        self.emails = EmailRepository(self.session)
        self.outbox = OutboxRepository(self.session)
        self.applier = SqlAlchemyMutationApplier(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
