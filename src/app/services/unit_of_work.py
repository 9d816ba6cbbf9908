from abc import ABC, abstractmethod

from src.app.repositories.appointment_repository import IAppointmentRepository
from src.app.repositories.catalog_repository import ICatalogRepository
from src.app.repositories.email_repository import IEmailRepository
from src.app.repositories.founding_member_counter_repository import (
    IFoundingMemberCounterRepository,
)
from src.app.repositories.invoice_repository import IInvoiceRepository
from src.app.repositories.outbox_repository import IOutboxRepository
from src.app.repositories.revenue_repository import IRevenueRepository
from src.app.repositories.tenant_repository import ITenantRepository
from src.app.services.mutation_applier import MutationApplier


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    tenants: ITenantRepository
    founding_counter: IFoundingMemberCounterRepository
    catalog: ICatalogRepository
    appointments: IAppointmentRepository
    invoices: IInvoiceRepository
    revenue: IRevenueRepository
    emails: IEmailRepository
    outbox: IOutboxRepository
    applier: MutationApplier

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
