from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import Invoice


class IInvoiceRepository(ABC):
    """Invoice repository interface - application layer"""

    @abstractmethod
    async def get_for_tenant(self, tenant_id: UUID, invoice_id: UUID) -> Optional[Invoice]:
        """Get invoice by ID, scoped to the tenant in the same query"""
        pass

    @abstractmethod
    async def get_by_checkout_session(
        self, tenant_id: UUID, checkout_session_id: str
    ) -> Optional[Invoice]:
        """Get the invoice created for a checkout session"""
        pass

    @abstractmethod
    async def latest_invoice_number(self, tenant_id: UUID, prefix: str) -> Optional[str]:
        """Highest invoice number with the prefix for the tenant"""
        pass
