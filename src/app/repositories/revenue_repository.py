from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import RevenueCategory, RevenueEntry


class IRevenueRepository(ABC):
    """Ledger repository interface - entries are append-only"""

    @abstractmethod
    async def get_by_payment_ref(
        self, tenant_id: UUID, payment_ref: str
    ) -> Optional[RevenueEntry]:
        """Entry recorded for a provider payment reference"""
        pass

    @abstractmethod
    async def latest_receipt_number(
        self, tenant_id: UUID, category: RevenueCategory, prefix: str
    ) -> Optional[str]:
        """Highest receipt number with the prefix in the tenant's category"""
        pass

    @abstractmethod
    async def list_for_tenant(self, tenant_id: UUID) -> List[RevenueEntry]:
        """All ledger entries of a tenant, oldest first"""
        pass
