from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import Product, Service


class ICatalogRepository(ABC):
    """Service / product lookups - every lookup is tenant scoped"""

    @abstractmethod
    async def get_service(self, tenant_id: UUID, service_id: UUID) -> Optional[Service]:
        pass

    @abstractmethod
    async def get_product(self, tenant_id: UUID, product_id: UUID) -> Optional[Product]:
        pass
