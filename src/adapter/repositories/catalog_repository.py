from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.catalog_repository import ICatalogRepository
from src.domain.entities import Product, Service


class CatalogRepository(ICatalogRepository):
    """Catalog repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_service(self, tenant_id: UUID, service_id: UUID) -> Optional[Service]:
        stmt = select(Service).where(Service.id == service_id, Service.tenant_id == tenant_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_product(self, tenant_id: UUID, product_id: UUID) -> Optional[Product]:
        stmt = select(Product).where(Product.id == product_id, Product.tenant_id == tenant_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
