from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.revenue_repository import IRevenueRepository
from src.domain.entities import RevenueCategory, RevenueEntry


class RevenueRepository(IRevenueRepository):
    """Ledger repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_payment_ref(
        self, tenant_id: UUID, payment_ref: str
    ) -> Optional[RevenueEntry]:
        stmt = select(RevenueEntry).where(
            RevenueEntry.tenant_id == tenant_id,
            RevenueEntry.stripe_payment_ref == payment_ref,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def latest_receipt_number(
        self, tenant_id: UUID, category: RevenueCategory, prefix: str
    ) -> Optional[str]:
        stmt = (
            select(RevenueEntry.receipt_number)
            .where(
                RevenueEntry.tenant_id == tenant_id,
                RevenueEntry.category == category,
                RevenueEntry.receipt_number.startswith(prefix),
            )
            .order_by(
                func.length(RevenueEntry.receipt_number).desc(),
                RevenueEntry.receipt_number.desc(),
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_tenant(self, tenant_id: UUID) -> List[RevenueEntry]:
        stmt = (
            select(RevenueEntry)
            .where(RevenueEntry.tenant_id == tenant_id)
            .order_by(RevenueEntry.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
