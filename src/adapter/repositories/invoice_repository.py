from typing import Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.invoice_repository import IInvoiceRepository
from src.domain.entities import Invoice


class InvoiceRepository(IInvoiceRepository):
    """Invoice repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_tenant(self, tenant_id: UUID, invoice_id: UUID) -> Optional[Invoice]:
        stmt = select(Invoice).where(Invoice.id == invoice_id, Invoice.tenant_id == tenant_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_checkout_session(
        self, tenant_id: UUID, checkout_session_id: str
    ) -> Optional[Invoice]:
        stmt = select(Invoice).where(
            Invoice.tenant_id == tenant_id,
            Invoice.stripe_checkout_session_id == checkout_session_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def latest_invoice_number(self, tenant_id: UUID, prefix: str) -> Optional[str]:
        stmt = (
            select(Invoice.invoice_number)
            .where(Invoice.tenant_id == tenant_id, Invoice.invoice_number.startswith(prefix))
            .order_by(func.length(Invoice.invoice_number).desc(), Invoice.invoice_number.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
