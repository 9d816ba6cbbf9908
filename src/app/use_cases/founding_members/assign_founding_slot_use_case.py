"""
Assign Founding Slot Use Case

Scarce-resource allocator for the founding-member program.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from config import ApplicationConfig
from libs.result import Error, Result, Return
from src.app.services.mutation_applier import Transition
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import EmailMessage, Tenant

from .dtos import FoundingSlotResponse, SlotStatus

logger = logging.getLogger(__name__)

PIONEER_TEMPLATE = "founding_member_welcome"


class AssignFoundingSlotUseCase:
    """
    Use case for giving a tenant one of the limited founding-member slots.

    Business Rules:
    - The counter is advanced with a single conditional increment, so
      concurrent callers never receive the same ordinal and never exceed
      the limit
    - Counter increment and tenant update commit together
    - A tenant is assigned at most once; a lost race undoes the increment
    - The pioneer welcome email is a secondary effect
    """

    def __init__(self, uow: UnitOfWork, limit: int = ApplicationConfig.FOUNDING_MEMBER_LIMIT):
        self.uow = uow
        self.limit = limit

    async def execute(self, tenant_id: UUID) -> Result[FoundingSlotResponse]:
        """
        Execute assign founding slot use case.

        Args:
            tenant_id: Tenant to assign

        Returns:
            Result with FoundingSlotResponse (assigned, already_assigned,
            exhausted), or Error TENANT_NOT_FOUND
        """
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if tenant is None:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))

            if tenant.is_founding_member:
                return Return.ok(self._already_assigned(tenant))

            ordinal = await self.uow.founding_counter.advance(self.limit)
            if ordinal is None:
                logger.warning(f"Founding member slots exhausted, tenant {tenant_id} not assigned")
                return Return.ok(
                    FoundingSlotResponse(
                        tenant_id=str(tenant_id),
                        status=SlotStatus.exhausted,
                        remaining_spots=0,
                    )
                )

            changed = await self.uow.applier.apply(
                Transition(
                    entity=Tenant,
                    key={"id": tenant_id},
                    when={"is_founding_member": False},
                    values={
                        "is_founding_member": True,
                        "founding_member_number": ordinal,
                        "updated_at": utcnow(),
                    },
                )
            )
            if not changed:
                # Another caller assigned this tenant first
                await self.uow.rollback()
                tenant = await self.uow.tenants.get_by_id(tenant_id)
                return Return.ok(self._already_assigned(tenant))

            await self.uow.commit()
            business_name = tenant.business_name
            contact_email = tenant.contact_email

        logger.info(f"Tenant {tenant_id} assigned founding member #{ordinal}")

        if contact_email:
            await self._enqueue_welcome(tenant_id, contact_email, business_name, ordinal)

        return Return.ok(
            FoundingSlotResponse(
                tenant_id=str(tenant_id),
                status=SlotStatus.assigned,
                founding_member_number=ordinal,
                remaining_spots=max(0, self.limit - ordinal),
            )
        )

    def _already_assigned(self, tenant: Tenant) -> FoundingSlotResponse:
        return FoundingSlotResponse(
            tenant_id=str(tenant.id),
            status=SlotStatus.already_assigned,
            founding_member_number=tenant.founding_member_number,
            remaining_spots=max(0, self.limit - (tenant.founding_member_number or 0)),
        )

    async def _enqueue_welcome(
        self, tenant_id: UUID, to_email: str, business_name: str, ordinal: int
    ) -> None:
        try:
            async with self.uow:
                await self.uow.emails.enqueue(
                    EmailMessage(
                        tenant_id=tenant_id,
                        to_email=to_email,
                        subject=f"Welcome, Founding Member #{ordinal}",
                        template=PIONEER_TEMPLATE,
                        context={
                            "business_name": business_name,
                            "founding_member_number": ordinal,
                        },
                    )
                )
                await self.uow.commit()
        except SQLAlchemyError as e:
            logger.error(
                f"Could not queue founding member email for tenant {tenant_id}: {e} "
                f"- manual reconciliation required"
            )
