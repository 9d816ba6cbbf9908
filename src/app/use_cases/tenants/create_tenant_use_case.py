"""
Create Tenant Use Case

Registers a merchant and offers it a founding-member slot.
"""

import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError

from config import ApplicationConfig
from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.founding_members import AssignFoundingSlotUseCase, SlotStatus
from src.domain.entities import Tenant

from .dtos import CreateTenantCommand, CreateTenantResponse

logger = logging.getLogger(__name__)


class CreateTenantUseCase:
    """
    Use case for tenant registration.

    Business Rules:
    - Slug must be unique
    - Fee percent defaults to the platform default
    - Registration tries to assign a founding slot; an exhausted program is
      not an error
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, command: CreateTenantCommand) -> Result[CreateTenantResponse]:
        """
        Execute create tenant use case.

        Args:
            command: CreateTenantCommand

        Returns:
            Result with CreateTenantResponse, or Error SLUG_ALREADY_EXISTS
        """
        fee_percent = (
            command.platform_fee_percent
            if command.platform_fee_percent is not None
            else Decimal(ApplicationConfig.DEFAULT_PLATFORM_FEE_PERCENT)
        )

        async with self.uow:
            if await self.uow.tenants.get_by_slug(command.slug):
                return Return.err(
                    Error("SLUG_ALREADY_EXISTS", f"Slug '{command.slug}' is already taken")
                )

            tenant = Tenant(
                slug=command.slug,
                business_name=command.business_name,
                contact_email=command.contact_email,
                platform_fee_percent=fee_percent,
            )
            try:
                tenant = await self.uow.tenants.create(tenant)
            except IntegrityError:
                return Return.err(
                    Error("SLUG_ALREADY_EXISTS", f"Slug '{command.slug}' is already taken")
                )
            await self.uow.commit()
            tenant_id = tenant.id

        logger.info(f"Tenant {tenant_id} created ({command.slug})")

        slot = await AssignFoundingSlotUseCase(self.uow).execute(tenant_id)
        if slot.is_err():
            return Return.err(slot.error)
        founding = slot.value

        return Return.ok(
            CreateTenantResponse(
                tenant_id=str(tenant_id),
                slug=command.slug,
                business_name=command.business_name,
                platform_fee_percent=str(fee_percent),
                is_founding_member=founding.status == SlotStatus.assigned,
                founding_member_number=founding.founding_member_number,
                founding_status=founding.status,
            )
        )
