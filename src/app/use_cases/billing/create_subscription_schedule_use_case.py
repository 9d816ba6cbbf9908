"""
Create Subscription Schedule Use Case

Outbox consumer: starts the first-year-free annual connectivity fee for a
tenant that finished payment onboarding.
"""

import logging
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.mutation_applier import Transition
from src.app.services.payment_gateway import PaymentGateway, PaymentGatewayError
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Tenant

from .dtos import BillingSettings, ScheduleStatus, SubscriptionScheduleResponse

logger = logging.getLogger(__name__)


class CreateSubscriptionScheduleUseCase:
    """
    Business Rules:
    - Founding members are never billed the annual fee
    - A tenant with a subscription or schedule id is left alone
    - Missing price configuration is an error, so the outbox retries it
      once billing is configured
    - Customer and schedule ids are stored with conditional updates, and the
      provider calls carry per-tenant idempotency keys, so a retry after a
      partial failure creates nothing twice
    """

    def __init__(self, uow: UnitOfWork, gateway: PaymentGateway, billing: BillingSettings):
        self.uow = uow
        self.gateway = gateway
        self.billing = billing

    async def execute(self, tenant_id: UUID) -> Result[SubscriptionScheduleResponse]:
        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if tenant is None:
                return Return.err(Error("TENANT_NOT_FOUND", "Tenant not found"))
            is_founding_member = tenant.is_founding_member
            subscription_id = tenant.stripe_subscription_id
            schedule_id = tenant.stripe_subscription_schedule_id
            customer_id = tenant.stripe_customer_id
            contact_email = tenant.contact_email
            business_name = tenant.business_name

        if is_founding_member:
            logger.info(f"Tenant {tenant_id} is a founding member - annual fee waived")
            return Return.ok(self._response(tenant_id, ScheduleStatus.waived))

        if subscription_id or schedule_id:
            return Return.ok(
                self._response(tenant_id, ScheduleStatus.exists, schedule_id, subscription_id)
            )

        if not self.billing.annual_fee_price_id:
            logger.error(
                f"Annual fee price not configured, cannot bill tenant {tenant_id}"
            )
            return Return.err(
                Error("BILLING_NOT_CONFIGURED", "Annual fee price is not configured")
            )

        metadata = {"tenant_id": str(tenant_id), "type": "connectivity_fee_subscription"}
        try:
            if not customer_id:
                customer_id = await self._attach_customer(
                    tenant_id, contact_email, business_name, metadata
                )

            schedule = await self.gateway.create_subscription_schedule(
                customer_id,
                self.billing.annual_fee_price_id,
                self.billing.free_tier_price_id or None,
                metadata,
                idempotency_key=f"subscription-schedule-{tenant_id}",
            )
        except PaymentGatewayError as e:
            return Return.err(Error("PAYMENT_PROVIDER_UNAVAILABLE", str(e)))

        async with self.uow:
            changed = await self.uow.applier.apply(
                Transition(
                    entity=Tenant,
                    key={"id": tenant_id},
                    when={
                        "stripe_subscription_id": None,
                        "stripe_subscription_schedule_id": None,
                    },
                    values={
                        "stripe_subscription_schedule_id": schedule.id,
                        "stripe_subscription_id": schedule.subscription_id,
                        "updated_at": utcnow(),
                    },
                )
            )
            await self.uow.commit()

        if not changed:
            logger.warning(
                f"Tenant {tenant_id} got a subscription concurrently, schedule "
                f"{schedule.id} not recorded - manual reconciliation required"
            )
            return Return.ok(self._response(tenant_id, ScheduleStatus.exists))

        logger.info(f"Subscription schedule {schedule.id} created for tenant {tenant_id}")
        return Return.ok(
            self._response(
                tenant_id, ScheduleStatus.created, schedule.id, schedule.subscription_id
            )
        )

    async def _attach_customer(self, tenant_id, email, name, metadata) -> str:
        created_id = await self.gateway.create_customer(
            email, name, metadata, idempotency_key=f"platform-customer-{tenant_id}"
        )
        async with self.uow:
            changed = await self.uow.applier.apply(
                Transition(
                    entity=Tenant,
                    key={"id": tenant_id},
                    when={"stripe_customer_id": None},
                    values={"stripe_customer_id": created_id, "updated_at": utcnow()},
                )
            )
            await self.uow.commit()
            if changed:
                return created_id
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            return tenant.stripe_customer_id

    @staticmethod
    def _response(
        tenant_id, status, schedule_id=None, subscription_id=None
    ) -> SubscriptionScheduleResponse:
        return SubscriptionScheduleResponse(
            tenant_id=str(tenant_id),
            status=status,
            schedule_id=schedule_id,
            subscription_id=subscription_id,
        )
