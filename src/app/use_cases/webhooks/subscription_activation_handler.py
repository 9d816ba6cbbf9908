"""
Subscription Activation Handler

Records the connectivity-fee subscription id on the tenant, once.
"""

import logging

from libs.result import Result, Return
from src.app.services.mutation_applier import Transition
from src.app.services.payment_gateway import PaymentGatewayError
from src.domain.base import utcnow
from src.domain.entities import Tenant
from src.domain.events import CheckoutSession, EventEnvelope

from .base import CheckoutHandler, malformed
from .dtos import HandlerStatus, WebhookOutcome

logger = logging.getLogger(__name__)


class SubscriptionActivationHandler(CheckoutHandler):
    """
    Business Rules:
    - Transition: stripe_subscription_id IS NULL -> subscription id
    - A tenant keeps the first subscription id it was given
    - Trial end is logged enrichment only
    """

    async def handle(
        self, envelope: EventEnvelope, session: CheckoutSession
    ) -> Result[WebhookOutcome]:
        tenant_id = session.tenant_id
        if tenant_id is None or not session.subscription:
            return malformed(
                "connectivity_fee_subscription requires tenant_id and a subscription"
            )
        subscription_id = session.subscription

        try:
            trial_end = await self.gateway.retrieve_subscription_trial_end(subscription_id)
        except PaymentGatewayError as e:
            logger.warning(f"Could not retrieve subscription {subscription_id}: {e}")
            trial_end = None

        async with self.uow:
            changed = await self.uow.applier.apply(
                Transition(
                    entity=Tenant,
                    key={"id": tenant_id},
                    when={"stripe_subscription_id": None},
                    values={
                        "stripe_subscription_id": subscription_id,
                        "updated_at": utcnow(),
                    },
                )
            )
            if changed:
                await self.uow.commit()
                logger.info(
                    f"Tenant {tenant_id} subscribed ({subscription_id}), trial ends {trial_end}"
                )
                return Return.ok(self.outcome(envelope, session, HandlerStatus.applied))

            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if tenant is None:
                logger.warning(
                    f"Tenant {tenant_id} not found for subscription {subscription_id}"
                )
                return Return.ok(
                    self.outcome(envelope, session, HandlerStatus.not_found, "tenant")
                )
            recorded = tenant.stripe_subscription_id

        if recorded != subscription_id:
            logger.warning(
                f"Tenant {tenant_id} already has subscription {recorded}, "
                f"ignoring {subscription_id}"
            )
        return Return.ok(self.outcome(envelope, session, HandlerStatus.already_applied))
