"""
Account Onboarding Handler

Reacts to a connected account finishing onboarding (account.updated).
"""

import logging
from typing import List, Optional

from libs.result import Result, Return
from src.app.services.mutation_applier import Transition
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import OutboxKind, OutboxMessage, OutboxStatus, Tenant
from src.domain.events import ConnectAccount, EventEnvelope

from .dtos import HandlerStatus, WebhookOutcome

logger = logging.getLogger(__name__)


def subscription_schedule_key(tenant_id) -> str:
    return f"subscription_schedule:{tenant_id}"


class AccountOnboardingHandler:
    """
    Business Rules:
    - Ignored until details_submitted is true
    - The connected account id is attached if none is recorded
    - Founding members have the annual fee waived
    - Otherwise a subscription-schedule outbox row is written in the same
      transaction, deduplicated per tenant
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def outcome(
        self,
        envelope: EventEnvelope,
        status: HandlerStatus,
        detail: Optional[str] = None,
        outbox_message_ids: Optional[List[str]] = None,
    ) -> WebhookOutcome:
        return WebhookOutcome(
            event_id=envelope.id,
            event_type=envelope.type,
            status=status,
            detail=detail,
            outbox_message_ids=outbox_message_ids or [],
        )

    async def handle(
        self, envelope: EventEnvelope, account: ConnectAccount
    ) -> Result[WebhookOutcome]:
        tenant_id = account.tenant_id
        if tenant_id is None or not account.details_submitted:
            return Return.ok(
                self.outcome(envelope, HandlerStatus.ignored, "onboarding not complete")
            )

        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if tenant is None:
                logger.warning(f"Tenant {tenant_id} not found for account {account.id}")
                return Return.ok(self.outcome(envelope, HandlerStatus.not_found, "tenant"))

            attached = await self.uow.applier.apply(
                Transition(
                    entity=Tenant,
                    key={"id": tenant_id},
                    when={"stripe_account_id": None},
                    values={"stripe_account_id": account.id, "updated_at": utcnow()},
                )
            )

            if tenant.is_founding_member or account.flagged_founding_member:
                await self.uow.commit()
                logger.info(f"Founding member {tenant_id} onboarded - annual fee waived")
                return Return.ok(
                    self.outcome(
                        envelope,
                        HandlerStatus.applied if attached else HandlerStatus.already_applied,
                        "founding member - annual fee waived",
                    )
                )

            message = OutboxMessage(
                kind=OutboxKind.create_subscription_schedule,
                dedupe_key=subscription_schedule_key(tenant_id),
                payload={"tenant_id": str(tenant_id), "stripe_account_id": account.id},
            )
            enqueued = await self.uow.applier.insert_once(message)
            if enqueued:
                pending_id = message.id
            else:
                existing = await self.uow.outbox.get_by_dedupe_key(message.dedupe_key)
                pending_id = (
                    existing.id
                    if existing is not None and existing.status == OutboxStatus.pending
                    else None
                )
            await self.uow.commit()

        if enqueued:
            logger.info(f"Subscription schedule queued for tenant {tenant_id}")

        return Return.ok(
            self.outcome(
                envelope,
                HandlerStatus.applied if (attached or enqueued) else HandlerStatus.already_applied,
                outbox_message_ids=[str(pending_id)] if pending_id else [],
            )
        )
