"""
Dispatch Outbox Use Case

Runs pending deferred actions, each claimed so only one worker processes it.
"""

import logging
from datetime import timedelta
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from config import ApplicationConfig
from libs.result import Error, Result, Return
from src.app.services.payment_gateway import PaymentGateway
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import OutboxKind

from .create_subscription_schedule_use_case import CreateSubscriptionScheduleUseCase
from .dtos import BillingSettings, OutboxDispatchResponse

logger = logging.getLogger(__name__)


class DispatchOutboxUseCase:
    """
    Business Rules:
    - A message is claimed with a conditional pending -> processing update
    - A processing claim older than lease_seconds belongs to a worker that
      died before finishing, and is claimed again
    - Success marks it done; failure returns it to pending with the error,
      or parks it as failed once attempts reach max_attempts
    - One failing message does not stop the others
    """

    def __init__(
        self,
        uow: UnitOfWork,
        gateway: PaymentGateway,
        billing: BillingSettings,
        max_attempts: int = ApplicationConfig.OUTBOX_MAX_ATTEMPTS,
        lease_seconds: int = ApplicationConfig.OUTBOX_LEASE_SECONDS,
    ):
        self.uow = uow
        self.gateway = gateway
        self.billing = billing
        self.max_attempts = max_attempts
        self.lease_seconds = lease_seconds

    async def execute(
        self, message_ids: Optional[List[UUID]] = None
    ) -> Result[OutboxDispatchResponse]:
        """
        Execute outbox dispatch.

        Args:
            message_ids: Messages to run; all claimable messages when omitted

        Returns:
            Result with OutboxDispatchResponse
        """
        stale_before = utcnow() - timedelta(seconds=self.lease_seconds)
        if message_ids is None:
            async with self.uow:
                message_ids = await self.uow.outbox.list_pending_ids(stale_before)

        response = OutboxDispatchResponse()
        for message_id in message_ids:
            async with self.uow:
                claimed = await self.uow.outbox.claim(message_id, stale_before)
                message = await self.uow.outbox.get_by_id(message_id) if claimed else None
                if message is None:
                    continue
                kind, payload = message.kind, dict(message.payload or {})
                await self.uow.commit()

            response.processed += 1

            error = await self._run(kind, payload)

            async with self.uow:
                if error is None:
                    await self.uow.outbox.mark_done(message_id)
                else:
                    await self.uow.outbox.release(message_id, error, self.max_attempts)
                await self.uow.commit()

            if error is None:
                response.succeeded.append(str(message_id))
            else:
                logger.error(f"Outbox message {message_id} ({kind.value}) failed: {error}")
                response.failed.append(str(message_id))

        return Return.ok(response)

    async def _run(self, kind: OutboxKind, payload: Dict) -> Optional[str]:
        """Run one message. Returns an error description, or None on success."""
        try:
            result = await self._handle(kind, payload)
        except SQLAlchemyError as e:
            return f"Datastore failure: {e}"
        if result.is_err():
            return f"{result.error.code}: {result.error.message}"
        return None

    async def _handle(self, kind: OutboxKind, payload: Dict) -> Result:
        if kind == OutboxKind.create_subscription_schedule:
            try:
                tenant_id = UUID(payload["tenant_id"])
            except (KeyError, ValueError):
                return Return.err(Error("MALFORMED_PAYLOAD", "Missing tenant_id"))
            use_case = CreateSubscriptionScheduleUseCase(self.uow, self.gateway, self.billing)
            return await use_case.execute(tenant_id)

        return Return.err(Error("UNKNOWN_OUTBOX_KIND", f"Unknown kind {kind}"))
