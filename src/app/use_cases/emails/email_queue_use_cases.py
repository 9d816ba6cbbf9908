"""
Email Queue Use Cases

The delivery service polls pending rows and reports each outcome back.
"""

import logging
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import EmailStatus

from .dtos import EmailDeliveryResponse, PendingEmailsResponse, QueuedEmail

logger = logging.getLogger(__name__)


class ListPendingEmailsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, limit: int = 50) -> Result[PendingEmailsResponse]:
        async with self.uow:
            messages = await self.uow.emails.list_pending(limit)
            response = PendingEmailsResponse(
                emails=[
                    QueuedEmail(
                        id=str(m.id),
                        tenant_id=str(m.tenant_id) if m.tenant_id else None,
                        to_email=m.to_email,
                        subject=m.subject,
                        template=m.template,
                        context=m.context,
                        created_at=m.created_at,
                    )
                    for m in messages
                ]
            )

        return Return.ok(response)


class RecordEmailDeliveryUseCase:
    """
    Business Rules:
    - Only a pending message can move to sent or failed, once
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, message_id: UUID, delivered: bool, error: Optional[str] = None
    ) -> Result[EmailDeliveryResponse]:
        async with self.uow:
            if delivered:
                changed = await self.uow.emails.mark_sent(message_id)
            else:
                changed = await self.uow.emails.mark_failed(
                    message_id, error or "Delivery failed"
                )

            if not changed:
                return Return.err(
                    Error("EMAIL_NOT_PENDING", "Email not found or already processed")
                )
            await self.uow.commit()

        status = EmailStatus.sent if delivered else EmailStatus.failed
        if not delivered:
            logger.warning(f"Email {message_id} failed: {error}")
        return Return.ok(EmailDeliveryResponse(id=str(message_id), status=status.value))
