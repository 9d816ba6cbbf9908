"""
Webhook API Routes

Payment provider notifications. Responses tell the provider whether to retry:
200 acknowledges (including duplicates and irrelevant events), 400 rejects
permanently, 500 asks for redelivery.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Request, status

from src.api.error import ClientError, ServerError
from src.app.services.payment_gateway import PaymentGateway
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.webhook_verifier import WebhookVerifier
from src.app.use_cases.webhooks import ReceiveWebhookUseCase, WebhookOutcome
from src.depends import (
    OutboxRunner,
    get_outbox_runner,
    get_payment_gateway,
    get_unit_of_work,
    get_webhook_verifier,
)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


class WebhookResponse(WebhookOutcome):
    received: bool = True


@router.post("/stripe", status_code=status.HTTP_200_OK, response_model=WebhookResponse)
async def stripe_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    stripe_signature: Optional[str] = Header(None),
    uow: UnitOfWork = Depends(get_unit_of_work),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    verifier: WebhookVerifier = Depends(get_webhook_verifier),
    run_outbox: OutboxRunner = Depends(get_outbox_runner),
):
    """
    Stripe Webhook

    Verifies the Stripe-Signature header over the raw body, then reconciles
    the event. Deferred actions (subscription schedules) run after the
    response is sent and never affect it.

    Raises:
        - 400 Bad Request: UNAUTHENTICATED, MALFORMED_PAYLOAD
        - 500 Internal Server Error: TRANSIENT_STORE_FAILURE,
          PAYMENT_PROVIDER_UNAVAILABLE
    """
    payload = await request.body()

    use_case = ReceiveWebhookUseCase(uow, gateway, verifier)
    result = await use_case.execute(payload, stripe_signature)

    if result.is_err():
        error = result.error
        if error.code in ("UNAUTHENTICATED", "MALFORMED_PAYLOAD"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    outcome = result.value
    if outcome.outbox_message_ids:
        background_tasks.add_task(
            run_outbox, [UUID(message_id) for message_id in outcome.outbox_message_ids]
        )

    return WebhookResponse(**outcome.model_dump())
