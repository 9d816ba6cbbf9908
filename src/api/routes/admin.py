"""
Admin API Routes - System Administration Endpoints

Manual overrides and retry hooks for operators and internal services.
Authentication is via Admin API Key.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.payment_gateway import PaymentGateway
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.billing import (
    BillingSettings,
    DispatchOutboxUseCase,
    OutboxDispatchResponse,
)
from src.app.use_cases.emails import (
    EmailDeliveryResponse,
    ListPendingEmailsUseCase,
    PendingEmailsResponse,
    RecordEmailDeliveryUseCase,
)
from src.app.use_cases.founding_members import (
    AssignFoundingSlotUseCase,
    FoundingSlotResponse,
)
from src.depends import get_billing_settings, get_payment_gateway, get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin"])


class OutboxDispatchRequest(BaseModel):
    """Messages to dispatch; every pending message when omitted"""

    message_ids: Optional[List[UUID]] = None


class EmailDeliveryRequest(BaseModel):
    delivered: bool
    error: Optional[str] = Field(default=None, max_length=1000)


@router.post(
    "/founding-members/{tenant_id}/assign",
    status_code=status.HTTP_200_OK,
    response_model=FoundingSlotResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def assign_founding_slot(
    tenant_id: UUID,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Assign Founding Slot

    Manual override through the same atomic allocator used at registration.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 404 Not Found: TENANT_NOT_FOUND
        - 500 Internal Server Error: Server error
    """
    use_case = AssignFoundingSlotUseCase(uow)
    result = await use_case.execute(tenant_id)

    if result.is_err():
        error = result.error
        if error.code == "TENANT_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


@router.post(
    "/outbox/dispatch",
    status_code=status.HTTP_200_OK,
    response_model=OutboxDispatchResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def dispatch_outbox(
    request: OutboxDispatchRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    billing: BillingSettings = Depends(get_billing_settings),
):
    """
    Dispatch Outbox

    Retries deferred actions independently of webhook ingress.

    Requires: X-Admin-API-Key header
    """
    use_case = DispatchOutboxUseCase(uow, gateway, billing)
    result = await use_case.execute(request.message_ids)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.get(
    "/emails/pending",
    status_code=status.HTTP_200_OK,
    response_model=PendingEmailsResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def list_pending_emails(
    limit: int = Query(50, ge=1, le=500),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Pending rows of the email dispatch queue"""
    result = await ListPendingEmailsUseCase(uow).execute(limit)

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.post(
    "/emails/{email_id}/delivery",
    status_code=status.HTTP_200_OK,
    response_model=EmailDeliveryResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def record_email_delivery(
    email_id: UUID,
    request: EmailDeliveryRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Record Email Delivery

    Raises:
        - 409 Conflict: EMAIL_NOT_PENDING
    """
    use_case = RecordEmailDeliveryUseCase(uow)
    result = await use_case.execute(email_id, request.delivered, request.error)

    if result.is_err():
        error = result.error
        if error.code == "EMAIL_NOT_PENDING":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)

    return result.value
