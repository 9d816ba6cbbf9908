from fastapi import APIRouter, Depends, status

from src.api.error import ClientError, ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.appointments import (
    CreateRecurringBookingCommand,
    CreateRecurringBookingUseCase,
    RecurringBookingResponse,
)
from src.depends import get_unit_of_work

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.post(
    "/recurring",
    status_code=status.HTTP_201_CREATED,
    response_model=RecurringBookingResponse,
)
async def create_recurring_booking(
    request: CreateRecurringBookingCommand,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Create Recurring Booking

    Creates every weekly occurrence as PENDING and returns the upfront
    charge to present at checkout. Appointments are confirmed when the
    checkout completes.

    Raises:
        - 400 Bad Request: PAYMENTS_NOT_ENABLED, INVALID_RECURRENCE
        - 404 Not Found: TENANT_NOT_FOUND, SERVICE_NOT_FOUND
        - 500 Internal Server Error: Server error
    """
    use_case = CreateRecurringBookingUseCase(uow)
    result = await use_case.execute(request)

    if result.is_err():
        error = result.error
        if error.code in ("TENANT_NOT_FOUND", "SERVICE_NOT_FOUND"):
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        elif error.code in ("PAYMENTS_NOT_ENABLED", "INVALID_RECURRENCE"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value
