from fastapi import APIRouter, Depends, status

from src.api.error import ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.founding_members import (
    FoundingAvailabilityResponse,
    GetFoundingAvailabilityUseCase,
)
from src.depends import get_unit_of_work

router = APIRouter(prefix="/founding-members", tags=["Founding Members"])


@router.get(
    "/availability",
    status_code=status.HTTP_200_OK,
    response_model=FoundingAvailabilityResponse,
)
async def get_availability(uow: UnitOfWork = Depends(get_unit_of_work)):
    """Remaining founding-member slots"""
    result = await GetFoundingAvailabilityUseCase(uow).execute()

    if result.is_err():
        raise ServerError(result.error)

    return result.value
