from fastapi import APIRouter, Depends, status

from src.api.error import ClientError, ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.tenants import (
    CreateTenantCommand,
    CreateTenantResponse,
    CreateTenantUseCase,
)
from src.depends import get_unit_of_work

router = APIRouter(prefix="/tenants", tags=["Tenant"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=CreateTenantResponse)
async def create_tenant(
    request: CreateTenantCommand,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Create Tenant

    Registers a merchant. While founding-member slots remain, the new tenant
    is assigned the next one.

    Raises:
        - 409 Conflict: SLUG_ALREADY_EXISTS
        - 422 Unprocessable Entity: Invalid request payload
        - 500 Internal Server Error: Server error
    """
    use_case = CreateTenantUseCase(uow)
    result = await use_case.execute(request)

    if result.is_err():
        error = result.error
        if error.code == "SLUG_ALREADY_EXISTS":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)

    return result.value
