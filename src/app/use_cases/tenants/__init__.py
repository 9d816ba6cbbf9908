"""
Tenant Management Use Cases
"""

from .create_tenant_use_case import CreateTenantUseCase
from .dtos import CreateTenantCommand, CreateTenantResponse

__all__ = [
    "CreateTenantUseCase",
    "CreateTenantCommand",
    "CreateTenantResponse",
]
