"""
Catalog Entities

Services and products sold by a tenant. Prices are in minor units.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow


class Service(SQLModel, table=True):
    """Bookable service offered by a tenant"""

    __tablename__ = "services"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    name: str = Field(max_length=255)
    price: int = Field(default=0, ge=0)
    duration_minutes: int = Field(default=30, gt=0)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))


class Product(SQLModel, table=True):
    """Retail product sold by a tenant"""

    __tablename__ = "products"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    name: str = Field(max_length=255)
    price: int = Field(default=0, ge=0)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
