from typing import List
from unittest.mock import AsyncMock
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.services.database import create_engine
from src.adapter.services.stripe_signature import StripeWebhookVerifier
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.payment_gateway import (
    PaymentGateway,
    PaymentGatewayError,
    SubscriptionScheduleInfo,
)
from src.app.use_cases.billing import BillingSettings, DispatchOutboxUseCase
from src.depends import (
    get_billing_settings,
    get_outbox_runner,
    get_payment_gateway,
    get_unit_of_work,
    get_webhook_verifier,
)
from src.domain.entities import Product, Service, Tenant
from tests.fixtures.stripe_events import TEST_WEBHOOK_SECRET


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def gateway():
    """Provider gateway whose enrichment lookups are unavailable by default"""
    gateway = AsyncMock(spec=PaymentGateway)
    gateway.retrieve_payment_intent.side_effect = PaymentGatewayError("unavailable")
    gateway.retrieve_customer_name.return_value = None
    gateway.retrieve_subscription_trial_end.return_value = None
    gateway.create_customer.return_value = "cus_platform_1"
    gateway.create_subscription_schedule.return_value = SubscriptionScheduleInfo(
        id="sub_sched_1", subscription_id="sub_1"
    )
    return gateway


@pytest.fixture
def billing():
    return BillingSettings(annual_fee_price_id="price_annual")


@pytest_asyncio.fixture
async def client(db_session, gateway, billing):
    from httpx import ASGITransport
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    def override_get_outbox_runner():
        async def run(message_ids: List[UUID]) -> None:
            await DispatchOutboxUseCase(
                SqlAlchemyUnitOfWork(db_session), gateway, billing
            ).execute(message_ids)

        return run

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_billing_settings] = lambda: billing
    app.dependency_overrides[get_webhook_verifier] = lambda: StripeWebhookVerifier(
        TEST_WEBHOOK_SECRET
    )
    app.dependency_overrides[get_outbox_runner] = override_get_outbox_runner

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def tenant(db_session):
    tenant = Tenant(
        slug="glow-salon",
        business_name="Glow Salon",
        contact_email="owner@glow.example",
        stripe_account_id="acct_glow",
    )
    db_session.add(tenant)
    await db_session.commit()
    return tenant


@pytest_asyncio.fixture
async def service(db_session, tenant):
    service = Service(tenant_id=tenant.id, name="Haircut", price=4500, duration_minutes=45)
    db_session.add(service)
    await db_session.commit()
    return service


@pytest_asyncio.fixture
async def product(db_session, tenant):
    product = Product(tenant_id=tenant.id, name="Shampoo", price=1999)
    db_session.add(product)
    await db_session.commit()
    return product
