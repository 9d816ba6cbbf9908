from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from src.adapter.repositories.outbox_repository import OutboxRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.payment_gateway import PaymentGatewayError
from src.app.use_cases.billing import DispatchOutboxUseCase
from src.domain.base import utcnow
from src.domain.entities import (
    EmailMessage,
    OutboxKind,
    OutboxMessage,
    OutboxStatus,
    Tenant,
)
from tests.fixtures.db import reload

ADMIN_HEADERS = {"X-Admin-API-Key": "test-admin-key-12345"}


async def seed_outbox(db_session, tenant_id, **fields):
    message = OutboxMessage(
        kind=OutboxKind.create_subscription_schedule,
        dedupe_key=f"subscription_schedule:{tenant_id}",
        payload={"tenant_id": str(tenant_id)},
        **fields,
    )
    db_session.add(message)
    await db_session.commit()
    return message.id


@pytest.mark.asyncio
async def test_outbox_retry_after_provider_outage(client: AsyncClient, db_session, gateway):
    # Arrange
    tenant = Tenant(slug="shop", business_name="Shop")
    db_session.add(tenant)
    await db_session.commit()
    tenant_id = tenant.id
    message_id = await seed_outbox(db_session, tenant_id)
    gateway.create_customer.side_effect = PaymentGatewayError("provider down")

    # Act
    failed = await client.post("/admin/outbox/dispatch", json={}, headers=ADMIN_HEADERS)
    gateway.create_customer.side_effect = None
    succeeded = await client.post("/admin/outbox/dispatch", json={}, headers=ADMIN_HEADERS)

    # Assert
    assert failed.json()["failed"] == [str(message_id)]
    assert succeeded.json()["succeeded"] == [str(message_id)]
    message = await reload(db_session, OutboxMessage, message_id)
    assert message.status == OutboxStatus.done
    assert message.attempts == 2
    stored = await reload(db_session, Tenant, tenant_id)
    assert stored.stripe_customer_id == "cus_platform_1"
    assert stored.stripe_subscription_schedule_id == "sub_sched_1"
    assert stored.stripe_subscription_id == "sub_1"


@pytest.mark.asyncio
async def test_outbox_parks_message_after_max_attempts(client: AsyncClient, db_session, gateway):
    from config import ApplicationConfig

    tenant = Tenant(slug="shop", business_name="Shop")
    db_session.add(tenant)
    await db_session.commit()
    message_id = await seed_outbox(db_session, tenant.id)
    gateway.create_customer.side_effect = PaymentGatewayError("provider down")

    for _ in range(ApplicationConfig.OUTBOX_MAX_ATTEMPTS + 1):
        await client.post("/admin/outbox/dispatch", json={}, headers=ADMIN_HEADERS)

    message = await reload(db_session, OutboxMessage, message_id)
    assert message.status == OutboxStatus.failed
    assert message.attempts == ApplicationConfig.OUTBOX_MAX_ATTEMPTS


@pytest.mark.asyncio
async def test_email_queue_delivery_reporting(client: AsyncClient, db_session):
    # Arrange
    email = EmailMessage(to_email="a@example.com", subject="Hi", template="welcome")
    db_session.add(email)
    await db_session.commit()
    email_id = email.id

    # Act
    pending = await client.get("/admin/emails/pending", headers=ADMIN_HEADERS)
    sent = await client.post(
        f"/admin/emails/{email_id}/delivery", json={"delivered": True}, headers=ADMIN_HEADERS
    )
    again = await client.post(
        f"/admin/emails/{email_id}/delivery",
        json={"delivered": False, "error": "bounced"},
        headers=ADMIN_HEADERS,
    )

    # Assert
    assert [e["id"] for e in pending.json()["emails"]] == [str(email_id)]
    assert sent.json()["status"] == "sent"
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "EMAIL_NOT_PENDING"


async def seed_tenant(db_session, slug):
    tenant = Tenant(slug=slug, business_name=slug.title())
    db_session.add(tenant)
    await db_session.commit()
    return tenant.id


@pytest.mark.asyncio
async def test_abandoned_claim_is_dispatched_again(client: AsyncClient, db_session):
    """A processing row whose claim outlived the lease is picked up; a live claim is not"""
    # Arrange
    stale_id = await seed_outbox(
        db_session,
        await seed_tenant(db_session, "stale-shop"),
        status=OutboxStatus.processing,
        attempts=1,
        claimed_at=utcnow() - timedelta(hours=1),
    )
    live_id = await seed_outbox(
        db_session,
        await seed_tenant(db_session, "live-shop"),
        status=OutboxStatus.processing,
        attempts=1,
        claimed_at=utcnow(),
    )

    # Act
    response = await client.post("/admin/outbox/dispatch", json={}, headers=ADMIN_HEADERS)

    # Assert
    assert response.json()["succeeded"] == [str(stale_id)]
    stale = await reload(db_session, OutboxMessage, stale_id)
    assert stale.status == OutboxStatus.done
    assert stale.attempts == 2
    live = await reload(db_session, OutboxMessage, live_id)
    assert live.status == OutboxStatus.processing


@pytest.mark.asyncio
async def test_store_failure_after_claim_is_recovered(
    db_session, gateway, billing, monkeypatch
):
    # Arrange
    tenant_id = await seed_tenant(db_session, "shop")
    message_id = await seed_outbox(db_session, tenant_id)

    async def failing_mark_done(self, message_id):
        raise OperationalError("UPDATE", {}, Exception("disk I/O error"))

    def dispatcher():
        return DispatchOutboxUseCase(
            SqlAlchemyUnitOfWork(db_session), gateway, billing, lease_seconds=0
        )

    # Act
    with monkeypatch.context() as patch:
        patch.setattr(OutboxRepository, "mark_done", failing_mark_done)
        with pytest.raises(OperationalError):
            await dispatcher().execute([message_id])
    stuck = await reload(db_session, OutboxMessage, message_id)
    stuck_status = stuck.status
    result = await dispatcher().execute()

    # Assert
    assert stuck_status == OutboxStatus.processing
    assert result.value.succeeded == [str(message_id)]
    message = await reload(db_session, OutboxMessage, message_id)
    assert message.status == OutboxStatus.done
    gateway.create_subscription_schedule.assert_called_once()
