import json
from datetime import datetime
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from src.adapter.services.mutation_applier import SqlAlchemyMutationApplier
from src.app.services.payment_gateway import PaymentIntentInfo
from src.domain.entities import (
    Appointment,
    AppointmentStatus,
    Invoice,
    InvoiceStatus,
    OutboxMessage,
    OutboxStatus,
    RevenueCategory,
    RevenueEntry,
    Tenant,
)
from tests.fixtures.db import all_rows, reload
from tests.fixtures.stripe_events import (
    account_updated,
    checkout_completed,
    event,
    sign,
    signed_request,
)


async def deliver(client: AsyncClient, body, secret=None):
    payload, headers = signed_request(body) if secret is None else signed_request(body, secret)
    return await client.post("/webhooks/stripe", content=payload, headers=headers)


async def seed_appointment(db_session, tenant_id, **fields):
    appointment = Appointment(
        tenant_id=tenant_id,
        start_time=datetime(2024, 1, 1, 9, 0),
        end_time=datetime(2024, 1, 1, 10, 0),
        **fields,
    )
    db_session.add(appointment)
    await db_session.commit()
    return appointment.id


@pytest.mark.asyncio
async def test_service_booking_replay_applies_once(client: AsyncClient, db_session, tenant):
    """Same delivery twice: both acknowledged, appointment confirmed once"""
    # Arrange
    tenant_id = tenant.id
    appointment_id = await seed_appointment(db_session, tenant_id)
    body = checkout_completed(
        {
            "type": "SERVICE_BOOKING",
            "tenant_id": str(tenant_id),
            "appointment_id": str(appointment_id),
        },
        payment_intent="pi_booking",
    )

    # Act
    first = await deliver(client, body)
    second = await deliver(client, body)

    # Assert
    assert first.status_code == 200
    assert first.json()["status"] == "applied"
    assert second.status_code == 200
    assert second.json()["status"] == "already_applied"

    appointment = await reload(db_session, Appointment, appointment_id)
    assert appointment.status == AppointmentStatus.CONFIRMED
    assert appointment.paid is True
    assert appointment.stripe_payment_ref == "pi_booking"


@pytest.mark.asyncio
async def test_booking_is_scoped_to_tenant(client: AsyncClient, db_session, tenant):
    """Metadata naming another tenant cannot touch this tenant's appointment"""
    appointment_id = await seed_appointment(db_session, tenant.id)
    body = checkout_completed(
        {
            "type": "SERVICE_BOOKING",
            "tenant_id": str(uuid4()),
            "appointment_id": str(appointment_id),
        }
    )

    response = await deliver(client, body)

    assert response.status_code == 200
    assert response.json()["status"] == "not_found"
    appointment = await reload(db_session, Appointment, appointment_id)
    assert appointment.paid is False


@pytest.mark.asyncio
async def test_recurring_group_confirmed_together(client: AsyncClient, db_session, tenant):
    tenant_id = tenant.id
    group_id = uuid4()
    for _ in range(3):
        await seed_appointment(db_session, tenant_id, recurring_group_id=group_id)
    cancelled_id = await seed_appointment(
        db_session, tenant_id, recurring_group_id=group_id, status=AppointmentStatus.CANCELLED
    )
    body = checkout_completed(
        {
            "type": "RECURRING_BOOKING",
            "tenant_id": str(tenant_id),
            "recurring_group_id": str(group_id),
            "appointment_count": "3",
        }
    )

    response = await deliver(client, body)
    replay = await deliver(client, body)

    assert response.json()["status"] == "applied"
    assert replay.json()["status"] == "already_applied"
    members = await all_rows(db_session, Appointment, recurring_group_id=group_id)
    assert sum(1 for m in members if m.paid) == 3
    cancelled = await reload(db_session, Appointment, cancelled_id)
    assert cancelled.status == AppointmentStatus.CANCELLED
    assert cancelled.paid is False


@pytest.mark.asyncio
async def test_invoice_payment_writes_one_ledger_entry(client: AsyncClient, db_session, tenant):
    # Arrange
    tenant_id = tenant.id
    invoice = Invoice(
        tenant_id=tenant_id,
        invoice_number="VTK-1001",
        customer_name="Jane Doe",
        status=InvoiceStatus.sent,
        subtotal=10000,
        total_amount=10000,
    )
    db_session.add(invoice)
    await db_session.commit()
    invoice_id = invoice.id
    body = checkout_completed(
        {"type": "invoice_payment", "tenant_id": str(tenant_id), "invoice_id": str(invoice_id)},
        payment_intent="pi_invoice",
    )

    # Act
    first = await deliver(client, body)
    second = await deliver(client, body)

    # Assert
    assert first.json()["status"] == "applied"
    assert second.json()["status"] == "already_applied"
    invoice = await reload(db_session, Invoice, invoice_id)
    assert invoice.status == InvoiceStatus.paid
    assert invoice.amount_paid == 10000
    entries = await all_rows(db_session, RevenueEntry, tenant_id=tenant_id)
    assert len(entries) == 1
    assert entries[0].category == RevenueCategory.invoice
    assert entries[0].platform_fee == 150


@pytest.mark.asyncio
async def test_paid_invoice_is_noop(client: AsyncClient, db_session, tenant):
    tenant_id = tenant.id
    invoice = Invoice(
        tenant_id=tenant_id,
        invoice_number="VTK-1001",
        status=InvoiceStatus.paid,
        total_amount=500,
        amount_paid=500,
    )
    db_session.add(invoice)
    await db_session.commit()
    body = checkout_completed(
        {"type": "invoice_payment", "tenant_id": str(tenant_id), "invoice_id": str(invoice.id)}
    )

    response = await deliver(client, body)

    assert response.status_code == 200
    assert response.json()["status"] == "already_applied"
    assert await all_rows(db_session, RevenueEntry, tenant_id=tenant_id) == []


@pytest.mark.asyncio
async def test_product_purchase_receipts_are_numbered(
    client: AsyncClient, db_session, tenant, product, gateway
):
    tenant_id = tenant.id
    product_id = product.id
    gateway.retrieve_payment_intent.side_effect = None
    gateway.retrieve_payment_intent.return_value = PaymentIntentInfo(id="pi", amount=1999)

    for _ in range(2):
        body = checkout_completed(
            {"type": "PRODUCT_PURCHASE", "tenant_id": str(tenant_id), "item_id": str(product_id)}
        )
        response = await deliver(client, body)
        assert response.json()["status"] == "applied"

    entries = await all_rows(db_session, RevenueEntry, tenant_id=tenant_id)
    assert sorted(e.receipt_number for e in entries) == ["RCP-0001", "RCP-0002"]
    assert all(e.category == RevenueCategory.direct_sales for e in entries)


@pytest.mark.asyncio
async def test_terminal_sale_twice_creates_one_invoice(client: AsyncClient, db_session, tenant):
    """Terminal sale delivered twice: one invoice, one ledger entry"""
    tenant_id = tenant.id
    body = checkout_completed(
        {"type": "TERMINAL_PAYMENT", "tenant_id": str(tenant_id), "method": "push"},
        amount_total=5000,
    )

    first = await deliver(client, body)
    second = await deliver(client, body)

    assert first.json()["status"] == "applied"
    assert first.json()["detail"] == "VTK-1001"
    assert second.json()["status"] == "already_applied"
    invoices = await all_rows(db_session, Invoice, tenant_id=tenant_id)
    assert len(invoices) == 1
    assert invoices[0].status == InvoiceStatus.paid
    assert invoices[0].line_items[0]["description"] == "Terminal Payment via Payment Link"
    entries = await all_rows(db_session, RevenueEntry, tenant_id=tenant_id)
    assert len(entries) == 1
    assert entries[0].category == RevenueCategory.daily_sales
    assert entries[0].invoice_number == "VTK-1001"


@pytest.mark.asyncio
async def test_subscription_id_recorded_once(client: AsyncClient, db_session, tenant):
    tenant_id = tenant.id
    first = await deliver(
        client,
        checkout_completed(
            {"type": "connectivity_fee_subscription", "tenant_id": str(tenant_id)},
            subscription="sub_first",
        ),
    )
    second = await deliver(
        client,
        checkout_completed(
            {"type": "connectivity_fee_subscription", "tenant_id": str(tenant_id)},
            subscription="sub_second",
        ),
    )

    assert first.json()["status"] == "applied"
    assert second.json()["status"] == "already_applied"
    stored = await reload(db_session, Tenant, tenant_id)
    assert stored.stripe_subscription_id == "sub_first"


@pytest.mark.asyncio
async def test_onboarding_schedules_subscription_after_response(
    client: AsyncClient, db_session, gateway
):
    """Account onboarding queues the schedule once; dispatch runs in the background"""
    # Arrange
    tenant = Tenant(slug="new-shop", business_name="New Shop")
    db_session.add(tenant)
    await db_session.commit()
    tenant_id = tenant.id
    body = account_updated({"tenant_id": str(tenant_id)}, id="acct_new")

    # Act
    first = await deliver(client, body)
    second = await deliver(client, body)

    # Assert
    assert first.status_code == 200
    assert len(first.json()["outbox_message_ids"]) == 1
    assert second.json()["outbox_message_ids"] == []
    messages = await all_rows(db_session, OutboxMessage)
    assert len(messages) == 1
    assert messages[0].status == OutboxStatus.done
    stored = await reload(db_session, Tenant, tenant_id)
    assert stored.stripe_account_id == "acct_new"
    assert stored.stripe_subscription_schedule_id == "sub_sched_1"
    assert stored.stripe_subscription_id == "sub_1"
    gateway.create_subscription_schedule.assert_called_once()


@pytest.mark.asyncio
async def test_schedule_subscription_checkout_is_recognised(
    client: AsyncClient, db_session, gateway
):
    """The subscription started by the schedule is the one recorded on the tenant"""
    # Arrange
    tenant = Tenant(slug="new-shop", business_name="New Shop")
    db_session.add(tenant)
    await db_session.commit()
    tenant_id = tenant.id
    await deliver(client, account_updated({"tenant_id": str(tenant_id)}))

    # Act
    response = await deliver(
        client,
        checkout_completed(
            {"type": "connectivity_fee_subscription", "tenant_id": str(tenant_id)},
            subscription="sub_1",
        ),
    )

    # Assert
    assert response.status_code == 200
    assert response.json()["status"] == "already_applied"
    stored = await reload(db_session, Tenant, tenant_id)
    assert stored.stripe_subscription_id == "sub_1"
    assert stored.stripe_subscription_schedule_id == "sub_sched_1"


@pytest.mark.asyncio
async def test_subscription_failure_does_not_fail_webhook(
    client: AsyncClient, db_session, gateway
):
    from src.app.services.payment_gateway import PaymentGatewayError

    tenant = Tenant(slug="new-shop", business_name="New Shop")
    db_session.add(tenant)
    await db_session.commit()
    gateway.create_customer.side_effect = PaymentGatewayError("provider down")

    response = await deliver(client, account_updated({"tenant_id": str(tenant.id)}))

    assert response.status_code == 200
    messages = await all_rows(db_session, OutboxMessage)
    assert messages[0].status == OutboxStatus.pending
    assert messages[0].attempts == 1
    assert "provider down" in messages[0].last_error


@pytest.mark.asyncio
async def test_invalid_signature_is_rejected(client: AsyncClient, db_session, tenant):
    appointment_id = await seed_appointment(db_session, tenant.id)
    body = checkout_completed(
        {
            "type": "SERVICE_BOOKING",
            "tenant_id": str(tenant.id),
            "appointment_id": str(appointment_id),
        }
    )

    response = await deliver(client, body, secret="whsec_attacker")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "UNAUTHENTICATED"
    appointment = await reload(db_session, Appointment, appointment_id)
    assert appointment.paid is False


@pytest.mark.asyncio
async def test_missing_signature_header_is_rejected(client: AsyncClient):
    response = await client.post(
        "/webhooks/stripe", content=json.dumps(event("customer.created", {"id": "cus_1"}))
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_missing_metadata_is_malformed(client: AsyncClient):
    response = await deliver(client, checkout_completed({"type": "SERVICE_BOOKING"}))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MALFORMED_PAYLOAD"


@pytest.mark.asyncio
async def test_unknown_events_are_acknowledged(client: AsyncClient):
    unknown_kind = await deliver(client, event("payout.paid", {"id": "po_1"}))
    unknown_type = await deliver(client, checkout_completed({"type": "GIFT_CARD"}))
    untagged = await deliver(client, checkout_completed({}))

    for response in (unknown_kind, unknown_type, untagged):
        assert response.status_code == 200
        assert response.json()["status"] == "ignored"


@pytest.mark.asyncio
async def test_datastore_failure_returns_500_without_partial_rows(
    client: AsyncClient, db_session, tenant, product, monkeypatch
):
    """Failed insert is retried by the provider and succeeds on redelivery"""
    # Arrange
    tenant_id = tenant.id
    body = checkout_completed(
        {"type": "PRODUCT_PURCHASE", "tenant_id": str(tenant_id), "item_id": str(product.id)}
    )

    async def failing_insert(self, row):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    # Act
    with monkeypatch.context() as patch:
        patch.setattr(SqlAlchemyMutationApplier, "insert_once", failing_insert)
        failed = await deliver(client, body)
    retried = await deliver(client, body)

    # Assert
    assert failed.status_code == 500
    assert failed.json()["error"]["code"] == "TRANSIENT_STORE_FAILURE"
    assert retried.status_code == 200
    assert retried.json()["status"] == "applied"
    assert len(await all_rows(db_session, RevenueEntry, tenant_id=tenant_id)) == 1


@pytest.mark.asyncio
async def test_signature_over_raw_bytes(client: AsyncClient):
    """Re-serialized JSON with different whitespace does not verify"""
    payload = json.dumps(event("payout.paid", {"id": "po_1"})).encode()
    signature = sign(payload)
    reformatted = json.dumps(json.loads(payload), indent=2).encode()

    response = await client.post(
        "/webhooks/stripe", content=reformatted, headers={"Stripe-Signature": signature}
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_hanging_provider_falls_back_to_catalog_price(
    client: AsyncClient, db_session, tenant, product, gateway, monkeypatch
):
    """A provider lookup that never answers is cut off and the catalog price is used"""
    import time

    import stripe

    from src.adapter.services.stripe_gateway import StripePaymentGateway

    # Arrange
    tenant_id = tenant.id
    monkeypatch.setattr(stripe.PaymentIntent, "retrieve", lambda *args, **kwargs: time.sleep(2))
    slow_gateway = StripePaymentGateway("sk_test_hanging", timeout=0.05)
    gateway.retrieve_payment_intent.side_effect = slow_gateway.retrieve_payment_intent
    body = checkout_completed(
        {"type": "PRODUCT_PURCHASE", "tenant_id": str(tenant_id), "item_id": str(product.id)}
    )

    # Act
    started = time.monotonic()
    response = await deliver(client, body)
    elapsed = time.monotonic() - started

    # Assert
    assert response.status_code == 200
    assert response.json()["status"] == "applied"
    assert elapsed < 1.5
    entries = await all_rows(db_session, RevenueEntry, tenant_id=tenant_id)
    assert [e.amount for e in entries] == [1999]
