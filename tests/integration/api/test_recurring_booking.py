from uuid import UUID

import pytest
from httpx import AsyncClient

from src.domain.entities import Appointment, AppointmentStatus
from tests.fixtures.db import all_rows
from tests.fixtures.stripe_events import checkout_completed, signed_request


@pytest.mark.asyncio
async def test_quote_matches_confirmed_series(client: AsyncClient, db_session, tenant, service):
    """Appointments created at booking are exactly the ones confirmed at payment"""
    # Arrange
    tenant_id, service_id = tenant.id, service.id

    # Act
    booking = await client.post(
        "/appointments/recurring",
        json={
            "tenant_id": str(tenant_id),
            "service_id": str(service_id),
            "start_date": "2024-01-01",
            "start_time": "09:00:00",
            "end_date": "2024-01-22",
            "customer_email": "client@example.com",
        },
    )
    quote = booking.json()
    payload, headers = signed_request(checkout_completed(quote["checkout_metadata"]))
    payment = await client.post("/webhooks/stripe", content=payload, headers=headers)

    # Assert
    assert booking.status_code == 201
    assert quote["appointment_count"] == 4
    assert quote["total_amount"] == 18000
    assert quote["application_fee"] == 4 * 68  # 67.5 rounds half up
    assert quote["transfer_destination"] == "acct_glow"

    assert payment.status_code == 200
    assert payment.json()["status"] == "applied"
    group_id = UUID(quote["recurring_group_id"])
    members = await all_rows(db_session, Appointment, recurring_group_id=group_id)
    assert len(members) == 4
    assert all(m.status == AppointmentStatus.CONFIRMED and m.paid for m in members)


@pytest.mark.asyncio
async def test_recurring_booking_requires_payment_account(
    client: AsyncClient, db_session, tenant, service
):
    tenant.stripe_account_id = None
    db_session.add(tenant)
    await db_session.commit()

    response = await client.post(
        "/appointments/recurring",
        json={
            "tenant_id": str(tenant.id),
            "service_id": str(service.id),
            "start_date": "2024-01-01",
            "start_time": "09:00:00",
            "end_date": "2024-01-22",
        },
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PAYMENTS_NOT_ENABLED"
