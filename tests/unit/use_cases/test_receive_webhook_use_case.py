import json
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from src.adapter.services.stripe_signature import StripeWebhookVerifier
from src.app.use_cases.webhooks import HandlerStatus, ReceiveWebhookUseCase
from tests.fixtures.stripe_events import (
    TEST_WEBHOOK_SECRET,
    checkout_completed,
    event,
    sign,
)


@pytest.fixture
def verifier():
    return StripeWebhookVerifier(TEST_WEBHOOK_SECRET)


def encode(body) -> bytes:
    return json.dumps(body).encode()


@pytest.mark.asyncio
async def test_bad_signature_is_rejected_before_parsing(mock_uow, mock_gateway, verifier):
    payload = encode(event("checkout.session.completed", {"id": "cs_1"}))

    result = await ReceiveWebhookUseCase(mock_uow, mock_gateway, verifier).execute(
        payload, sign(payload, secret="whsec_wrong")
    )

    assert result.is_err()
    assert result.error.code == "UNAUTHENTICATED"
    mock_uow.__aenter__.assert_not_called()


@pytest.mark.asyncio
async def test_missing_signature_is_rejected(mock_uow, mock_gateway, verifier):
    payload = encode(event("checkout.session.completed", {"id": "cs_1"}))

    result = await ReceiveWebhookUseCase(mock_uow, mock_gateway, verifier).execute(payload, None)

    assert result.error.code == "UNAUTHENTICATED"


@pytest.mark.asyncio
async def test_tampered_body_is_rejected(mock_uow, mock_gateway, verifier):
    payload = encode(event("checkout.session.completed", {"id": "cs_1"}))
    signature = sign(payload)

    result = await ReceiveWebhookUseCase(mock_uow, mock_gateway, verifier).execute(
        payload.replace(b"cs_1", b"cs_2"), signature
    )

    assert result.error.code == "UNAUTHENTICATED"


@pytest.mark.asyncio
async def test_unconfigured_secret_rejects_everything(mock_uow, mock_gateway):
    payload = encode(event("checkout.session.completed", {"id": "cs_1"}))

    result = await ReceiveWebhookUseCase(
        mock_uow, mock_gateway, StripeWebhookVerifier("")
    ).execute(payload, sign(payload))

    assert result.error.code == "UNAUTHENTICATED"


@pytest.mark.asyncio
async def test_unparseable_payload_is_malformed(mock_uow, mock_gateway, verifier):
    payload = b'{"id": "evt_1", "type": '

    result = await ReceiveWebhookUseCase(mock_uow, mock_gateway, verifier).execute(
        payload, sign(payload)
    )

    assert result.error.code == "MALFORMED_PAYLOAD"


@pytest.mark.asyncio
async def test_unknown_event_type_is_acknowledged(mock_uow, mock_gateway, verifier):
    payload = encode(event("customer.created", {"id": "cus_1"}))

    result = await ReceiveWebhookUseCase(mock_uow, mock_gateway, verifier).execute(
        payload, sign(payload)
    )

    assert result.is_ok()
    assert result.value.status == HandlerStatus.ignored
    mock_uow.__aenter__.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_transaction_type_is_acknowledged(mock_uow, mock_gateway, verifier):
    payload = encode(checkout_completed({"type": "GIFT_CARD", "tenant_id": str(uuid4())}))

    result = await ReceiveWebhookUseCase(mock_uow, mock_gateway, verifier).execute(
        payload, sign(payload)
    )

    assert result.value.status == HandlerStatus.ignored
    assert result.value.transaction_type == "unknown"
    mock_uow.applier.apply.assert_not_called()


@pytest.mark.asyncio
async def test_datastore_failure_is_transient(mock_uow, mock_gateway, verifier):
    payload = encode(
        checkout_completed(
            {
                "type": "SERVICE_BOOKING",
                "tenant_id": str(uuid4()),
                "appointment_id": str(uuid4()),
            }
        )
    )
    mock_uow.applier.apply.side_effect = OperationalError("UPDATE", {}, Exception("locked"))

    result = await ReceiveWebhookUseCase(mock_uow, mock_gateway, verifier).execute(
        payload, sign(payload)
    )

    assert result.is_err()
    assert result.error.code == "TRANSIENT_STORE_FAILURE"
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_invalid_metadata_id_is_malformed(mock_uow, mock_gateway, verifier):
    payload = encode(
        checkout_completed(
            {"type": "SERVICE_BOOKING", "tenant_id": "42", "appointment_id": str(uuid4())}
        )
    )

    result = await ReceiveWebhookUseCase(mock_uow, mock_gateway, verifier).execute(
        payload, sign(payload)
    )

    assert result.error.code == "MALFORMED_PAYLOAD"


@pytest.mark.asyncio
async def test_stale_timestamp_is_rejected(mock_uow, mock_gateway, verifier):
    payload = encode(event("customer.created", {"id": "cus_1"}))

    result = await ReceiveWebhookUseCase(mock_uow, mock_gateway, verifier).execute(
        payload, sign(payload, timestamp=1_000_000_000)
    )

    assert result.error.code == "UNAUTHENTICATED"
