import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.services.payment_gateway import (
    PaymentGateway,
    PaymentGatewayError,
    SubscriptionScheduleInfo,
)

REPOSITORY_METHODS = {
    "tenants": ["get_by_id", "get_by_slug", "create"],
    "founding_counter": ["advance", "current"],
    "catalog": ["get_service", "get_product"],
    "appointments": ["get_for_tenant", "create_many", "list_group"],
    "invoices": ["get_for_tenant", "get_by_checkout_session", "latest_invoice_number"],
    "revenue": ["get_by_payment_ref", "latest_receipt_number", "list_for_tenant"],
    "emails": ["enqueue", "list_pending", "mark_sent", "mark_failed"],
    "outbox": [
        "get_by_id",
        "get_by_dedupe_key",
        "list_pending_ids",
        "claim",
        "mark_done",
        "release",
    ],
    "applier": ["apply", "insert_once"],
}


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork with every repository method as an AsyncMock"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    for repository, methods in REPOSITORY_METHODS.items():
        mock_repository = MagicMock()
        for method in methods:
            setattr(mock_repository, method, AsyncMock())
        setattr(uow, repository, mock_repository)

    return uow


@pytest.fixture
def mock_gateway():
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
