import logging
from typing import Awaitable, Callable, List
from uuid import UUID

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.database import create_engine
from src.adapter.services.stripe_gateway import StripePaymentGateway
from src.adapter.services.stripe_signature import StripeWebhookVerifier
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.payment_gateway import PaymentGateway, PaymentGatewayError
from src.app.services.webhook_verifier import WebhookVerifier
from src.app.use_cases.billing import BillingSettings, DispatchOutboxUseCase

logger = logging.getLogger(__name__)

engine = create_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

OutboxRunner = Callable[[List[UUID]], Awaitable[None]]


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_payment_gateway() -> PaymentGateway:
    return StripePaymentGateway(
        ApplicationConfig.STRIPE_SECRET_KEY,
        max_network_retries=ApplicationConfig.STRIPE_MAX_NETWORK_RETRIES,
        timeout=ApplicationConfig.STRIPE_TIMEOUT_SECONDS,
    )


def get_billing_settings() -> BillingSettings:
    return BillingSettings(
        annual_fee_price_id=ApplicationConfig.STRIPE_ANNUAL_FEE_PRICE_ID,
        free_tier_price_id=ApplicationConfig.STRIPE_FREE_TIER_PRICE_ID or None,
    )


def get_webhook_verifier() -> WebhookVerifier:
    return StripeWebhookVerifier(
        ApplicationConfig.STRIPE_WEBHOOK_SECRET,
        tolerance=ApplicationConfig.STRIPE_WEBHOOK_TOLERANCE,
    )


def get_outbox_runner(
    gateway: PaymentGateway = Depends(get_payment_gateway),
    billing: BillingSettings = Depends(get_billing_settings),
) -> OutboxRunner:
    """
    Background outbox dispatch, run after the response is sent.

    Opens its own session: request-scoped dependencies are closed by then.
    """

    async def run(message_ids: List[UUID]) -> None:
        try:
            async with AsyncSessionLocal() as session:
                use_case = DispatchOutboxUseCase(
                    SqlAlchemyUnitOfWork(session), gateway, billing
                )
                result = await use_case.execute(message_ids)
        except (SQLAlchemyError, PaymentGatewayError) as e:
            logger.error(
                f"Outbox dispatch failed, retried once the claim lease expires: {e}"
            )
            return
        if result.value.failed:
            logger.error(f"Outbox messages failed: {result.value.failed}")

    return run
