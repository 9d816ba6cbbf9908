"""
Product Purchase Handler

Records a digital receipt in the ledger for a product sold through checkout.
"""

import logging

from config import ApplicationConfig
from libs.result import Result, Return
from src.app.services.bookkeeping import record_revenue
from src.domain.entities import RevenueCategory, RevenueEntry
from src.domain.events import CheckoutSession, EventEnvelope
from src.domain.fees import calculate_platform_fee

from .base import CheckoutHandler, malformed
from .dtos import HandlerStatus, WebhookOutcome

logger = logging.getLogger(__name__)


class ProductPurchaseHandler(CheckoutHandler):
    """
    Business Rules:
    - The revenue entry is the primary effect, keyed by the payment reference
    - Amount comes from the payment intent, else the catalog price
    - Receipt numbers are RCP-NNNN per tenant in category direct_sales
    """

    async def handle(
        self, envelope: EventEnvelope, session: CheckoutSession
    ) -> Result[WebhookOutcome]:
        tenant_id = session.tenant_id
        product_id = session.meta_uuid("item_id", "product_id", "productId")
        if tenant_id is None or product_id is None:
            return malformed("PRODUCT_PURCHASE requires tenant_id and item_id")

        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            product = (
                await self.uow.catalog.get_product(tenant_id, product_id)
                if tenant is not None
                else None
            )
            if product is None:
                logger.warning(f"Product {product_id} not found for tenant {tenant_id}")
                return Return.ok(
                    self.outcome(envelope, session, HandlerStatus.not_found, "product")
                )

            existing = await self.uow.revenue.get_by_payment_ref(
                tenant_id, session.payment_ref
            )
            if existing is not None:
                return Return.ok(
                    self.outcome(envelope, session, HandlerStatus.already_applied)
                )

            fee_percent = tenant.platform_fee_percent
            product_name = product.name
            catalog_price = product.price

        # Enrichment happens outside any open transaction
        intent = await self.retrieve_intent(session)
        amount = intent.amount if intent is not None else catalog_price
        customer_name = await self.resolve_customer_name(session, intent)

        async with self.uow:
            created = await record_revenue(
                self.uow,
                RevenueEntry(
                    tenant_id=tenant_id,
                    amount=amount,
                    platform_fee=calculate_platform_fee(amount, fee_percent),
                    category=RevenueCategory.direct_sales,
                    description=f"Digital Receipt - {product_name}",
                    notes=f"Online purchase. Checkout session: {session.id}",
                    product_id=product_id,
                    customer_name=customer_name,
                    customer_email=session.email,
                    stripe_payment_ref=session.payment_ref,
                ),
                receipt_prefix=ApplicationConfig.RECEIPT_NUMBER_PREFIX,
                describe=lambda receipt: f"Digital Receipt {receipt} - {product_name}",
            )
            if not created:
                return Return.ok(
                    self.outcome(envelope, session, HandlerStatus.already_applied)
                )
            await self.uow.commit()

        logger.info(f"Product purchase recorded for tenant {tenant_id}: {amount}")
        return Return.ok(self.outcome(envelope, session, HandlerStatus.applied))
