"""
Terminal Payment Handler

Creates a paid invoice for an in-person sale, then its daily-sales ledger entry.
"""

import logging

from config import ApplicationConfig
from libs.result import Error, Result, Return
from src.app.services.bookkeeping import create_invoice_once, record_revenue
from src.domain.base import utcnow
from src.domain.entities import Invoice, InvoiceStatus, RevenueCategory, RevenueEntry
from src.domain.events import CheckoutSession, EventEnvelope
from src.domain.fees import calculate_platform_fee

from .base import DEFAULT_CUSTOMER_NAME, CheckoutHandler, malformed
from .dtos import HandlerStatus, WebhookOutcome

logger = logging.getLogger(__name__)

METHOD_LABELS = {
    "scan": "QR Code",
    "push": "Payment Link",
}


def method_label(method: str) -> str:
    return METHOD_LABELS.get(method, "Manual Entry")


class TerminalPaymentHandler(CheckoutHandler):
    """
    Business Rules:
    - Primary: one paid invoice per (tenant, checkout session id)
    - Secondary: one revenue entry in category daily_sales
    - Amount comes from the payment intent, else the session total;
      without either the delivery fails and is retried
    """

    async def handle(
        self, envelope: EventEnvelope, session: CheckoutSession
    ) -> Result[WebhookOutcome]:
        tenant_id = session.tenant_id
        if tenant_id is None:
            return malformed("TERMINAL_PAYMENT requires tenant_id")
        method = session.meta("method") or "manual"

        async with self.uow:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            if tenant is None:
                logger.warning(f"Tenant {tenant_id} not found for terminal payment")
                return Return.ok(
                    self.outcome(envelope, session, HandlerStatus.not_found, "tenant")
                )
            existing = await self.uow.invoices.get_by_checkout_session(
                tenant_id, session.id
            )
            if existing is not None:
                return Return.ok(
                    self.outcome(envelope, session, HandlerStatus.already_applied)
                )
            fee_percent = tenant.platform_fee_percent

        intent = await self.retrieve_intent(session)
        amount = intent.amount if intent is not None else session.amount_total
        if amount is None:
            return Return.err(
                Error(
                    "PAYMENT_PROVIDER_UNAVAILABLE",
                    f"Could not determine amount for checkout session {session.id}",
                )
            )

        customer_name = session.meta("customer_name", "customerName")
        if not customer_name and session.customer_details is not None:
            customer_name = session.customer_details.name
        customer_name = customer_name or DEFAULT_CUSTOMER_NAME
        label = method_label(method)

        now = utcnow()
        invoice = Invoice(
            tenant_id=tenant_id,
            invoice_number="",
            customer_name=customer_name,
            customer_email=session.email,
            status=InvoiceStatus.paid,
            line_items=[
                {
                    "description": f"Terminal Payment via {label}",
                    "quantity": 1,
                    "unit_price": amount,
                    "total": amount,
                }
            ],
            subtotal=amount,
            tax_amount=0,
            total_amount=amount,
            amount_paid=amount,
            due_date=now.date(),
            paid_at=now,
            stripe_checkout_session_id=session.id,
            stripe_payment_intent_id=session.payment_intent,
        )

        async with self.uow:
            created = await create_invoice_once(
                self.uow, invoice, ApplicationConfig.INVOICE_NUMBER_PREFIX
            )
            if not created:
                return Return.ok(
                    self.outcome(envelope, session, HandlerStatus.already_applied)
                )
            invoice_id = invoice.id
            invoice_number = invoice.invoice_number
            await self.uow.commit()

        logger.info(f"Terminal invoice {invoice_number} created for tenant {tenant_id}")

        async def write_ledger() -> None:
            await record_revenue(
                self.uow,
                RevenueEntry(
                    tenant_id=tenant_id,
                    amount=amount,
                    platform_fee=calculate_platform_fee(amount, fee_percent),
                    category=RevenueCategory.daily_sales,
                    description=f"Terminal Payment - {customer_name} ({label})",
                    notes=f"Terminal payment via {method}. Payment Intent: {session.payment_intent}",
                    invoice_id=invoice_id,
                    invoice_number=invoice_number,
                    customer_name=customer_name,
                    customer_email=session.email,
                    stripe_payment_ref=session.payment_ref,
                ),
            )

        await self.run_secondary("revenue_entry", envelope.id, write_ledger)
        return Return.ok(
            self.outcome(envelope, session, HandlerStatus.applied, invoice_number)
        )
