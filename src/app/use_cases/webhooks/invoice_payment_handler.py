"""
Invoice Payment Handler

Marks an invoice paid, then writes the matching ledger entry.
"""

import logging
from decimal import Decimal

from config import ApplicationConfig
from libs.result import Result, Return
from src.app.services.bookkeeping import record_revenue
from src.app.services.mutation_applier import Transition
from src.domain.base import utcnow
from src.domain.entities import Invoice, InvoiceStatus, RevenueCategory, RevenueEntry
from src.domain.events import CheckoutSession, EventEnvelope
from src.domain.fees import calculate_platform_fee

from .base import CheckoutHandler, malformed
from .dtos import HandlerStatus, WebhookOutcome

logger = logging.getLogger(__name__)

UNPAID_STATUSES = [InvoiceStatus.draft, InvoiceStatus.sent, InvoiceStatus.partially_paid]


class InvoicePaymentHandler(CheckoutHandler):
    """
    Business Rules:
    - Primary: status in (draft, sent, partially_paid) -> paid,
      amount_paid = total_amount
    - Secondary: one revenue entry in category `invoice`, keyed by the
      payment reference
    - An invoice already paid is a no-op and writes no ledger entry
    """

    async def handle(
        self, envelope: EventEnvelope, session: CheckoutSession
    ) -> Result[WebhookOutcome]:
        tenant_id = session.tenant_id
        invoice_id = session.meta_uuid("invoice_id", "invoiceId")
        if tenant_id is None or invoice_id is None:
            return malformed("invoice_payment requires tenant_id and invoice_id")

        async with self.uow:
            invoice = await self.uow.invoices.get_for_tenant(tenant_id, invoice_id)
            if invoice is None:
                logger.warning(f"Invoice {invoice_id} not found for tenant {tenant_id}")
                return Return.ok(
                    self.outcome(envelope, session, HandlerStatus.not_found, "invoice")
                )

            if invoice.status == InvoiceStatus.paid:
                return Return.ok(
                    self.outcome(envelope, session, HandlerStatus.already_applied)
                )

            total_amount = invoice.total_amount
            invoice_number = invoice.invoice_number
            customer_name = invoice.customer_name
            customer_email = invoice.customer_email

            now = utcnow()
            changed = await self.uow.applier.apply(
                Transition(
                    entity=Invoice,
                    key={"tenant_id": tenant_id, "id": invoice_id},
                    when={"status": UNPAID_STATUSES},
                    values={
                        "status": InvoiceStatus.paid,
                        "amount_paid": total_amount,
                        "paid_at": now,
                        "stripe_payment_intent_id": session.payment_intent,
                        "updated_at": now,
                    },
                )
            )
            if not changed:
                return Return.ok(
                    self.outcome(envelope, session, HandlerStatus.already_applied)
                )
            await self.uow.commit()

        logger.info(f"Invoice {invoice_number} marked paid ({total_amount})")

        async def write_ledger() -> None:
            tenant = await self.uow.tenants.get_by_id(tenant_id)
            fee_percent = (
                tenant.platform_fee_percent
                if tenant is not None
                else Decimal(ApplicationConfig.DEFAULT_PLATFORM_FEE_PERCENT)
            )
            await record_revenue(
                self.uow,
                RevenueEntry(
                    tenant_id=tenant_id,
                    amount=total_amount,
                    platform_fee=calculate_platform_fee(total_amount, fee_percent),
                    category=RevenueCategory.invoice,
                    description=f"Invoice {invoice_number} - {customer_name}",
                    notes="Automatically synced from invoice payment",
                    invoice_id=invoice_id,
                    invoice_number=invoice_number,
                    customer_name=customer_name,
                    customer_email=customer_email,
                    stripe_payment_ref=session.payment_ref,
                ),
            )

        await self.run_secondary("revenue_entry", envelope.id, write_ledger)
        return Return.ok(self.outcome(envelope, session, HandlerStatus.applied))
