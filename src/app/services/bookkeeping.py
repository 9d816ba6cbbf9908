"""
Ledger and invoice writes shared by reconciliation handlers.

Both writes are guarded by a uniqueness constraint on their natural key and
go through MutationApplier.insert_once. A conflict means either the natural
key already exists (a replayed delivery: stop) or a concurrent writer took
the sequence number we computed (retry with the next one).
"""

import logging
from typing import Callable, Optional

from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Invoice, RevenueEntry
from src.domain.numbering import INVOICE_START, RECEIPT_START, next_sequence_number

logger = logging.getLogger(__name__)

MAX_NUMBERING_ATTEMPTS = 5


class NumberingConflictError(Exception):
    """Sequence number kept colliding with concurrent writers"""


async def record_revenue(
    uow: UnitOfWork,
    entry: RevenueEntry,
    receipt_prefix: Optional[str] = None,
    describe: Optional[Callable[[str], str]] = None,
) -> bool:
    """
    Append a ledger entry once per (tenant, payment reference).

    Args:
        uow: Unit of work with an open transaction
        entry: Entry to insert; receipt_number is assigned when receipt_prefix
            is given
        receipt_prefix: Allocate the next receipt number in the entry's category
        describe: Builds the description from the allocated receipt number

    Returns:
        True if inserted, False if the payment reference was already recorded
    """
    for _ in range(MAX_NUMBERING_ATTEMPTS):
        if receipt_prefix:
            latest = await uow.revenue.latest_receipt_number(
                entry.tenant_id, entry.category, receipt_prefix
            )
            entry.receipt_number = next_sequence_number(
                receipt_prefix, latest, start=RECEIPT_START
            )
            if describe is not None:
                entry.description = describe(entry.receipt_number)

        if await uow.applier.insert_once(entry):
            return True

        if await uow.revenue.get_by_payment_ref(entry.tenant_id, entry.stripe_payment_ref):
            return False

        logger.warning(
            f"Receipt number {entry.receipt_number} taken concurrently for tenant "
            f"{entry.tenant_id}, retrying"
        )

    raise NumberingConflictError(
        f"Could not allocate a receipt number for tenant {entry.tenant_id}"
    )


async def create_invoice_once(uow: UnitOfWork, invoice: Invoice, prefix: str) -> bool:
    """
    Insert an invoice keyed by its checkout session id, numbering it.

    Returns:
        True if inserted, False if an invoice for the session already exists
    """
    for _ in range(MAX_NUMBERING_ATTEMPTS):
        latest = await uow.invoices.latest_invoice_number(invoice.tenant_id, prefix)
        invoice.invoice_number = next_sequence_number(prefix, latest, start=INVOICE_START)

        if await uow.applier.insert_once(invoice):
            return True

        existing = await uow.invoices.get_by_checkout_session(
            invoice.tenant_id, invoice.stripe_checkout_session_id
        )
        if existing is not None:
            return False

        logger.warning(
            f"Invoice number {invoice.invoice_number} taken concurrently for tenant "
            f"{invoice.tenant_id}, retrying"
        )

    raise NumberingConflictError(
        f"Could not allocate an invoice number for tenant {invoice.tenant_id}"
    )
