"""Tenant-scoped document numbering (invoices VTK-1001.., receipts RCP-0001..)"""

from typing import Optional

INVOICE_START = 1001
RECEIPT_START = 1


def next_sequence_number(
    prefix: str, latest: Optional[str], start: int, width: int = 4
) -> str:
    """
    Number following `latest` in a prefixed sequence.

    >>> next_sequence_number("VTK-", "VTK-1041", start=1001)
    'VTK-1042'
    >>> next_sequence_number("RCP-", None, start=1)
    'RCP-0001'
    """
    if latest and latest.startswith(prefix):
        suffix = latest[len(prefix):]
        if suffix.isdigit():
            return f"{prefix}{int(suffix) + 1:0{width}d}"
    return f"{prefix}{start:0{width}d}"
