"""
Platform fee calculation.

Amounts are integers in minor units (cents). The fee is rounded half away
from zero, which is how the payment provider rounds application fees, so the
value sent at checkout and the value verified provider-side never differ by
more than one minor unit.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

FeePercent = Union[Decimal, int, float, str]

_HUNDRED = Decimal(100)
_ONE = Decimal(1)


@dataclass(frozen=True)
class FeeSplit:
    """Platform cut and merchant payout of one charge"""

    amount: int
    platform_fee: int
    merchant_payout: int


def _as_decimal(fee_percent: FeePercent) -> Decimal:
    # str() first so floats like 1.1 do not carry binary noise
    return fee_percent if isinstance(fee_percent, Decimal) else Decimal(str(fee_percent))


def calculate_platform_fee(amount: int, fee_percent: FeePercent) -> int:
    """
    Platform fee for a charge.

    Args:
        amount: Charge amount in minor units, >= 0
        fee_percent: Tenant fee percentage, e.g. Decimal("1.5")

    Returns:
        round_half_up(amount * fee_percent / 100) in minor units

    Raises:
        ValueError: amount or fee_percent is negative
    """
    percent = _as_decimal(fee_percent)
    if amount < 0:
        raise ValueError(f"amount must be >= 0, got {amount}")
    if percent < 0:
        raise ValueError(f"fee_percent must be >= 0, got {percent}")
    if amount == 0:
        return 0

    fee = Decimal(amount) * percent / _HUNDRED
    return int(fee.quantize(_ONE, rounding=ROUND_HALF_UP))


def split_amount(amount: int, fee_percent: FeePercent) -> FeeSplit:
    """Split a charge into platform fee and merchant payout"""
    platform_fee = calculate_platform_fee(amount, fee_percent)
    return FeeSplit(
        amount=amount,
        platform_fee=platform_fee,
        merchant_payout=amount - platform_fee,
    )
