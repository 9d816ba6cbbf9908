"""
Weekly recurring series expansion.

The expansion is pure: the same inputs always produce the same series, so
the aggregate charge quoted at checkout matches the number of appointments
later confirmed by reconciliation.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List

from src.domain.fees import FeePercent, calculate_platform_fee

WEEKLY = "weekly"
SUPPORTED_PATTERNS = (WEEKLY,)

# Two years of weekly occurrences
MAX_OCCURRENCES = 104

_STEP = timedelta(days=7)


class RecurrenceError(ValueError):
    """Recurrence request that cannot be expanded"""


@dataclass(frozen=True)
class Occurrence:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class SeriesQuote:
    """Aggregate charge for a whole series, paid upfront"""

    occurrence_count: int
    unit_amount: int
    total_amount: int
    application_fee: int


def expand_weekly_series(
    start_date: date,
    start_time: time,
    end_date: date,
    duration_minutes: int,
    pattern: str = WEEKLY,
) -> List[Occurrence]:
    """
    Expand a weekly recurrence into ordered occurrences.

    Steps exactly 7 days from the anchor start_date/start_time while the
    occurrence date is on or before end_date.

    Raises:
        RecurrenceError: unsupported pattern, non-positive duration, or a
            series longer than MAX_OCCURRENCES
    """
    if pattern not in SUPPORTED_PATTERNS:
        raise RecurrenceError(f"Unsupported recurrence pattern: {pattern}")
    if duration_minutes <= 0:
        raise RecurrenceError("Service duration must be positive")

    duration = timedelta(minutes=duration_minutes)
    current = datetime.combine(start_date, start_time)
    occurrences: List[Occurrence] = []

    while current.date() <= end_date:
        if len(occurrences) >= MAX_OCCURRENCES:
            raise RecurrenceError(
                f"Series exceeds {MAX_OCCURRENCES} occurrences"
            )
        occurrences.append(Occurrence(start=current, end=current + duration))
        current = current + _STEP

    return occurrences


def quote_series(
    occurrence_count: int, unit_amount: int, fee_percent: FeePercent
) -> SeriesQuote:
    """
    Aggregate charge for a series.

    The application fee is the per-occurrence fee times the count, matching
    how the charge is presented to the provider (one line item, quantity=count).
    """
    per_occurrence_fee = calculate_platform_fee(unit_amount, fee_percent)
    return SeriesQuote(
        occurrence_count=occurrence_count,
        unit_amount=unit_amount,
        total_amount=unit_amount * occurrence_count,
        application_fee=per_occurrence_fee * occurrence_count,
    )
