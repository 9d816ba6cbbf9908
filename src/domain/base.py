from datetime import UTC, datetime


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column stores"""
    return datetime.now(UTC).replace(tzinfo=None)
