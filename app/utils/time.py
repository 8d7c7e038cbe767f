"""Time Utilities for UTC management"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Naive UTC timestamp.
    Matches the schema (TIMESTAMP WITHOUT TIME ZONE) without the
    deprecated ``datetime.utcnow()``.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are taken as UTC already"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
