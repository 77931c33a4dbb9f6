"""Conversions between aware UTC datetimes and epoch milliseconds."""
from __future__ import annotations

from datetime import datetime, timedelta, UTC
from typing import Optional

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_ONE_MS = timedelta(milliseconds=1)
_INT32_MAX = 2**31 - 1
_INT32_MIN = -(2**31)


def now_utc() -> datetime:
    """Return an aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and normalize aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_millis(value: Optional[datetime]) -> Optional[int]:
    if value is None:
        return None
    return (ensure_utc(value) - EPOCH) // _ONE_MS


def to_millis_ceil(value: Optional[datetime]) -> Optional[int]:
    """Epoch milliseconds rounded up; used for lower query bounds."""
    if value is None:
        return None
    return -((EPOCH - ensure_utc(value)) // _ONE_MS)


def truncate_millis(value: datetime) -> datetime:
    """Drop sub-millisecond precision, matching what the store keeps."""
    return value.replace(microsecond=value.microsecond - value.microsecond % 1000)


def from_millis(value: Optional[int]) -> Optional[datetime]:
    if value is None:
        return None
    return EPOCH + timedelta(milliseconds=value)


def saturated_int32(value: float) -> int:
    """Clamp to the signed 32-bit range."""
    return max(_INT32_MIN, min(_INT32_MAX, int(value)))
