"""
Value converters between host values and provider representations.

Each converter takes one non-null value and returns its converted form. The
catalog never calls a converter with None.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from uuid import UUID

# One tick is 100 nanoseconds
TICKS_PER_MICROSECOND = 10
TICKS_PER_SECOND = 10_000_000
TICKS_PER_DAY = 86_400 * TICKS_PER_SECOND


def timedelta_to_ticks(value: timedelta) -> int:
    return (
        value.days * TICKS_PER_DAY
        + value.seconds * TICKS_PER_SECOND
        + value.microseconds * TICKS_PER_MICROSECOND
    )


def ticks_to_timedelta(value) -> timedelta:
    # Sub-microsecond ticks are dropped
    return timedelta(microseconds=int(value) // TICKS_PER_MICROSECOND)


def uuid_to_text(value: UUID) -> str:
    return str(value)


def text_to_uuid(value) -> UUID:
    if isinstance(value, UUID):
        return value
    if isinstance(value, (bytes, bytearray)) and len(value) == 16:
        return UUID(bytes=bytes(value))
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("ascii")
    return UUID(str(value))


def to_int(value) -> int:
    return int(value)


def to_bool(value) -> bool:
    return bool(int(value))


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def uint64_to_decimal(value: int) -> Decimal:
    return Decimal(int(value))


def decimal_to_uint64(value) -> int:
    return int(to_decimal(value))


def to_bytes(value) -> bytes:
    return bytes(value)


def datetime_to_text(value: datetime) -> str:
    return value.isoformat(sep=" ")


def text_to_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("ascii")
    return datetime.fromisoformat(str(value))


def to_text(value) -> str:
    return str(value)
