"""
Host type resolution.

Python has one ``int`` and one ``float``; the sized markers below let a record
declare the column width it needs while the values stay plain Python numbers:

    @dataclass
    class Reading:
        sensor: UInt16
        value: Float32
        taken_at: datetime
        note: Optional[str] = None

``core_type_name`` reduces an annotation to the lower-case name the type
catalog is keyed by.
"""

import enum
import types
import typing
from datetime import datetime, timedelta
from decimal import Decimal
from collections.abc import Iterable
from typing import Any, NewType, Optional, Tuple
from uuid import UUID

from anybase.shared.exceptions import UnsupportedMappingError

# =============================================================================
# SIZED MARKERS
# =============================================================================

Int8 = NewType("Int8", int)
UInt8 = NewType("UInt8", int)
Int16 = NewType("Int16", int)
UInt16 = NewType("UInt16", int)
Int32 = NewType("Int32", int)
UInt32 = NewType("UInt32", int)
UInt64 = NewType("UInt64", int)
Float32 = NewType("Float32", float)
Char = NewType("Char", str)

_MARKERS = {
    marker: marker.__name__.lower()
    for marker in (Int8, UInt8, Int16, UInt16, Int32, UInt32, UInt64, Float32, Char)
}

# bool must be checked before int
_BUILTINS: Tuple[Tuple[type, str], ...] = (
    (bool, "bool"),
    (int, "int64"),
    (float, "float64"),
    (Decimal, "decimal"),
    (str, "str"),
    (bytes, "bytes"),
    (bytearray, "bytes"),
    (datetime, "datetime"),
    (timedelta, "timedelta"),
    (UUID, "uuid"),
)

CORE_TYPE_NAMES = (
    "bool", "int8", "uint8", "int16", "uint16", "int32", "uint32", "int64", "uint64",
    "float32", "float64", "decimal", "str", "char", "bytes", "datetime", "timedelta",
    "uuid", "object",
)

_COLLECTION_ORIGINS = (list, tuple, set, frozenset, dict)


def unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
    """Strip ``Optional[...]``. Returns the inner type and whether it was optional."""
    args = typing.get_args(annotation)
    if _is_union(annotation) and type(None) in args:
        remaining = [a for a in args if a is not type(None)]
        if len(remaining) == 1:
            return remaining[0], True
    return annotation, False


def _is_union(annotation: Any) -> bool:
    origin = typing.get_origin(annotation)
    if origin is typing.Union:
        return True
    union_type = getattr(types, "UnionType", None)
    return union_type is not None and isinstance(annotation, union_type)


def enum_type_of(annotation: Any) -> Optional[type]:
    """The Enum class behind an annotation, if any."""
    inner, _ = unwrap_optional(annotation)
    if isinstance(inner, type) and issubclass(inner, enum.Enum):
        return inner
    return None


def is_collection(annotation: Any) -> bool:
    """True for plural types other than str and bytes."""
    inner, _ = unwrap_optional(annotation)
    origin = typing.get_origin(inner)
    if origin is not None:
        if origin in _COLLECTION_ORIGINS:
            return True
        return isinstance(origin, type) and _is_plural_class(origin)
    return isinstance(inner, type) and _is_plural_class(inner)


def _is_plural_class(cls: type) -> bool:
    if issubclass(cls, (str, bytes, bytearray)):
        return False
    return issubclass(cls, Iterable)


def is_nullable_or_string(annotation: Any) -> bool:
    inner, optional = unwrap_optional(annotation)
    return optional or inner is str or inner is Char


def core_type_name(annotation: Any) -> str:
    """
    Resolve an annotation to its core type name.

    Raises:
        UnsupportedMappingError: If the annotation has no core type
    """
    inner, _ = unwrap_optional(annotation)

    if inner in _MARKERS:
        return _MARKERS[inner]

    if inner is Any or inner is object:
        return "object"

    if isinstance(inner, type):
        if issubclass(inner, enum.Enum):
            return "int32"
        for host_type, name in _BUILTINS:
            if issubclass(inner, host_type):
                return name

    raise UnsupportedMappingError(
        f"No core type for annotation {annotation!r}",
        type_name=repr(annotation),
    )
