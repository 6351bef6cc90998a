"""
Type Mapping

Host type resolution and the per-provider type catalog.
"""

from anybase.mapping.types import (
    Int8,
    UInt8,
    Int16,
    UInt16,
    Int32,
    UInt32,
    UInt64,
    Float32,
    Char,
    CORE_TYPE_NAMES,
    core_type_name,
    enum_type_of,
    is_collection,
    is_nullable_or_string,
    unwrap_optional,
)
from anybase.mapping.catalog import TypeCatalog, ValueLimits, default_type_catalog

__all__ = [
    "Int8",
    "UInt8",
    "Int16",
    "UInt16",
    "Int32",
    "UInt32",
    "UInt64",
    "Float32",
    "Char",
    "CORE_TYPE_NAMES",
    "core_type_name",
    "enum_type_of",
    "is_collection",
    "is_nullable_or_string",
    "unwrap_optional",
    "TypeCatalog",
    "ValueLimits",
    "default_type_catalog",
]
