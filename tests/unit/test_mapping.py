"""
Unit tests for host type resolution, the type catalog and value converters.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

import pytest

from anybase.connection import DatabaseProvider
from anybase.mapping import (
    Char,
    Float32,
    Int8,
    TypeCatalog,
    UInt16,
    UInt32,
    UInt64,
    core_type_name,
    enum_type_of,
    is_collection,
    is_nullable_or_string,
    unwrap_optional,
)
from anybase.mapping import converters
from anybase.mapping.catalog import SQL_TYPES
from anybase.mapping.types import CORE_TYPE_NAMES
from anybase.shared.exceptions import UnsupportedMappingError

SQLSERVER = DatabaseProvider.SQLSERVER
MYSQL = DatabaseProvider.MYSQL
SQLITE = DatabaseProvider.SQLITE


class Color(Enum):
    RED = 1
    GREEN = 2


class TestCoreTypeNames:
    """Tests for annotation -> core type resolution."""

    @pytest.mark.parametrize("annotation,expected", [
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
        (Int8, "int8"),
        (UInt16, "uint16"),
        (UInt32, "uint32"),
        (UInt64, "uint64"),
        (Float32, "float32"),
        (Char, "char"),
        (Any, "object"),
        (object, "object"),
    ])
    def test_builtin_and_marker_types(self, annotation, expected):
        assert core_type_name(annotation) == expected

    def test_optional_is_unwrapped(self):
        assert core_type_name(Optional[int]) == "int64"
        assert core_type_name(int | None) == "int64"

    def test_enum_maps_to_int32(self):
        assert core_type_name(Color) == "int32"
        assert core_type_name(Optional[Color]) == "int32"
        assert enum_type_of(Optional[Color]) is Color
        assert enum_type_of(int) is None

    def test_unknown_type_raises(self):
        @dataclass
        class Point:
            x: int

        with pytest.raises(UnsupportedMappingError):
            core_type_name(Point)

    def test_unwrap_optional(self):
        assert unwrap_optional(Optional[str]) == (str, True)
        assert unwrap_optional(str) == (str, False)

    def test_collections(self):
        assert is_collection(List[int])
        assert is_collection(Dict[str, int])
        assert is_collection(list)
        assert is_collection(Optional[List[str]])
        assert not is_collection(str)
        assert not is_collection(bytes)
        assert not is_collection(int)

    def test_nullable_or_string(self):
        assert is_nullable_or_string(str)
        assert is_nullable_or_string(Optional[int])
        assert is_nullable_or_string(Char)
        assert not is_nullable_or_string(int)


class TestTypeCatalog:
    """Tests for the per-provider mapping tables."""

    def test_every_core_type_has_sql_type_for_every_provider(self, types):
        for provider in DatabaseProvider:
            for core_type in CORE_TYPE_NAMES:
                assert types.sql_type(provider, core_type)

    @pytest.mark.parametrize("provider,core_type,expected", [
        (SQLSERVER, "bool", "bit"),
        (SQLSERVER, "uint64", "decimal(20)"),
        (SQLSERVER, "decimal", "decimal(29,19)"),
        (SQLSERVER, "uuid", "uniqueidentifier"),
        (MYSQL, "str", "varchar(60)"),
        (MYSQL, "uuid", "char(36)"),
        (MYSQL, "decimal", "decimal(58,29)"),
        (MYSQL, "datetime", "datetime(3)"),
        (SQLITE, "int32", "MEDIUMINT SIGNED"),
        (SQLITE, "uint64", "VARCHAR(20)"),
        (SQLITE, "uuid", "CHARACTER(36)"),
        (SQLITE, "object", "NONE"),
    ])
    def test_sql_types(self, types, provider, core_type, expected):
        assert types.sql_type(provider, core_type) == expected

    def test_unknown_core_type_raises(self, types):
        with pytest.raises(UnsupportedMappingError) as exc:
            types.sql_type(MYSQL, "complex")
        assert exc.value.type_name == "complex"

    def test_missing_provider_raises(self):
        catalog = TypeCatalog(sql_types={MYSQL: SQL_TYPES[MYSQL]})
        with pytest.raises(UnsupportedMappingError):
            catalog.sql_type(SQLITE, "int32")

    def test_widening_targets(self, types):
        assert types.widening_target(SQLSERVER, "int8") == "int32"
        assert types.widening_target(SQLSERVER, "uint16") == "int32"
        assert types.widening_target(SQLSERVER, "uint32") == "int64"
        assert types.widening_target(SQLSERVER, "uint64") == "decimal"
        assert types.widening_target(SQLITE, "uint64") == "str"
        assert types.widening_target(SQLITE, "decimal") == "str"
        assert types.widening_target(MYSQL, "uint64") is None

    def test_value_limits(self, types):
        assert types.is_within_bounds(SQLSERVER, "int8", 127)
        assert not types.is_within_bounds(SQLSERVER, "int8", 128)
        assert not types.is_within_bounds(MYSQL, "uint32", -1)
        assert types.is_within_bounds(SQLSERVER, "datetime", datetime(2024, 1, 1))
        assert not types.is_within_bounds(SQLSERVER, "datetime", datetime(1700, 1, 1))
        assert types.is_within_bounds(SQLITE, "str", "anything")
        assert types.is_within_bounds(SQLITE, "int8", None)


class TestConverters:
    """Tests for the semantic conversions applied through the catalog."""

    def test_timedelta_ticks(self, types):
        to_db = types.conversion_to_provider(SQLSERVER, "timedelta")
        from_db = types.conversion_from_provider(SQLSERVER, "timedelta")

        value = timedelta(days=1, seconds=2, microseconds=3)
        ticks = to_db(value)

        assert ticks == 864_000_000_000 + 20_000_000 + 30
        assert from_db(ticks) == value

    def test_uuid_as_text(self, types):
        value = UUID("12345678-1234-5678-1234-567812345678")
        text = types.conversion_to_provider(MYSQL, "uuid")(value)

        assert text == "12345678-1234-5678-1234-567812345678"
        assert types.conversion_from_provider(MYSQL, "uuid")(text) == value
        assert converters.text_to_uuid(value.bytes) == value

    def test_sqlite_uint32(self, types):
        assert types.conversion_to_provider(SQLITE, "uint32")(4_294_967_295) == 4_294_967_295
        assert types.conversion_from_provider(SQLITE, "uint32")("4294967295") == 4_294_967_295

    def test_sqlite_uint64(self, types):
        largest = 2 ** 64 - 1
        stored = types.conversion_to_provider(SQLITE, "uint64")(largest)

        assert stored == Decimal(largest)
        assert types.conversion_from_provider(SQLITE, "uint64")(stored) == largest

    def test_sqlite_datetime_text(self, types):
        value = datetime(2024, 2, 29, 13, 45, 1, 250000)
        text = types.conversion_to_provider(SQLITE, "datetime")(value)

        assert text == "2024-02-29 13:45:01.250000"
        assert types.conversion_from_provider(SQLITE, "datetime")(text) == value

    def test_booleans_from_integers(self, types):
        to_host = types.conversion_from_provider(MYSQL, "bool")
        assert to_host(1) is True
        assert to_host(0) is False

    def test_no_conversion_is_none(self, types):
        assert types.conversion_to_provider(MYSQL, "int32") is None
        assert types.conversion_from_provider(SQLSERVER, "str") is None
