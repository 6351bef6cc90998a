"""
Type Mapping Catalog

Static tables describing, per provider:

1. SQL TYPES      - core type name -> column type used in CREATE TABLE
2. TO PROVIDER    - semantic conversions applied before a value is written
3. FROM PROVIDER  - the inverse conversions applied to retrieved values
4. WIDENING       - driver limitations, applied by the parameter builder
5. VALUE LIMITS   - ranges callers may check before writing (never clamped)

The catalog is immutable configuration. Components receive it by reference,
so tests can hand in a fixture catalog:

    catalog = default_type_catalog()
    catalog.sql_type(DatabaseProvider.MYSQL, "uuid")          # "char(36)"
    to_db = catalog.conversion_to_provider(DatabaseProvider.SQLITE, "uint64")
    to_db(18446744073709551615)                               # Decimal(...)

Unknown providers or core types raise UnsupportedMappingError; there is no
silent fallback type.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from functools import lru_cache
from typing import Any, Callable, Dict, Mapping, Optional

from anybase.connection.descriptor import DatabaseProvider
from anybase.mapping import converters
from anybase.shared.exceptions import UnsupportedMappingError

logger = logging.getLogger(__name__)

ValueConverterFn = Callable[[Any], Any]


@dataclass(frozen=True)
class ValueLimits:
    """Inclusive range a provider can store for one core type."""
    lower: Any
    upper: Any

    def contains(self, value: Any) -> bool:
        return self.lower <= value <= self.upper


# =============================================================================
# SQL TYPES
# =============================================================================

SQL_TYPES: Dict[DatabaseProvider, Dict[str, str]] = {
    DatabaseProvider.SQLSERVER: {
        "bool": "bit",
        "int8": "smallint",
        "uint8": "tinyint",
        "int16": "smallint",
        "uint16": "int",
        "int32": "int",
        "uint32": "bigint",
        "int64": "bigint",
        "uint64": "decimal(20)",
        "float32": "real",
        "float64": "float",
        "decimal": "decimal(29,19)",
        "str": "nvarchar(max)",
        "char": "nchar(1)",
        "bytes": "varbinary(max)",
        "datetime": "datetime",
        "timedelta": "bigint",
        "uuid": "uniqueidentifier",
        "object": "sql_variant",
    },
    DatabaseProvider.MYSQL: {
        "bool": "boolean",
        "int8": "tinyint",
        "uint8": "tinyint unsigned",
        "int16": "smallint",
        "uint16": "smallint unsigned",
        "int32": "int",
        "uint32": "int unsigned",
        "int64": "bigint",
        "uint64": "bigint unsigned",
        "float32": "double",
        "float64": "double",
        "decimal": "decimal(58,29)",
        "str": "varchar(60)",
        "char": "char(1)",
        "bytes": "blob",
        "datetime": "datetime(3)",
        "timedelta": "bigint",
        "uuid": "char(36)",
        "object": "blob",
    },
    DatabaseProvider.SQLITE: {
        "bool": "TINYINT",
        "int8": "SMALLINT SIGNED",
        "uint8": "TINYINT UNSIGNED",
        "int16": "SMALLINT SIGNED",
        "uint16": "MEDIUMINT UNSIGNED",
        "int32": "MEDIUMINT SIGNED",
        "uint32": "BIGINT UNSIGNED",
        "int64": "BIGINT SIGNED",
        "uint64": "VARCHAR(20)",
        "float32": "REAL",
        "float64": "REAL",
        "decimal": "DECIMAL",
        "str": "TEXT",
        "char": "CHARACTER(1)",
        "bytes": "BLOB",
        "datetime": "DATETIME",
        "timedelta": "BIGINT SIGNED",
        "uuid": "CHARACTER(36)",
        "object": "NONE",
    },
}


# =============================================================================
# SEMANTIC CONVERSIONS
# =============================================================================

TO_PROVIDER: Dict[DatabaseProvider, Dict[str, ValueConverterFn]] = {
    DatabaseProvider.SQLSERVER: {
        "timedelta": converters.timedelta_to_ticks,
        "uuid": converters.uuid_to_text,
    },
    DatabaseProvider.MYSQL: {
        "timedelta": converters.timedelta_to_ticks,
        "uuid": converters.uuid_to_text,
    },
    DatabaseProvider.SQLITE: {
        "timedelta": converters.timedelta_to_ticks,
        "uuid": converters.uuid_to_text,
        "uint32": converters.to_int,
        "uint64": converters.uint64_to_decimal,
        "datetime": converters.datetime_to_text,
    },
}

FROM_PROVIDER: Dict[DatabaseProvider, Dict[str, ValueConverterFn]] = {
    DatabaseProvider.SQLSERVER: {
        "timedelta": converters.ticks_to_timedelta,
        "uuid": converters.text_to_uuid,
        "uint64": converters.decimal_to_uint64,
    },
    DatabaseProvider.MYSQL: {
        "timedelta": converters.ticks_to_timedelta,
        "uuid": converters.text_to_uuid,
        "bool": converters.to_bool,
        "bytes": converters.to_bytes,
    },
    DatabaseProvider.SQLITE: {
        "timedelta": converters.ticks_to_timedelta,
        "uuid": converters.text_to_uuid,
        "uint32": converters.to_int,
        "uint64": converters.decimal_to_uint64,
        "bool": converters.to_bool,
        "decimal": converters.to_decimal,
        "datetime": converters.text_to_datetime,
    },
}


# =============================================================================
# DRIVER WIDENING
# =============================================================================

# Target core type names, see anybase.sql.parameters.CASTS
WIDENING: Dict[DatabaseProvider, Dict[str, str]] = {
    DatabaseProvider.SQLSERVER: {
        "int8": "int32",
        "uint16": "int32",
        "uint32": "int64",
        "uint64": "decimal",
    },
    DatabaseProvider.MYSQL: {},
    DatabaseProvider.SQLITE: {
        "uint64": "str",
        "decimal": "str",
    },
}


# =============================================================================
# VALUE LIMITS
# =============================================================================

def _decimal_limit(precision: int, scale: int) -> ValueLimits:
    digits = "9" * (precision - scale)
    fraction = "9" * scale
    upper = Decimal(f"{digits}.{fraction}") if scale else Decimal(digits)
    return ValueLimits(-upper, upper)


_INTEGER_LIMITS = {
    "int8": ValueLimits(-2 ** 7, 2 ** 7 - 1),
    "uint8": ValueLimits(0, 2 ** 8 - 1),
    "int16": ValueLimits(-2 ** 15, 2 ** 15 - 1),
    "uint16": ValueLimits(0, 2 ** 16 - 1),
    "int32": ValueLimits(-2 ** 31, 2 ** 31 - 1),
    "uint32": ValueLimits(0, 2 ** 32 - 1),
    "int64": ValueLimits(-2 ** 63, 2 ** 63 - 1),
    "uint64": ValueLimits(0, 2 ** 64 - 1),
}

_FLOAT32_LIMITS = ValueLimits(-3.4028235e38, 3.4028235e38)

VALUE_LIMITS: Dict[DatabaseProvider, Dict[str, ValueLimits]] = {
    DatabaseProvider.SQLSERVER: {
        **_INTEGER_LIMITS,
        "float32": _FLOAT32_LIMITS,
        "decimal": _decimal_limit(29, 19),
        "datetime": ValueLimits(datetime(1753, 1, 1), datetime(9999, 12, 31, 23, 59, 59, 997000)),
    },
    DatabaseProvider.MYSQL: {
        **_INTEGER_LIMITS,
        "float32": _FLOAT32_LIMITS,
        "decimal": _decimal_limit(58, 29),
        "datetime": ValueLimits(datetime(1000, 1, 1), datetime(9999, 12, 31, 23, 59, 59, 999000)),
    },
    DatabaseProvider.SQLITE: {
        **_INTEGER_LIMITS,
        "float32": _FLOAT32_LIMITS,
    },
}


# =============================================================================
# CATALOG
# =============================================================================

@dataclass(frozen=True)
class TypeCatalog:
    """Per-provider mapping tables. Build a custom one to substitute fixtures."""

    sql_types: Mapping[DatabaseProvider, Mapping[str, str]] = field(default_factory=lambda: SQL_TYPES)
    to_provider: Mapping[DatabaseProvider, Mapping[str, ValueConverterFn]] = field(default_factory=lambda: TO_PROVIDER)
    from_provider: Mapping[DatabaseProvider, Mapping[str, ValueConverterFn]] = field(default_factory=lambda: FROM_PROVIDER)
    widening: Mapping[DatabaseProvider, Mapping[str, str]] = field(default_factory=lambda: WIDENING)
    limits: Mapping[DatabaseProvider, Mapping[str, ValueLimits]] = field(default_factory=lambda: VALUE_LIMITS)

    def _provider_table(self, tables: Mapping, provider: DatabaseProvider) -> Mapping:
        if provider not in tables:
            raise UnsupportedMappingError(
                f"Provider {provider} is not in the type catalog",
                provider=str(provider),
            )
        return tables[provider]

    def sql_type(self, provider: DatabaseProvider, core_type: str) -> str:
        """
        SQL column type for a core type.

        Raises:
            UnsupportedMappingError: If the provider or type is not catalogued
        """
        table = self._provider_table(self.sql_types, provider)
        try:
            return table[core_type]
        except KeyError:
            raise UnsupportedMappingError(
                f"No {provider.value} SQL type for core type '{core_type}'",
                provider=provider.value,
                type_name=core_type,
            )

    def conversion_to_provider(self, provider: DatabaseProvider, core_type: str) -> Optional[ValueConverterFn]:
        return self._provider_table(self.to_provider, provider).get(core_type)

    def conversion_from_provider(self, provider: DatabaseProvider, core_type: str) -> Optional[ValueConverterFn]:
        return self._provider_table(self.from_provider, provider).get(core_type)

    def widening_target(self, provider: DatabaseProvider, core_type: str) -> Optional[str]:
        return self._provider_table(self.widening, provider).get(core_type)

    def value_limits(self, provider: DatabaseProvider, core_type: str) -> Optional[ValueLimits]:
        return self._provider_table(self.limits, provider).get(core_type)

    def is_within_bounds(self, provider: DatabaseProvider, core_type: str, value: Any) -> bool:
        """True when the value is storable, or when no limit is catalogued."""
        if value is None:
            return True
        limits = self.value_limits(provider, core_type)
        if limits is None:
            return True
        return limits.contains(value)


@lru_cache(maxsize=1)
def default_type_catalog() -> TypeCatalog:
    """The shipped catalog, built once per process."""
    return TypeCatalog()
