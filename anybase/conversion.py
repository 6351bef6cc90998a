"""
Value Conversion Engine

Moves values between host records and provider representations, directed by a
TableDescriptor and the type catalog.

TO PROVIDER:
    records -> value sets, one list per record in field order. Each value is
    extracted through its field kind, enum members are reduced to their value,
    then the catalog's semantic converter (ticks, GUID text, ...) is applied.

FROM PROVIDER:
    rows -> record instances. Rows may be dicts (matched to fields by column
    name) or sequences (matched by position). Converted values are assigned to
    a fresh instance created without calling ``__init__``. Dataclass fields the
    descriptor does not carry get their declared default, or None. METHOD and
    CONSTANT fields are write-only and never assigned back.

None always stays None in both directions and never reaches a converter.
"""

import dataclasses
import inspect
import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from anybase.mapping.catalog import TypeCatalog
from anybase.schema.blueprint import (
    FieldDescriptor,
    FieldKind,
    TableDescriptor,
    extract_value,
    is_auto_increment,
    record_members,
)
from anybase.shared.exceptions import FieldAssignmentError

logger = logging.getLogger(__name__)

_MISSING = object()
_WRITE_ONLY = (FieldKind.METHOD, FieldKind.CONSTANT)


class ValueConverter:
    """
    Converts values for one table descriptor.

    Usage:
        converter = ValueConverter(descriptor, default_type_catalog())
        value_sets = converter.to_provider_values(orders)
        records = converter.from_provider_rows(rows, Order)
    """

    def __init__(self, descriptor: TableDescriptor, types: TypeCatalog):
        self.descriptor = descriptor
        self.types = types
        self.provider = descriptor.provider

    # -------------------------------------------------------------------------
    # Single values
    # -------------------------------------------------------------------------

    def to_provider_value(self, field: FieldDescriptor, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, Enum):
            value = value.value
        converter = self.types.conversion_to_provider(self.provider, field.core_type)
        if converter is None:
            return value
        return converter(value)

    def from_provider_value(self, field: FieldDescriptor, value: Any) -> Any:
        if value is None:
            return None
        converter = self.types.conversion_from_provider(self.provider, field.core_type)
        if converter is not None:
            value = converter(value)
        if field.enum_type is not None:
            value = field.enum_type(value)
        return value

    # -------------------------------------------------------------------------
    # Host -> provider
    # -------------------------------------------------------------------------

    def to_provider_values(
        self,
        records: Iterable[Any],
        fields: Optional[Sequence[FieldDescriptor]] = None,
    ) -> List[List[Any]]:
        """One value set per record, aligned with ``fields`` (default: all fields)."""
        fields = list(self.descriptor.fields if fields is None else fields)
        return [
            [self.to_provider_value(f, extract_value(f, record)) for f in fields]
            for record in records
        ]

    def convert_value_sets(
        self,
        value_sets: Iterable[Sequence[Any]],
        fields: Sequence[FieldDescriptor],
    ) -> List[List[Any]]:
        """Convert caller-supplied value sets aligned with ``fields``."""
        converted = []
        for values in value_sets:
            if len(values) != len(fields):
                raise ValueError(f"Expected {len(fields)} values per set, got {len(values)}")
            converted.append([self.to_provider_value(f, v) for f, v in zip(fields, values)])
        return converted

    # -------------------------------------------------------------------------
    # Provider -> host
    # -------------------------------------------------------------------------

    def from_provider_rows(
        self,
        rows: Iterable[Any],
        record_type: type,
        fields: Optional[Sequence[FieldDescriptor]] = None,
    ) -> List[Any]:
        """
        Materialize rows into record instances.

        Fields the rows do not carry are set to None. METHOD and CONSTANT
        fields are skipped.

        Raises:
            FieldAssignmentError: If a member is missing or read-only
        """
        fields = list(self.descriptor.fields if fields is None else fields)
        members = set(record_members(record_type))
        frozen = _is_frozen_dataclass(record_type)
        carried = {f.name for f in fields if f.kind not in _WRITE_ONLY}

        records = []
        for row in rows:
            values = self._align(row, fields)
            record = record_type.__new__(record_type)
            _initialize_defaults(record, record_type, carried, frozen)
            for f, value in zip(fields, values):
                if f.kind in _WRITE_ONLY:
                    continue
                if is_auto_increment(f) and f.name not in members:
                    continue
                _assign(record, record_type, f.name, self.from_provider_value(f, value), members, frozen)
            records.append(record)
        return records

    @staticmethod
    def _align(row: Any, fields: Sequence[FieldDescriptor]) -> List[Any]:
        if isinstance(row, Mapping):
            lowered: Dict[str, Any] = {str(k).lower(): v for k, v in row.items()}
            return [
                row[f.name] if f.name in row else lowered.get(f.name.lower())
                for f in fields
            ]
        values = list(row)
        if len(values) < len(fields):
            values.extend([None] * (len(fields) - len(values)))
        return values[:len(fields)]


def _initialize_defaults(record: Any, record_type: type, carried: set, frozen: bool) -> None:
    if not dataclasses.is_dataclass(record_type):
        return
    for member in dataclasses.fields(record_type):
        if member.name in carried:
            continue
        if member.default is not dataclasses.MISSING:
            value = member.default
        elif member.default_factory is not dataclasses.MISSING:
            value = member.default_factory()
        else:
            value = None
        if frozen:
            object.__setattr__(record, member.name, value)
        else:
            setattr(record, member.name, value)


def _is_frozen_dataclass(record_type: type) -> bool:
    if not dataclasses.is_dataclass(record_type):
        return False
    return record_type.__dataclass_params__.frozen


def _assign(record: Any, record_type: type, name: str, value: Any, members: set, frozen: bool) -> None:
    static = inspect.getattr_static(record_type, name, _MISSING)

    if isinstance(static, property):
        if static.fset is None:
            raise FieldAssignmentError(
                f"{record_type.__name__}.{name} is read-only",
                record_type=record_type,
                member=name,
            )
    elif name not in members and static is _MISSING:
        raise FieldAssignmentError(
            f"{record_type.__name__} has no member '{name}'",
            record_type=record_type,
            member=name,
        )

    try:
        if frozen and not isinstance(static, property):
            object.__setattr__(record, name, value)
        else:
            setattr(record, name, value)
    except AttributeError as e:
        raise FieldAssignmentError(
            f"Cannot assign {record_type.__name__}.{name}: {e}",
            record_type=record_type,
            member=name,
        ) from e
