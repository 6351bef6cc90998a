"""
Unit tests for the value conversion engine.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID

import pytest

from anybase.connection import DatabaseProvider
from anybase.conversion import ValueConverter
from anybase.mapping import TypeCatalog, UInt64
from anybase.mapping.catalog import FROM_PROVIDER, TO_PROVIDER
from anybase.schema import constant_field, describe_record_type, method_field
from anybase.shared.exceptions import FieldAssignmentError

SQLITE = DatabaseProvider.SQLITE
SQLSERVER = DatabaseProvider.SQLSERVER


class Shade(Enum):
    LIGHT = 1
    DARK = 2


@dataclass
class Swatch:
    name: str
    shade: Shade
    mixing_time: timedelta
    batch: UUID
    counter: UInt64
    note: Optional[str] = None


@dataclass(frozen=True)
class FrozenSwatch:
    name: str
    shade: Shade


@dataclass
class Palette:
    name: str
    tags: List[str]
    colors: List[str] = field(default_factory=list)
    origin: str = "studio"


class Labelled:
    name: str

    def label(self) -> str:
        return self.name.upper()


class ReadOnly:
    name: str

    @property
    def size(self) -> int:
        return 3


def _spy_catalog(calls):
    """A catalog whose every conversion records the value it was given."""
    def spy(value):
        calls.append(value)
        return value

    to_provider = {p: {k: spy for k in table} for p, table in TO_PROVIDER.items()}
    from_provider = {p: {k: spy for k in table} for p, table in FROM_PROVIDER.items()}
    return TypeCatalog(to_provider=to_provider, from_provider=from_provider)


class TestToProvider:
    """Tests for host -> provider conversion."""

    def test_record_values(self, templates, types):
        descriptor = describe_record_type(Swatch, SQLITE, templates, types)
        converter = ValueConverter(descriptor, types)
        batch = UUID("00000000-0000-0000-0000-00000000abcd")

        values = converter.to_provider_values(
            [Swatch("teal", Shade.DARK, timedelta(seconds=1), batch, 2 ** 64 - 1)],
            descriptor.data_fields,
        )

        assert values == [[
            "teal",
            2,
            10_000_000,
            "00000000-0000-0000-0000-00000000abcd",
            Decimal(2 ** 64 - 1),
            None,
        ]]

    def test_null_is_never_converted(self, templates):
        calls = []
        catalog = _spy_catalog(calls)
        descriptor = describe_record_type(Swatch, SQLITE, templates, catalog)
        converter = ValueConverter(descriptor, catalog)

        assert converter.to_provider_value(descriptor.field("mixing_time"), None) is None
        assert converter.from_provider_value(descriptor.field("batch"), None) is None
        assert calls == []

    def test_value_sets_must_match_fields(self, templates, types):
        descriptor = describe_record_type(Swatch, SQLITE, templates, types)
        converter = ValueConverter(descriptor, types)

        with pytest.raises(ValueError):
            converter.convert_value_sets([["teal"]], descriptor.data_fields)


class TestFromProvider:
    """Tests for provider -> host materialization."""

    def test_rows_by_column_name(self, templates, types):
        descriptor = describe_record_type(Swatch, SQLITE, templates, types)
        converter = ValueConverter(descriptor, types)

        rows = [{
            "id": 7,
            "NAME": "teal",
            "shade": 1,
            "mixing_time": 20_000_000,
            "batch": "00000000-0000-0000-0000-00000000abcd",
            "counter": "18446744073709551615",
        }]
        swatch = converter.from_provider_rows(rows, Swatch)[0]

        assert swatch.name == "teal"
        assert swatch.shade is Shade.LIGHT
        assert swatch.mixing_time == timedelta(seconds=2)
        assert swatch.batch == UUID("00000000-0000-0000-0000-00000000abcd")
        assert swatch.counter == 2 ** 64 - 1
        # not selected
        assert swatch.note is None
        # synthesized key without a matching member
        assert not hasattr(swatch, "id")

    def test_rows_by_position(self, templates, types):
        descriptor = describe_record_type(FrozenSwatch, SQLSERVER, templates, types)
        converter = ValueConverter(descriptor, types)

        record = converter.from_provider_rows([(1, "slate", 2)], FrozenSwatch)[0]

        assert record == FrozenSwatch("slate", Shade.DARK)

    def test_read_only_member(self, templates, types):
        descriptor = describe_record_type(ReadOnly, SQLITE, templates, types)
        converter = ValueConverter(descriptor, types)

        with pytest.raises(FieldAssignmentError) as exc:
            converter.from_provider_rows([{"id": 1, "name": "x", "size": 4}], ReadOnly)
        assert exc.value.member == "size"

    def test_members_outside_descriptor_get_defaults(self, templates, types):
        descriptor = describe_record_type(Palette, SQLITE, templates, types)
        converter = ValueConverter(descriptor, types)

        first, second = converter.from_provider_rows([{"id": 1, "name": "warm"}, {"id": 2, "name": "cool"}], Palette)

        assert first.colors == []
        assert first.colors is not second.colors
        assert first.tags is None
        assert first.origin == "studio"
        assert first == Palette("warm", None)
        assert "warm" in repr(first)

    def test_write_only_fields_are_skipped(self, templates, types):
        extras = [
            method_field("label", "label", str, SQLITE, types),
            constant_field("source", "import", str, SQLITE, types),
        ]
        descriptor = describe_record_type(Labelled, SQLITE, templates, types, extra_fields=extras)
        converter = ValueConverter(descriptor, types)

        record = converter.from_provider_rows([{"id": 1, "name": "x", "label": "X", "source": "import"}], Labelled)[0]

        assert record.name == "x"
        assert not hasattr(record, "source")
        assert converter.to_provider_values([record]) == [[None, "x", "X", "import"]]
