"""
Unit tests for table templates and table descriptors.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import ClassVar, List, Optional

import pytest

from anybase.connection import DatabaseProvider
from anybase.mapping import UInt16
from anybase.schema import (
    DescriptorCache,
    FieldKind,
    TableTemplate,
    TemplateCatalog,
    build_table_descriptor,
    constant_field,
    describe_record_type,
    extract_value,
    load_template_catalog,
    method_field,
    record_members,
)
from anybase.shared.exceptions import TemplateCatalogError

SQLSERVER = DatabaseProvider.SQLSERVER
MYSQL = DatabaseProvider.MYSQL
SQLITE = DatabaseProvider.SQLITE


class Level(Enum):
    LOW = 1
    HIGH = 2


@dataclass
class Order:
    customer: str
    total: Decimal
    placed: datetime
    priority: Level = Level.LOW
    lines: List[str] = field(default_factory=list)
    comment: Optional[str] = None


@dataclass
class Invoice:
    CompanyId: int
    INVOICE_NUMBER: str
    amount: Decimal
    memorisedName: str = ""


@dataclass
class Base:
    code: str
    weight: float


@dataclass
class Derived(Base):
    weight: UInt16
    extra: int = 0


class Gadget:
    kind: ClassVar[str] = "gadget"
    serial: str
    _hidden: int

    @property
    def label(self) -> str:
        return f"#{self.serial}"


@dataclass
class Keyed:
    id: int
    name: str


class TestTemplates:
    """Tests for the template catalog."""

    def test_lookup_unknown_table_returns_empty_defaults(self, templates):
        template = templates.lookup("Nothing")
        assert template.primary_keys == []
        assert template.excluded_fields == []
        assert not template.declares_primary_key()

    def test_declared_keys(self, templates):
        template = templates.lookup("Invoice")
        assert template.declares_primary_key()
        assert template.primary_keys == ["CompanyId", "INVOICE_NUMBER"]

    def test_default_key_only_is_not_declared(self):
        assert not TableTemplate(primary_keys=["id"]).declares_primary_key()

    def test_type_override(self, templates):
        template = templates.lookup("TestTable")
        assert template.override_for(SQLSERVER, "Primary2") == "nvarchar(20)"
        assert template.override_for(MYSQL, "Primary2") is None

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "templates.yaml"
        path.write_text(
            "templates:\n"
            "  Orders:\n"
            "    primary_keys: [number]\n"
            "    excluded_fields: [cache]\n"
        )
        catalog = TemplateCatalog.from_yaml(path)

        assert "Orders" in catalog
        assert len(catalog) == 1
        assert catalog.lookup("Orders").excluded_fields == ["cache"]

    def test_invalid_yaml_shape(self):
        with pytest.raises(TemplateCatalogError):
            TemplateCatalog.from_dict({"templates": ["Orders"]})
        with pytest.raises(TemplateCatalogError):
            TemplateCatalog.from_dict({"templates": {"Orders": {"primary_keys": 5}}})

    def test_missing_file(self, tmp_path):
        with pytest.raises(TemplateCatalogError):
            TemplateCatalog.from_yaml(tmp_path / "missing.yaml")

    def test_bundled_templates(self):
        catalog = load_template_catalog()
        assert catalog.lookup("NominalCode").primary_keys == ["CompanyId", "ACCOUNT_REF"]
        assert catalog.lookup("Invoice").excluded_fields == ["memorisedName"]


class TestExplicitDescriptors:
    """Tests for descriptors built from name and type lists."""

    def test_synthesized_key_comes_first(self, templates, types):
        descriptor = build_table_descriptor("Orders", ["customer", "total"], [str, Decimal], SQLITE, templates, types)

        assert descriptor.field_names == ["id", "customer", "total"]
        assert descriptor.primary_key_names == ["id"]
        assert descriptor.has_synthesized_key
        assert [f.name for f in descriptor.data_fields] == ["customer", "total"]

    def test_compound_keys(self, templates, types):
        descriptor = build_table_descriptor(
            "TestTable", ["Primary1", "Primary2", "Value"], [int, str, float], SQLSERVER, templates, types
        )

        assert descriptor.field_names == ["Primary1", "Primary2", "Value"]
        assert descriptor.primary_key_names == ["Primary1", "Primary2"]
        assert not descriptor.has_synthesized_key
        assert descriptor.field("Primary2").sql_type == "nvarchar(20)"
        assert not descriptor.field("Primary2").nullable

    def test_length_mismatch(self, templates, types):
        with pytest.raises(ValueError):
            build_table_descriptor("Orders", ["a", "b"], [int], SQLITE, templates, types)

    def test_unknown_field(self, templates, types):
        descriptor = build_table_descriptor("Orders", ["a"], [int], SQLITE, templates, types)
        with pytest.raises(KeyError):
            descriptor.field("missing")


class TestIntrospection:
    """Tests for descriptors built from record types."""

    def test_dataclass_members(self, templates, types):
        descriptor = describe_record_type(Order, MYSQL, templates, types)

        # collections are never stored
        assert descriptor.field_names == ["id", "customer", "total", "placed", "priority", "comment"]
        assert descriptor.table_name == "Order"

    def test_enum_and_nullability(self, templates, types):
        descriptor = describe_record_type(Order, MYSQL, templates, types)

        priority = descriptor.field("priority")
        assert priority.core_type == "int32"
        assert priority.enum_type is Level
        assert not priority.nullable
        assert descriptor.field("customer").nullable
        assert descriptor.field("comment").nullable
        assert not descriptor.field("total").nullable

    def test_template_keys_and_exclusions(self, templates, types):
        descriptor = describe_record_type(Invoice, SQLITE, templates, types)

        assert descriptor.field_names == ["CompanyId", "INVOICE_NUMBER", "amount"]
        assert descriptor.primary_key_names == ["CompanyId", "INVOICE_NUMBER"]

    def test_subclass_annotation_wins(self, templates, types):
        descriptor = describe_record_type(Derived, SQLSERVER, templates, types)

        assert descriptor.field_names == ["id", "code", "weight", "extra"]
        assert descriptor.field("weight").core_type == "uint16"
        assert descriptor.field("weight").sql_type == "int"

    def test_properties_class_vars_and_private_members(self):
        members = record_members(Gadget)
        assert list(members) == ["serial", "label"]
        assert members["label"] is str

    def test_existing_id_member_becomes_the_key(self, templates, types):
        descriptor = describe_record_type(Keyed, SQLITE, templates, types)

        assert descriptor.field_names == ["id", "name"]
        assert descriptor.field("id").kind == FieldKind.AUTO_INCREMENT

    def test_extra_fields(self, templates, types):
        extras = [
            method_field("label_text", "upper_label", str, SQLITE, types),
            constant_field("source", "import", str, SQLITE, types),
        ]

        class Tagged:
            serial: str

            def upper_label(self):
                return self.serial.upper()

        descriptor = describe_record_type(Tagged, SQLITE, templates, types, extra_fields=extras)
        record = Tagged()
        record.serial = "ab"

        assert descriptor.field_names == ["id", "serial", "label_text", "source"]
        assert extract_value(descriptor.field("label_text"), record) == "AB"
        assert extract_value(descriptor.field("source"), record) == "import"
        assert extract_value(descriptor.field("serial"), record) == "ab"


class TestDescriptorCache:
    """Tests for descriptor caching."""

    def test_descriptors_are_built_once(self, templates, types):
        cache = DescriptorCache(templates, types)

        first = cache.describe(Order, SQLITE)
        assert cache.describe(Order, SQLITE) is first
        assert cache.describe(Order, MYSQL) is not first
        assert len(cache) == 2

    def test_invalidate(self, templates, types):
        cache = DescriptorCache(templates, types)
        cache.describe(Order, SQLITE)
        cache.describe(Order, MYSQL)
        cache.describe(Invoice, SQLITE)

        assert cache.invalidate(Order) == 2
        assert len(cache) == 1
        assert cache.invalidate() == 1
        assert len(cache) == 0
