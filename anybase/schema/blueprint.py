"""
Table Descriptors

A TableDescriptor is the ordered column list of one table for one provider.
It is built either from explicit field names and types, or by introspecting a
record type (dataclass, annotated class, or class with properties).

FIELD KINDS:
------------
    PLAIN           - explicit column, values are supplied by the caller
    AUTO_INCREMENT  - synthesized "id" key, assigned by the database
    PROPERTY        - read from a record member
    METHOD          - returned by a zero-argument method of the record
    CONSTANT        - the same value for every record

PRIMARY KEYS:
-------------
If the template catalog declares keys for the table, exactly those fields are
keys. Otherwise an auto-increment "id" key is placed first.

Usage:
    descriptor = describe_record_type(Order, DatabaseProvider.SQLITE, templates, types)
    descriptor.field_names          # ["id", "customer", "total"]
    extract_value(descriptor.fields[1], order)
"""

import inspect
import logging
import threading
import typing
from dataclasses import dataclass, field as dataclass_field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from anybase.connection.descriptor import DatabaseProvider
from anybase.mapping.catalog import TypeCatalog
from anybase.mapping.types import core_type_name, enum_type_of, is_collection, is_nullable_or_string
from anybase.schema.templates import TableTemplate, TemplateCatalog

logger = logging.getLogger(__name__)


class FieldKind(str, Enum):
    PLAIN = "plain"
    AUTO_INCREMENT = "auto_increment"
    PROPERTY = "property"
    METHOD = "method"
    CONSTANT = "constant"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    One column of a table.

    Attributes:
        name: Column name
        declared_type: Annotation as written on the record (may be Optional or an Enum)
        core_type: Catalog type name with Optional and Enum wrappers removed
        sql_type: Provider column type
        is_primary_key: Part of the table's key
        kind: How values are obtained from a record
        nullable: Column accepts NULL
        enum_type: Enum class for enum-typed fields
        accessor: Member name, method name, or constant value, depending on kind
    """
    name: str
    declared_type: Any
    core_type: str
    sql_type: str
    is_primary_key: bool = False
    kind: FieldKind = FieldKind.PLAIN
    nullable: bool = False
    enum_type: Optional[type] = None
    accessor: Any = None


def extract_value(field: FieldDescriptor, record: Any) -> Any:
    """Read the host value of one field from a record instance."""
    if field.kind == FieldKind.PROPERTY:
        return getattr(record, field.accessor)
    if field.kind == FieldKind.AUTO_INCREMENT:
        return getattr(record, field.name, None)
    if field.kind == FieldKind.METHOD:
        return getattr(record, field.accessor)()
    if field.kind == FieldKind.CONSTANT:
        return field.accessor
    return None


def is_auto_increment(field: FieldDescriptor) -> bool:
    return field.kind == FieldKind.AUTO_INCREMENT


@dataclass(frozen=True)
class TableDescriptor:
    """Ordered fields of one table for one provider."""
    table_name: str
    provider: DatabaseProvider
    fields: Tuple[FieldDescriptor, ...] = dataclass_field(default_factory=tuple)

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @property
    def primary_key_fields(self) -> List[FieldDescriptor]:
        return [f for f in self.fields if f.is_primary_key]

    @property
    def primary_key_names(self) -> List[str]:
        return [f.name for f in self.primary_key_fields]

    @property
    def data_fields(self) -> List[FieldDescriptor]:
        """Fields written by INSERT and UPDATE."""
        return [f for f in self.fields if not is_auto_increment(f)]

    @property
    def has_synthesized_key(self) -> bool:
        return any(is_auto_increment(f) for f in self.fields)

    def field(self, name: str) -> FieldDescriptor:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(f"Table {self.table_name} has no field '{name}'")

    def fields_named(self, names: Sequence[str]) -> List[FieldDescriptor]:
        return [self.field(name) for name in names]


# =============================================================================
# FIELD CONSTRUCTION
# =============================================================================

def make_field(
    name: str,
    declared_type: Any,
    provider: DatabaseProvider,
    types: TypeCatalog,
    template: Optional[TableTemplate] = None,
    kind: FieldKind = FieldKind.PLAIN,
    accessor: Any = None,
    is_primary_key: bool = False,
) -> FieldDescriptor:
    """
    Build one field, resolving its SQL type through the template override or the catalog.

    Raises:
        UnsupportedMappingError: If the type has no mapping for the provider
    """
    core_type = core_type_name(declared_type)
    override = template.override_for(provider, name) if template is not None else None
    sql_type = override or types.sql_type(provider, core_type)
    return FieldDescriptor(
        name=name,
        declared_type=declared_type,
        core_type=core_type,
        sql_type=sql_type,
        is_primary_key=is_primary_key,
        kind=kind,
        nullable=not is_primary_key and is_nullable_or_string(declared_type),
        enum_type=enum_type_of(declared_type),
        accessor=accessor,
    )


def method_field(
    name: str,
    method_name: str,
    declared_type: Any,
    provider: DatabaseProvider,
    types: TypeCatalog,
) -> FieldDescriptor:
    """A column filled by calling ``record.<method_name>()``."""
    return make_field(name, declared_type, provider, types, kind=FieldKind.METHOD, accessor=method_name)


def constant_field(
    name: str,
    value: Any,
    declared_type: Any,
    provider: DatabaseProvider,
    types: TypeCatalog,
) -> FieldDescriptor:
    """A column holding the same value for every record."""
    return make_field(name, declared_type, provider, types, kind=FieldKind.CONSTANT, accessor=value)


def auto_increment_field(name: str, provider: DatabaseProvider, types: TypeCatalog) -> FieldDescriptor:
    return FieldDescriptor(
        name=name,
        declared_type=int,
        core_type="int32",
        sql_type=types.sql_type(provider, "int32"),
        is_primary_key=True,
        kind=FieldKind.AUTO_INCREMENT,
        nullable=False,
    )


def _apply_primary_keys(
    table_name: str,
    fields: List[FieldDescriptor],
    template: TableTemplate,
    provider: DatabaseProvider,
    types: TypeCatalog,
    default_key_name: str,
) -> Tuple[FieldDescriptor, ...]:
    if template.declares_primary_key(default_key_name):
        keys = set(template.primary_keys)
        missing = keys.difference(f.name for f in fields)
        if missing:
            logger.warning(f"Template keys {sorted(missing)} are not fields of table {table_name}")
        return tuple(
            _as_key(f) if f.name in keys else f
            for f in fields
        )

    # The synthesized key replaces any member of the same name
    remaining = [f for f in fields if f.name != default_key_name]
    return (auto_increment_field(default_key_name, provider, types),) + tuple(remaining)


def _as_key(field: FieldDescriptor) -> FieldDescriptor:
    return replace(field, is_primary_key=True, nullable=False)


# =============================================================================
# EXPLICIT PATH
# =============================================================================

def build_table_descriptor(
    table_name: str,
    field_names: Sequence[str],
    field_types: Sequence[Any],
    provider: DatabaseProvider,
    templates: TemplateCatalog,
    types: TypeCatalog,
    default_key_name: str = "id",
) -> TableDescriptor:
    """
    Build a descriptor from parallel name and type lists.

    Raises:
        ValueError: If the lists differ in length
        UnsupportedMappingError: If a type has no mapping
    """
    if len(field_names) != len(field_types):
        raise ValueError(
            f"{len(field_names)} field names but {len(field_types)} field types for table {table_name}"
        )

    template = templates.lookup(table_name)
    fields = [
        make_field(name, declared_type, provider, types, template)
        for name, declared_type in zip(field_names, field_types)
    ]
    return TableDescriptor(
        table_name=table_name,
        provider=provider,
        fields=_apply_primary_keys(table_name, fields, template, provider, types, default_key_name),
    )


# =============================================================================
# INTROSPECTIVE PATH
# =============================================================================

def _is_class_var(annotation: Any) -> bool:
    return annotation is typing.ClassVar or typing.get_origin(annotation) is typing.ClassVar


def record_members(record_type: type) -> Dict[str, Any]:
    """
    Public members of a record type with their annotations, in declaration order.

    Bases are walked first. A member redeclared by a subclass keeps the
    position of its first declaration and takes the subclass annotation.
    """
    hints = typing.get_type_hints(record_type)
    members: Dict[str, Any] = {}

    for cls in reversed(record_type.__mro__):
        if cls is object:
            continue

        for name, annotation in inspect.get_annotations(cls).items():
            if name.startswith("_"):
                continue
            resolved = hints.get(name, annotation)
            if _is_class_var(resolved):
                continue
            members[name] = resolved

        for name, attr in vars(cls).items():
            if name.startswith("_") or not isinstance(attr, property) or attr.fget is None:
                continue
            members[name] = typing.get_type_hints(attr.fget).get("return", object)

    return members


def describe_record_type(
    record_type: type,
    provider: DatabaseProvider,
    templates: TemplateCatalog,
    types: TypeCatalog,
    default_key_name: str = "id",
    extra_fields: Sequence[FieldDescriptor] = (),
    table_name: Optional[str] = None,
) -> TableDescriptor:
    """
    Build a descriptor by introspecting a record type.

    Excludes template exclusions and collection-typed members. ``extra_fields``
    (METHOD or CONSTANT fields) are appended after the introspected members.
    """
    table_name = table_name or record_type.__name__
    template = templates.lookup(table_name)
    excluded = set(template.excluded_fields)

    fields: List[FieldDescriptor] = []
    for name, annotation in record_members(record_type).items():
        if name in excluded:
            logger.debug(f"Skipping excluded member {table_name}.{name}")
            continue
        if is_collection(annotation):
            logger.debug(f"Skipping collection member {table_name}.{name}")
            continue
        fields.append(
            make_field(name, annotation, provider, types, template, kind=FieldKind.PROPERTY, accessor=name)
        )

    fields.extend(extra_fields)

    return TableDescriptor(
        table_name=table_name,
        provider=provider,
        fields=_apply_primary_keys(table_name, fields, template, provider, types, default_key_name),
    )


# =============================================================================
# DESCRIPTOR CACHE
# =============================================================================

class DescriptorCache:
    """
    Descriptors per (record type, provider).

    Descriptors depend only on static type information and the injected
    catalogs, so they are built once. Call ``invalidate`` after swapping
    templates or redefining a record type.

    Cached descriptors are introspected only. METHOD and CONSTANT columns are
    write-only and are added by calling ``describe_record_type`` with
    ``extra_fields`` directly.
    """

    def __init__(
        self,
        templates: TemplateCatalog,
        types: TypeCatalog,
        default_key_name: str = "id",
    ):
        self.templates = templates
        self.types = types
        self.default_key_name = default_key_name
        self._descriptors: Dict[Tuple[type, DatabaseProvider], TableDescriptor] = {}
        self._lock = threading.Lock()

    def describe(self, record_type: type, provider: DatabaseProvider) -> TableDescriptor:
        key = (record_type, provider)
        with self._lock:
            cached = self._descriptors.get(key)
        if cached is not None:
            return cached

        descriptor = describe_record_type(
            record_type, provider, self.templates, self.types, self.default_key_name
        )
        with self._lock:
            self._descriptors.setdefault(key, descriptor)
            return self._descriptors[key]

    def invalidate(self, record_type: Optional[type] = None) -> int:
        """Drop cached descriptors for one record type, or all. Returns how many were dropped."""
        with self._lock:
            if record_type is None:
                count = len(self._descriptors)
                self._descriptors.clear()
                return count
            keys = [k for k in self._descriptors if k[0] is record_type]
            for k in keys:
                del self._descriptors[k]
            return len(keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._descriptors)
