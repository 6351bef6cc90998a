"""
CRUD Facade

Two entry points over the same machinery:

NON-GENERIC (``Crud``):
    Operates on explicit table names, field names and value lists.

        crud = Crud(sqlite_connection("/data", "shop.db"))
        crud.insert_records("Orders", ["customer", "total"], [str, Decimal],
                            [["ann", Decimal("9.50")], ["bob", Decimal("3.00")]])
        crud.read_records("Orders", ["customer"], [["ann"]])

GENERIC (``GenericCrud``):
    Operates on record instances; the table layout is introspected from the
    record type.

        crud = GenericCrud(sqlite_connection("/data", "shop.db"))
        crud.create_table_for(Order)
        crud.insert([Order("ann", Decimal("9.50"))])
        crud.read([], record_type=Order)

Every operation returns a result object. Check ``errors`` even when nothing
was raised: failed chunks are recorded, not raised.
"""

import logging
from typing import Any, List, Optional, Sequence, Type, TypeVar

from anybase.connection.descriptor import ConnectionDescriptor, DatabaseProvider
from anybase.conversion import ValueConverter
from anybase.core.config import Settings, get_settings
from anybase.execution.executor import QueryExecutor
from anybase.lifecycle import DatabaseManager
from anybase.mapping.catalog import TypeCatalog, default_type_catalog
from anybase.schema.blueprint import (
    DescriptorCache,
    FieldDescriptor,
    TableDescriptor,
    make_field,
)
from anybase.schema.templates import TemplateCatalog, load_template_catalog
from anybase.shared.exceptions import CrudError
from anybase.shared.types import CudResult, ReadResult, ScalarResult
from anybase.sql.parameters import (
    ParameterSet,
    build_parameter_sets,
    build_parameters,
    merge_parameter_sets,
    widening_targets,
)
from anybase.sql.statements import (
    SET_PREFIX,
    VALUE_PREFIX,
    WHERE_PREFIX,
    build_delete,
    build_insert,
    build_select,
    build_update,
    build_where,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Crud:
    """
    Non-generic CRUD operations by table and field name.

    Args:
        descriptor: Connection target
        settings: Library settings (default: environment)
        templates: Table templates (default: bundled or ``template_catalog_path``)
        types: Type catalog (default: shipped catalog)
        batch_size: Parameter sets per chunk (default: ``settings.batch_size``)
        executor: Pre-built executor, mainly for tests
    """

    def __init__(
        self,
        descriptor: ConnectionDescriptor,
        settings: Optional[Settings] = None,
        templates: Optional[TemplateCatalog] = None,
        types: Optional[TypeCatalog] = None,
        batch_size: Optional[int] = None,
        executor: Optional[QueryExecutor] = None,
    ):
        self.descriptor = descriptor
        self.settings = settings or get_settings()
        self.templates = templates if templates is not None else load_template_catalog(self.settings.template_catalog_path)
        self.types = types or default_type_catalog()
        self.executor = executor or QueryExecutor(descriptor, settings=self.settings, batch_size=batch_size)
        self.adapter = self.executor.adapter
        self.manager = DatabaseManager(
            descriptor,
            executor=self.executor,
            settings=self.settings,
            templates=self.templates,
            types=self.types,
        )

    @property
    def provider(self) -> DatabaseProvider:
        return self.descriptor.provider

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _use(self) -> str:
        return self.adapter.use_clause()

    def _fields(self, table_name: str, field_names: Sequence[str], field_types: Sequence[Any]) -> List[FieldDescriptor]:
        if len(field_names) != len(field_types):
            raise ValueError(f"{len(field_names)} field names but {len(field_types)} field types")
        template = self.templates.lookup(table_name)
        return [make_field(name, t, self.provider, self.types, template) for name, t in zip(field_names, field_types)]

    def _targets(self, fields: Sequence[FieldDescriptor]) -> List[Optional[str]]:
        return widening_targets(self.provider, [f.core_type for f in fields], self.types)

    def _parameter_sets(
        self,
        table_name: str,
        field_names: Sequence[str],
        value_sets: Sequence[Sequence[Any]],
        prefix: str,
        field_types: Optional[Sequence[Any]] = None,
    ) -> List[ParameterSet]:
        """Convert (when types are known), widen and name one batch of values."""
        if field_types is None:
            return build_parameter_sets(self.provider, field_names, value_sets, prefix)

        fields = self._fields(table_name, field_names, field_types)
        converter = ValueConverter(TableDescriptor(table_name, self.provider, tuple(fields)), self.types)
        converted = converter.convert_value_sets(value_sets, fields)
        return build_parameter_sets(self.provider, field_names, converted, prefix, self._targets(fields))

    # -------------------------------------------------------------------------
    # Records by field name
    # -------------------------------------------------------------------------

    def insert_records(
        self,
        table_name: str,
        field_names: Sequence[str],
        field_types: Sequence[Any],
        value_sets: Sequence[Sequence[Any]],
    ) -> CudResult:
        sql = build_insert(table_name, field_names, self._use())
        parameter_sets = self._parameter_sets(table_name, field_names, value_sets, VALUE_PREFIX, field_types)
        return self.executor.execute_cud(sql, parameter_sets)

    def update_records(
        self,
        table_name: str,
        set_field_names: Sequence[str],
        set_field_types: Sequence[Any],
        set_value_sets: Sequence[Sequence[Any]],
        where_field_names: Sequence[str],
        where_value_sets: Sequence[Sequence[Any]],
        where_field_types: Optional[Sequence[Any]] = None,
    ) -> CudResult:
        """
        Update one row set per value set. SET and WHERE value sets pair up by position.

        Raises:
            ValueError: If SET and WHERE value sets differ in number
        """
        if where_field_names and len(where_value_sets) != len(set_value_sets):
            raise ValueError(
                f"{len(set_value_sets)} SET value sets but {len(where_value_sets)} WHERE value sets"
            )

        sql = build_update(table_name, set_field_names, where_field_names, where_value_sets, self._use())
        set_parameters = self._parameter_sets(table_name, set_field_names, set_value_sets, SET_PREFIX, set_field_types)
        if where_field_names:
            where_parameters = self._parameter_sets(
                table_name, where_field_names, where_value_sets, WHERE_PREFIX, where_field_types
            )
        else:
            where_parameters = [[] for _ in set_parameters]
        return self.executor.execute_cud(sql, merge_parameter_sets(set_parameters, where_parameters))

    def delete_records(
        self,
        table_name: str,
        where_field_names: Sequence[str],
        where_value_sets: Sequence[Sequence[Any]],
        where_field_types: Optional[Sequence[Any]] = None,
    ) -> CudResult:
        """Delete matching rows. Pass ``[[]]`` as value sets with no fields to delete every row."""
        sql = build_delete(table_name, where_field_names, where_value_sets, self._use())
        parameter_sets = self._parameter_sets(
            table_name, where_field_names, where_value_sets, WHERE_PREFIX, where_field_types
        )
        return self.executor.execute_cud(sql, parameter_sets)

    def read_records(
        self,
        table_name: str,
        where_field_names: Sequence[str],
        where_value_sets: Sequence[Sequence[Any]],
        select_field_names: Optional[Sequence[str]] = None,
        where_field_types: Optional[Sequence[Any]] = None,
    ) -> ReadResult:
        """Rows as dicts. No where value sets means an unfiltered SELECT."""
        sql = build_select(table_name, select_field_names, where_field_names, where_value_sets, self._use())
        if not where_field_names or not where_value_sets:
            return self.executor.execute_read(sql)
        parameter_sets = self._parameter_sets(
            table_name, where_field_names, where_value_sets, WHERE_PREFIX, where_field_types
        )
        return self.executor.execute_read(sql, parameter_sets)

    def scalar(
        self,
        sql_prefix: str,
        where_field_names: Sequence[str],
        where_field_types: Optional[Sequence[Any]],
        where_values: Sequence[Any],
    ) -> ScalarResult:
        """
        Single value from ``<sql_prefix> WHERE ...``, e.g. ``SELECT COUNT(*) FROM Orders``.

        Never raises; failures are returned in ``errors``.
        """
        use = self._use()
        where = build_where(where_field_names, [where_values])
        sql = f"{use} {sql_prefix}{where}" if use else f"{sql_prefix}{where}"
        try:
            parameters = self._parameter_sets("", where_field_names, [where_values], WHERE_PREFIX, where_field_types)[0]
        except Exception as e:
            logger.warning(f"Cannot build parameters for scalar query '{sql}': {e}")
            return ScalarResult(value=None, errors=[CrudError.from_exception(e)])
        return self.executor.execute_scalar(sql, parameters)

    # -------------------------------------------------------------------------
    # Single fields
    # -------------------------------------------------------------------------

    def retrieve_field(self, table_name: str, id_field_name: str, target_field_name: str) -> ReadResult:
        """The id and target columns of every row."""
        return self.read_records(table_name, [], [], [id_field_name, target_field_name])

    def retrieve_field_by_id(
        self,
        table_name: str,
        id_field_name: str,
        record_id: Any,
        target_field_name: str,
    ) -> ReadResult:
        """The id and target columns of the row with ``record_id``."""
        return self.read_records(
            table_name,
            [id_field_name],
            [[record_id]],
            [id_field_name, target_field_name],
            where_field_types=[type(record_id)],
        )

    def update_field(
        self,
        table_name: str,
        id_field_name: str,
        field_type: Any,
        record_id: Any,
        field_to_update: str,
        corrected_value: Any,
    ) -> CudResult:
        """Set one column of the row with ``record_id``."""
        return self.update_records(
            table_name,
            [field_to_update],
            [field_type],
            [[corrected_value]],
            [id_field_name],
            [[record_id]],
            where_field_types=[type(record_id)],
        )

    # -------------------------------------------------------------------------
    # Lifecycle shortcuts
    # -------------------------------------------------------------------------

    def create_table(
        self,
        table_name: str,
        field_names: Sequence[str],
        field_types: Sequence[Any],
        recreate_if_exists: bool = False,
    ) -> bool:
        return self.manager.create_table_from_fields(table_name, field_names, field_types, recreate_if_exists)

    def drop_table(self, table_name: str) -> bool:
        return self.manager.drop_table(table_name)

    def table_exists(self, table_name: str) -> bool:
        return self.manager.table_exists(table_name)


class GenericCrud(Crud):
    """
    CRUD operations on record instances.

    Table name and columns come from the record type. Descriptors are cached
    per (record type, provider); call ``invalidate`` after changing templates.
    """

    def __init__(self, descriptor: ConnectionDescriptor, **kwargs):
        super().__init__(descriptor, **kwargs)
        self.descriptors = DescriptorCache(self.templates, self.types, self.settings.default_primary_key_name)

    def describe(self, record_type: type) -> TableDescriptor:
        return self.descriptors.describe(record_type, self.provider)

    def invalidate(self, record_type: Optional[type] = None) -> int:
        return self.descriptors.invalidate(record_type)

    @staticmethod
    def _record_type(records: Sequence[Any], record_type: Optional[type]) -> type:
        if record_type is not None:
            return record_type
        if not records:
            raise ValueError("record_type is required when no records are given")
        return type(records[0])

    def _record_parameter_sets(
        self,
        converter: ValueConverter,
        records: Sequence[Any],
        fields: Sequence[FieldDescriptor],
        prefix: str,
    ) -> List[ParameterSet]:
        value_sets = converter.to_provider_values(records, fields)
        return build_parameter_sets(self.provider, [f.name for f in fields], value_sets, prefix, self._targets(fields))

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def insert(self, records: Sequence[Any]) -> CudResult:
        """Insert records. Auto-increment keys are left to the database."""
        if not records:
            return CudResult()
        descriptor = self.describe(self._record_type(records, None))
        fields = descriptor.data_fields
        converter = ValueConverter(descriptor, self.types)

        sql = build_insert(descriptor.table_name, [f.name for f in fields], self._use())
        return self.executor.execute_cud(sql, self._record_parameter_sets(converter, records, fields, VALUE_PREFIX))

    def update(self, records: Sequence[Any]) -> CudResult:
        """Update records matched by primary key."""
        if not records:
            return CudResult()
        descriptor = self.describe(self._record_type(records, None))
        key_fields = descriptor.primary_key_fields
        set_fields = [f for f in descriptor.data_fields if not f.is_primary_key] or descriptor.data_fields
        converter = ValueConverter(descriptor, self.types)

        sql = build_update(
            descriptor.table_name,
            [f.name for f in set_fields],
            [f.name for f in key_fields],
            [[None]] * len(records),
            self._use(),
        )
        parameter_sets = merge_parameter_sets(
            self._record_parameter_sets(converter, records, set_fields, SET_PREFIX),
            self._record_parameter_sets(converter, records, key_fields, WHERE_PREFIX),
        )
        return self.executor.execute_cud(sql, parameter_sets)

    def delete(self, records: Sequence[Any]) -> CudResult:
        """Delete records matched by primary key."""
        if not records:
            return CudResult()
        descriptor = self.describe(self._record_type(records, None))
        key_fields = descriptor.primary_key_fields
        converter = ValueConverter(descriptor, self.types)

        sql = build_delete(descriptor.table_name, [f.name for f in key_fields], [[None]] * len(records), self._use())
        return self.executor.execute_cud(sql, self._record_parameter_sets(converter, records, key_fields, WHERE_PREFIX))

    def read(
        self,
        records: Sequence[T],
        select_fields: Optional[Sequence[str]] = None,
        record_type: Optional[Type[T]] = None,
    ) -> ReadResult[T]:
        """
        Read the stored versions of records, matched by primary key.

        With no records every row is read (``record_type`` is then required).
        Members not in ``select_fields`` are set to None.
        """
        record_type = self._record_type(records, record_type)
        descriptor = self.describe(record_type)
        key_fields = descriptor.primary_key_fields
        converter = ValueConverter(descriptor, self.types)

        where_names = [f.name for f in key_fields] if records else []
        sql = build_select(
            descriptor.table_name,
            select_fields,
            where_names,
            [[None]] * len(records),
            self._use(),
        )

        if records:
            raw = self.executor.execute_read(
                sql, self._record_parameter_sets(converter, records, key_fields, WHERE_PREFIX)
            )
        else:
            raw = self.executor.execute_read(sql)

        return ReadResult(
            rows=converter.from_provider_rows(raw.rows, record_type),
            columns=raw.columns,
            errors=raw.errors,
        )

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    def create_table_for(self, record_type: type, recreate_if_exists: bool = False) -> bool:
        return self.manager.create_table(self.describe(record_type), recreate_if_exists)

    def drop_table_for(self, record_type: type) -> bool:
        return self.manager.drop_table(self.describe(record_type).table_name)
