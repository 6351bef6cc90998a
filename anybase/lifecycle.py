"""
Database and Table Lifecycle

Existence checks, creation and removal of databases and tables. Every create
or drop is verified by a fresh existence check afterwards; the verified state
is what gets returned.

    manager = DatabaseManager(descriptor)
    if not manager.database_exists():
        manager.create_database()
    manager.create_table(descriptor_for_orders, recreate_if_exists=True)

SQLite databases are files: a database exists when its file exists, is
created by connecting, and is dropped by deleting the file. MySQL and SQL
Server are queried through their server catalogs.
"""

import logging
import os
from typing import Any, List, Optional, Sequence

from anybase.connection.descriptor import ConnectionDescriptor
from anybase.core.config import Settings, get_settings
from anybase.execution.executor import QueryExecutor
from anybase.mapping.catalog import TypeCatalog, default_type_catalog
from anybase.schema.blueprint import TableDescriptor, build_table_descriptor
from anybase.schema.templates import TemplateCatalog, load_template_catalog
from anybase.shared.exceptions import CrudError, QueryError
from anybase.sql.statements import build_add_column, build_create_table, build_drop_table

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Lifecycle operations for the database a descriptor points at."""

    def __init__(
        self,
        descriptor: ConnectionDescriptor,
        executor: Optional[QueryExecutor] = None,
        settings: Optional[Settings] = None,
        templates: Optional[TemplateCatalog] = None,
        types: Optional[TypeCatalog] = None,
    ):
        self.descriptor = descriptor
        self.settings = settings or get_settings()
        self.executor = executor or QueryExecutor(descriptor, settings=self.settings)
        self.adapter = self.executor.adapter
        self.templates = templates if templates is not None else load_template_catalog(self.settings.template_catalog_path)
        self.types = types or default_type_catalog()

    # =========================================================================
    # CONNECTIONS
    # =========================================================================

    def test_connection(self, server_only: bool = False) -> bool:
        """Open and close a connection. Raises ConnectionError on failure."""
        connection = self.adapter.open_connection(server_only=server_only)
        self.adapter.close_quietly(connection)
        return True

    # =========================================================================
    # DATABASES
    # =========================================================================

    def database_exists(self) -> bool:
        """
        Raises:
            ConnectionError: If the server cannot be reached
            QueryError: If the catalog query fails
        """
        if self.adapter.FILE_BASED:
            return os.path.isfile(self.adapter.database_path)

        sql, parameters = self.adapter.database_exists_query()
        result = self.executor.execute_scalar(sql, parameters, server_only=True)
        if result.errors:
            cause = result.errors[0].underlying_cause
            if isinstance(cause, Exception) and not isinstance(cause, self.adapter.driver_errors):
                raise cause
            raise QueryError(
                f"Cannot check whether database {self.descriptor.database_name} exists: {cause}",
                engine=self.adapter.ENGINE,
                original_error=cause,
            )
        return int(result.value or 0) > 0

    def create_database(self) -> bool:
        """Create the database unless it exists. Returns whether it exists afterwards."""
        if self.database_exists():
            logger.info(f"Database {self.descriptor.database_name} already exists")
            return True

        if self.adapter.FILE_BASED:
            self.test_connection()
        else:
            self.executor.execute_statement(self.adapter.create_database_sql(), server_only=True)

        created = self.database_exists()
        logger.info(f"Create database {self.descriptor.database_name}: {'done' if created else 'failed'}")
        return created

    def drop_database(self) -> bool:
        """Drop the database if it exists. Returns whether it is gone afterwards."""
        if not self.database_exists():
            return True

        if self.adapter.FILE_BASED:
            with self.executor.serialized():
                os.remove(self.adapter.database_path)
        else:
            self.executor.execute_statement(self.adapter.drop_database_sql(), server_only=True)

        dropped = not self.database_exists()
        logger.info(f"Drop database {self.descriptor.database_name}: {'done' if dropped else 'failed'}")
        return dropped

    # =========================================================================
    # TABLES
    # =========================================================================

    def table_exists(self, table_name: str) -> bool:
        if self._database_file_missing():
            return False
        sql, parameters = self.adapter.table_exists_query(table_name)
        result = self.executor.execute_read(sql, [parameters])
        if result.errors:
            for error in result.errors:
                error.log()
            return False
        return result.row_count > 0

    def table_columns(self, table_name: str) -> List[str]:
        """Column names of a table in declaration order."""
        if self._database_file_missing():
            return []
        sql, parameters, column = self.adapter.table_columns_query(table_name)
        result = self.executor.execute_read(sql, [parameters])
        for error in result.errors:
            error.log()
        return [_value_ignoring_case(row, column) for row in result.rows]

    def _database_file_missing(self) -> bool:
        # Connecting would create the file. A missing folder still reaches the driver and fails.
        if not self.adapter.FILE_BASED:
            return False
        path = self.adapter.database_path
        return os.path.isdir(os.path.dirname(path) or ".") and not os.path.isfile(path)

    def create_table(self, descriptor: TableDescriptor, recreate_if_exists: bool = False) -> bool:
        """
        Create a table from a descriptor.

        Drops the table first when ``recreate_if_exists`` is set. Returns whether
        the table exists afterwards.
        """
        name = descriptor.table_name

        if recreate_if_exists and self.table_exists(name):
            self.drop_table(name)

        if not self.table_exists(name):
            sql = build_create_table(descriptor, self.adapter.use_clause())
            logger.info(f"Creating table {name}")
            logger.debug(sql)
            result = self.executor.execute_cud(sql)
            for error in result.errors:
                error.log()

        return self.table_exists(name)

    def create_table_from_fields(
        self,
        table_name: str,
        field_names: Sequence[str],
        field_types: Sequence[Any],
        recreate_if_exists: bool = False,
    ) -> bool:
        descriptor = build_table_descriptor(
            table_name,
            field_names,
            field_types,
            self.descriptor.provider,
            self.templates,
            self.types,
            self.settings.default_primary_key_name,
        )
        return self.create_table(descriptor, recreate_if_exists)

    def drop_table(self, table_name: str) -> bool:
        """Drop a table. Returns whether it is gone afterwards."""
        if self._database_file_missing():
            return True
        result = self.executor.execute_cud(build_drop_table(table_name, self.adapter.use_clause()))
        for error in result.errors:
            error.log()
        dropped = not self.table_exists(table_name)
        logger.info(f"Drop table {table_name}: {'done' if dropped else 'failed'}")
        return dropped

    def add_column(self, table_name: str, column_name: str, core_type: str) -> Optional[CrudError]:
        """Add a column of a catalog type. Returns the error, if the provider refused it."""
        sql_type = self.types.sql_type(self.descriptor.provider, core_type)
        sql = build_add_column(table_name, column_name, sql_type, self.descriptor.provider, self.adapter.use_clause())
        result = self.executor.execute_cud(sql)
        return result.errors[0] if result.errors else None


def _value_ignoring_case(row: dict, column: str) -> Any:
    if column in row:
        return row[column]
    lowered = column.lower()
    for key, value in row.items():
        if str(key).lower() == lowered:
            return value
    return None
