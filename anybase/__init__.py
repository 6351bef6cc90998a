"""
AnyBase - Provider-agnostic CRUD and schema layer

One API over SQL Server, MySQL and SQLite: tables are derived from record
types, values are converted to what each provider can store, and statements
run in batches inside one transaction.

Usage:
    from anybase import GenericCrud, sqlite_connection

    crud = GenericCrud(sqlite_connection("/data", "shop.db"))
    crud.create_table_for(Order)
    result = crud.insert(orders)
    for error in result.errors:
        error.log()
"""

from anybase.connection import (
    ConnectionDescriptor,
    DatabaseProvider,
    connection_from_settings,
    mysql_connection,
    sqlite_connection,
    sqlserver_connection,
    trusted_connection,
)
from anybase.core import Settings, configure_logging, get_settings
from anybase.crud import Crud, GenericCrud
from anybase.lifecycle import DatabaseManager
from anybase.schema import TableTemplate, TemplateCatalog, load_template_catalog
from anybase.shared.exceptions import (
    AnyBaseError,
    ConnectionError,
    CrudError,
    ErrorCategory,
    QueryError,
)
from anybase.shared.types import CudResult, ReadResult, ScalarResult

__version__ = "1.0.0"

__all__ = [
    "ConnectionDescriptor",
    "DatabaseProvider",
    "connection_from_settings",
    "mysql_connection",
    "sqlite_connection",
    "sqlserver_connection",
    "trusted_connection",
    "Settings",
    "configure_logging",
    "get_settings",
    "Crud",
    "GenericCrud",
    "DatabaseManager",
    "TableTemplate",
    "TemplateCatalog",
    "load_template_catalog",
    "AnyBaseError",
    "ConnectionError",
    "CrudError",
    "ErrorCategory",
    "QueryError",
    "CudResult",
    "ReadResult",
    "ScalarResult",
]
