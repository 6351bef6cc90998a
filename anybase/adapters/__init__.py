"""
Database Adapters

One adapter per provider. Missing drivers are only reported when an adapter
for that provider is instantiated.
"""

from anybase.adapters.base import BaseAdapter
from anybase.adapters.factory import get_adapter, register_adapter, list_adapters, is_provider_supported
from anybase.adapters.sqlite_adapter import SQLiteAdapter
from anybase.adapters.mysql_adapter import MySQLAdapter, MYSQL_AVAILABLE
from anybase.adapters.sqlserver_adapter import SQLServerAdapter, PYMSSQL_AVAILABLE, PYODBC_AVAILABLE

__all__ = [
    "BaseAdapter",
    "get_adapter",
    "register_adapter",
    "list_adapters",
    "is_provider_supported",
    "SQLiteAdapter",
    "MySQLAdapter",
    "SQLServerAdapter",
    "MYSQL_AVAILABLE",
    "PYMSSQL_AVAILABLE",
    "PYODBC_AVAILABLE",
]
