"""
Microsoft SQL Server Adapter for AnyBase

SQL Server is ideal for:
- Enterprise Windows-based environments
- Azure SQL Database
- Existing Microsoft line-of-business databases

Features:
- SQL authentication and Windows (trusted) authentication
- pymssql by default, pyodbc when configured or when pymssql is missing
- Per-statement USE clause so one login can address several databases

Requirements:
    pip install pymssql
    # or for full ODBC support:
    pip install pyodbc
"""

import logging
import os
from typing import Any, List, Optional, Tuple

# Try pymssql first (simpler, no ODBC config needed)
try:
    import pymssql
    PYMSSQL_AVAILABLE = True
except ImportError:
    PYMSSQL_AVAILABLE = False
    pymssql = None

# Fall back to pyodbc
try:
    import pyodbc
    PYODBC_AVAILABLE = True
except ImportError:
    PYODBC_AVAILABLE = False
    pyodbc = None

from anybase.adapters.base import BaseAdapter
from anybase.connection.descriptor import ConnectionDescriptor, DatabaseProvider
from anybase.shared.exceptions import ConnectionError
from anybase.sql.parameters import Parameter

logger = logging.getLogger(__name__)


class SQLServerAdapter(BaseAdapter):
    """
    Adapter for Microsoft SQL Server.

    Supports SQL Server 2012+ and Azure SQL Database.

    Example (SQL authentication):
        adapter = SQLServerAdapter(sqlserver_connection("sql01", "app", "secret", "orders"))

    Example (Windows Auth):
        adapter = SQLServerAdapter(trusted_connection("sql01", "orders"))
    """

    ENGINE = "sqlserver"
    PROVIDER = DatabaseProvider.SQLSERVER
    REQUIRES_USE_CLAUSE = True

    def __init__(self, descriptor: ConnectionDescriptor, settings=None):
        super().__init__(descriptor, settings)

        # Determine driver
        self.use_pyodbc = self.settings.sqlserver_use_pyodbc

        if self.use_pyodbc:
            if not PYODBC_AVAILABLE:
                raise ConnectionError(
                    "pyodbc not installed. Run: pip install pyodbc",
                    engine=self.ENGINE
                )
        else:
            if not PYMSSQL_AVAILABLE:
                if PYODBC_AVAILABLE:
                    self.use_pyodbc = True
                    logger.info("pymssql not available, using pyodbc")
                else:
                    raise ConnectionError(
                        "Neither pymssql nor pyodbc installed. Run: pip install pymssql",
                        engine=self.ENGINE
                    )

        self.driver = self.settings.sqlserver_odbc_driver or (self._detect_driver() if self.use_pyodbc else None)

    @property
    def PARAM_STYLE(self) -> str:
        # pyodbc binds ?, pymssql binds %(name)s
        return "qmark" if self.use_pyodbc else "pyformat"

    @property
    def driver_errors(self) -> Tuple[type, ...]:
        errors = []
        if PYMSSQL_AVAILABLE:
            errors.append(pymssql.Error)
        if PYODBC_AVAILABLE:
            errors.append(pyodbc.Error)
        return tuple(errors)

    def _detect_driver(self) -> str:
        """Auto-detect available ODBC driver."""
        preferred_drivers = [
            "ODBC Driver 18 for SQL Server",
            "ODBC Driver 17 for SQL Server",
            "ODBC Driver 13.1 for SQL Server",
            "SQL Server Native Client 11.0",
            "SQL Server"
        ]

        available = pyodbc.drivers()
        for driver in preferred_drivers:
            if driver in available:
                return driver

        for driver in available:
            if "sql" in driver.lower():
                return driver

        return "ODBC Driver 17 for SQL Server"

    def odbc_connection_string(self, server_only: bool = False) -> str:
        """Build ODBC connection string."""
        d = self.descriptor
        parts = [
            f"DRIVER={{{self.driver}}}",
            f"SERVER={d.server_address},{d.port or 1433}",
        ]
        if not server_only and d.database_name:
            parts.append(f"DATABASE={d.database_name}")

        if d.trusted:
            parts.append("Trusted_Connection=yes")
        else:
            parts.append(f"UID={d.user_name}")
            parts.append(f"PWD={d.password or ''}")

        return ";".join(parts)

    def _connect(self, server_only: bool, autocommit: bool) -> Any:
        timeout = self.settings.connect_timeout

        if self.use_pyodbc:
            return pyodbc.connect(
                self.odbc_connection_string(server_only),
                timeout=timeout,
                autocommit=autocommit,
            )

        d = self.descriptor
        conn_params = {
            "server": d.server_address,
            "port": str(d.port or 1433),
            "login_timeout": timeout,
            "autocommit": autocommit,
            "appname": "AnyBase",
        }
        if not d.trusted:
            conn_params["user"] = d.user_name
            conn_params["password"] = d.password or ""
        if not server_only and d.database_name:
            conn_params["database"] = d.database_name

        return pymssql.connect(**conn_params)

    # -------------------------------------------------------------------------
    # Lifecycle SQL
    # -------------------------------------------------------------------------

    def database_exists_query(self) -> Tuple[str, List[Parameter]]:
        sql = "SELECT COUNT(*) FROM sys.databases WHERE name=@schemaName"
        return sql, [Parameter("@schemaName", self.descriptor.database_name)]

    def create_database_sql(self) -> str:
        name = self.descriptor.database_name
        sql = f"USE [master]; CREATE DATABASE [{name}]"

        data_directory: Optional[str] = self.settings.sqlserver_data_directory
        if data_directory:
            data_file = os.path.join(data_directory, f"{name}.mdf")
            log_file = os.path.join(data_directory, f"{name}_log.ldf")
            sql += (
                f" ON PRIMARY (NAME = N'{name}', FILENAME = N'{data_file}')"
                f" LOG ON (NAME = N'{name}_log', FILENAME = N'{log_file}')"
            )
        return sql

    def drop_database_sql(self) -> str:
        return f"USE [master]; DROP DATABASE [{self.descriptor.database_name}]"

    def table_exists_query(self, table_name: str) -> Tuple[str, List[Parameter]]:
        return self._where_query(
            "information_schema.tables",
            ["table_name"],
            ["table_catalog", "table_name"],
            [self.descriptor.database_name, table_name],
            use=self.use_clause(),
        )

    def table_columns_query(self, table_name: str) -> Tuple[str, List[Parameter], str]:
        sql, parameters = self._where_query(
            "information_schema.columns",
            ["column_name"],
            ["table_catalog", "table_name"],
            [self.descriptor.database_name, table_name],
            use=self.use_clause(),
            suffix=" ORDER BY ordinal_position",
        )
        return sql, parameters, "column_name"
