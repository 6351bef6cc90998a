"""
MySQL Adapter for AnyBase

MySQL is ideal for:
- Shared multi-user databases
- Web application backends
- MariaDB and Aurora MySQL deployments

Requirements:
    pip install mysql-connector-python
"""

import logging
from typing import Any, List, Tuple

try:
    import mysql.connector
    MYSQL_AVAILABLE = True
except ImportError:
    MYSQL_AVAILABLE = False
    mysql = None

from anybase.adapters.base import BaseAdapter
from anybase.connection.descriptor import ConnectionDescriptor, DatabaseProvider, describe_for_error
from anybase.shared.exceptions import ConnectionError
from anybase.sql.parameters import Parameter

logger = logging.getLogger(__name__)


class MySQLAdapter(BaseAdapter):
    """
    Adapter for MySQL database.

    Databases are MySQL schemas. Connections are opened with autocommit off
    so every operation runs in one transaction until commit.

    Example:
        adapter = MySQLAdapter(mysql_connection("mysql.local", 3306, "app", "secret", "orders"))
        connection = adapter.open_connection()
    """

    ENGINE = "mysql"
    PROVIDER = DatabaseProvider.MYSQL
    PARAM_STYLE = "pyformat"  # %(name)s

    def __init__(self, descriptor: ConnectionDescriptor, settings=None):
        super().__init__(descriptor, settings)

        if not MYSQL_AVAILABLE:
            raise ConnectionError(
                "mysql-connector-python not installed. "
                "Run: pip install mysql-connector-python",
                engine=self.ENGINE
            )

    @property
    def driver_errors(self) -> Tuple[type, ...]:
        return (mysql.connector.Error,)

    def _connect(self, server_only: bool, autocommit: bool) -> Any:
        params = {
            "host": self.descriptor.server_address,
            "port": self.descriptor.port or 3306,
            "user": self.descriptor.user_name or self.settings.default_user_name,
            "password": self.descriptor.password or "",
            "autocommit": autocommit,
            "connection_timeout": self.settings.connect_timeout,
        }
        if not server_only and self.descriptor.database_name:
            params["database"] = self.descriptor.database_name

        return mysql.connector.connect(**params)

    def explain_connection_failure(self, error: Exception, server_only: bool) -> str:
        description = describe_for_error(self.descriptor, server_only)
        text = str(error)
        if "Access denied for user" in text:
            return f"{description} because the password was incorrect."
        if "Can't connect to MySQL server" in text or "Unable to connect" in text:
            return f"{description} because the server address or port is invalid."
        return f"{description}: {text}"

    # -------------------------------------------------------------------------
    # Lifecycle SQL
    # -------------------------------------------------------------------------

    def database_exists_query(self) -> Tuple[str, List[Parameter]]:
        sql = "SELECT COUNT(*) FROM INFORMATION_SCHEMA.SCHEMATA WHERE SCHEMA_NAME=@schemaName"
        return sql, [Parameter("@schemaName", self.descriptor.database_name)]

    def create_database_sql(self) -> str:
        return f"CREATE SCHEMA {self.descriptor.database_name}"

    def drop_database_sql(self) -> str:
        return f"DROP SCHEMA {self.descriptor.database_name}"

    def table_exists_query(self, table_name: str) -> Tuple[str, List[Parameter]]:
        return self._where_query(
            "information_schema.tables",
            ["table_name"],
            ["table_schema", "table_name"],
            [self.descriptor.database_name, table_name],
        )

    def table_columns_query(self, table_name: str) -> Tuple[str, List[Parameter], str]:
        sql, parameters = self._where_query(
            "information_schema.columns",
            ["column_name"],
            ["table_schema", "table_name"],
            [self.descriptor.database_name, table_name],
            suffix=" ORDER BY ordinal_position",
        )
        return sql, parameters, "column_name"
