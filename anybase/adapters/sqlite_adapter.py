"""
SQLite Adapter for AnyBase

SQLite is ideal for:
- Local caches and single-user applications
- Tests (no server required)
- Embedded data files shipped with an application

Notes:
- Uses the sqlite3 standard library module, no install needed
- A database is one file: <folder>/<database name>
- There is no server, so server-only connections are refused
- Concurrent writers from several processes should share a mutex key
"""

import logging
import os
import sqlite3
from typing import Any, List, Tuple

from anybase.adapters.base import BaseAdapter
from anybase.connection.descriptor import DatabaseProvider, database_file_path, describe_for_error
from anybase.shared.exceptions import ConnectionError
from anybase.sql.parameters import Parameter
from anybase.sql.statements import build_select

logger = logging.getLogger(__name__)


class SQLiteAdapter(BaseAdapter):
    """
    Adapter for SQLite database files.

    Transactions are explicit: the connection runs in autocommit mode and
    ``begin_transaction`` issues BEGIN, so DDL and DML share one transaction.

    Example:
        adapter = SQLiteAdapter(sqlite_connection("/data", "orders.db"))
        connection = adapter.open_connection()
    """

    ENGINE = "sqlite"
    PROVIDER = DatabaseProvider.SQLITE
    PARAM_STYLE = "named"  # sqlite3 binds @name from a dict
    FILE_BASED = True

    @property
    def driver_errors(self) -> Tuple[type, ...]:
        return (sqlite3.Error,)

    @property
    def database_path(self) -> str:
        return database_file_path(self.descriptor)

    def _connect(self, server_only: bool, autocommit: bool) -> Any:
        if server_only:
            raise ConnectionError(
                describe_for_error(self.descriptor, server_only=True),
                engine=self.ENGINE,
            )

        folder = self.descriptor.folder_path
        if folder and not os.path.isdir(folder):
            raise ConnectionError(
                f"{describe_for_error(self.descriptor)}: folder {folder} does not exist",
                engine=self.ENGINE,
            )

        if self.descriptor.password:
            logger.warning("sqlite3 does not support encrypted databases; the password is ignored")

        return sqlite3.connect(
            self.database_path,
            timeout=self.settings.connect_timeout,
            isolation_level=None,
            check_same_thread=False,
        )

    def begin_transaction(self, connection: Any) -> None:
        connection.execute("BEGIN")

    def table_exists_query(self, table_name: str) -> Tuple[str, List[Parameter]]:
        return self._where_query("sqlite_master", ["name"], ["type", "name"], ["table", table_name])

    def table_columns_query(self, table_name: str) -> Tuple[str, List[Parameter], str]:
        sql = build_select("pragma_table_info(@Wheretable)", ["name"], [], [])
        return sql, [Parameter("@Wheretable", table_name)], "name"
