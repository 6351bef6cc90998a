"""
In-memory DB-API stand-ins for executor tests.

FakeConnection records every statement and can be told to fail on chosen
parameter values or on commit.
"""

from typing import Any, List, Optional, Tuple

from anybase.adapters.base import BaseAdapter
from anybase.connection import DatabaseProvider


class FakeDriverError(Exception):
    """Stands in for a driver's data-level exception."""
    pass


class FakeCursor:
    def __init__(self, connection: "FakeConnection"):
        self.connection = connection
        self.rowcount = -1
        self.description = None
        self.closed = False

    def execute(self, sql: str, params: Any = None):
        self.connection.executed.append((sql, params))
        if isinstance(params, dict) and params.get("n") in self.connection.fail_values:
            raise FakeDriverError(f"UNIQUE constraint failed: n={params['n']}")
        self.rowcount = self.connection.rowcount
        self.description = self.connection.description

    def fetchall(self) -> List[Tuple]:
        return list(self.connection.rows)

    def close(self):
        self.closed = True


class FakeConnection:
    """Records statements; fails on chosen parameter values or on commit."""

    def __init__(self):
        self.executed: List[Tuple[str, Any]] = []
        self.cursors: List[FakeCursor] = []
        self.fail_values = set()
        self.rowcount = 1
        self.description: Optional[List[Tuple]] = None
        self.rows: List[Tuple] = []
        self.commit_error: Optional[Exception] = None
        self.commits = 0
        self.closed = False

    def cursor(self) -> FakeCursor:
        cursor = FakeCursor(self)
        self.cursors.append(cursor)
        return cursor

    def commit(self):
        if self.commit_error is not None:
            raise self.commit_error
        self.commits += 1

    def close(self):
        self.closed = True


class FakeAdapter(BaseAdapter):
    ENGINE = "fake"
    PROVIDER = DatabaseProvider.SQLITE
    PARAM_STYLE = "named"

    def __init__(self, descriptor, settings=None):
        super().__init__(descriptor, settings)
        self.connection = FakeConnection()
        self.connect_error: Optional[Exception] = None
        self.opened = 0

    @property
    def driver_errors(self):
        return (FakeDriverError,)

    def _connect(self, server_only: bool, autocommit: bool):
        if self.connect_error is not None:
            raise self.connect_error
        self.opened += 1
        return self.connection

    def table_exists_query(self, table_name):
        return self._where_query("tables", ["name"], ["name"], [table_name])

    def table_columns_query(self, table_name):
        sql, parameters = self._where_query("columns", ["name"], ["table"], [table_name])
        return sql, parameters, "name"

