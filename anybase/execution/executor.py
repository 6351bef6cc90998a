"""
Query Executor

Runs one statement against many parameter sets inside one transaction.

STATE MACHINE:
--------------
    Idle -> ConnectionOpen -> TransactionOpen
         -> (per chunk: ParametersBound -> Executed)
         -> TransactionCommitted -> ConnectionClosed

BATCHING:
---------
Parameter sets are split into chunks of ``batch_size``. Chunks run in order on
one connection and one transaction. Within a chunk each parameter set is
executed in order on one cursor.

FAILURE POLICY:
---------------
- Connection cannot open: ConnectionError propagates, no result is produced
- A chunk raises: one CrudError is recorded, the chunk stops, the next chunk
  runs, and the transaction is still committed. Statements of the failed
  chunk that ran before the failure stay applied.
- Commit raises: the exception propagates
- Scalar queries never raise; any failure becomes the only CrudError

If the descriptor has a mutex key, everything from connection open to commit
runs under ``named_lock(mutex_key)``.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Sequence

from anybase.adapters.base import BaseAdapter
from anybase.adapters.factory import get_adapter
from anybase.connection.descriptor import ConnectionDescriptor
from anybase.core.config import Settings, get_settings
from anybase.execution.locks import named_lock
from anybase.shared.exceptions import CrudError, QueryError
from anybase.shared.types import CudResult, ReadResult, ScalarResult
from anybase.sql.parameters import ParameterSet

logger = logging.getLogger(__name__)


def _advance_to_rows(cursor: Any) -> bool:
    """Skip leading results without rows, e.g. the one a USE clause produces."""
    while cursor.description is None:
        nextset = getattr(cursor, "nextset", None)
        if nextset is None or not nextset():
            return False
    return True


def to_batches(items: Sequence[Any], batch_size: int) -> List[List[Any]]:
    """Fixed-size chunks in order; none for an empty list or a non-positive size."""
    if not items or batch_size <= 0:
        return []
    return [list(items[i:i + batch_size]) for i in range(0, len(items), batch_size)]


class QueryExecutor:
    """
    Batched, transactional statement execution for one connection target.

    Usage:
        executor = QueryExecutor(descriptor)
        result = executor.execute_cud(sql, parameter_sets)
        if result.errors:
            ...
    """

    def __init__(
        self,
        descriptor: ConnectionDescriptor,
        adapter: Optional[BaseAdapter] = None,
        settings: Optional[Settings] = None,
        batch_size: Optional[int] = None,
    ):
        self.descriptor = descriptor
        self.settings = settings or get_settings()
        self.adapter = adapter or get_adapter(descriptor, self.settings)
        self.batch_size = batch_size or self.settings.batch_size
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")

    @contextmanager
    def serialized(self) -> Iterator[None]:
        """Hold the descriptor's named lock, if it has one."""
        key = self.descriptor.mutex_key
        if not key:
            yield
            return
        with named_lock(key, self.settings.lock_directory):
            yield

    def _chunks(self, parameter_sets: Optional[Sequence[ParameterSet]]) -> List[List[Optional[ParameterSet]]]:
        if parameter_sets is None:
            return [[None]]
        return to_batches(parameter_sets, self.batch_size)

    def _execute(self, cursor: Any, sql: str, parameters: Optional[ParameterSet]) -> None:
        final_sql, params = self.adapter.convert_placeholders(sql, parameters)
        if params is None:
            cursor.execute(final_sql)
        else:
            cursor.execute(final_sql, params)

    def _capture(self, error: Exception, sql: str, chunk_index: int) -> CrudError:
        crud_error = CrudError.from_exception(error)
        if isinstance(error, self.adapter.driver_errors):
            logger.warning(f"Chunk {chunk_index} of '{sql}' failed: {crud_error.concatenated}")
        else:
            logger.exception(f"Unexpected error in chunk {chunk_index} of '{sql}'")
        return crud_error

    @staticmethod
    def _close_cursor(cursor: Any) -> None:
        try:
            cursor.close()
        except Exception as e:
            logger.debug(f"Error closing cursor: {e}")

    # -------------------------------------------------------------------------
    # CUD
    # -------------------------------------------------------------------------

    def execute_cud(
        self,
        sql: str,
        parameter_sets: Optional[Sequence[ParameterSet]] = None,
        server_only: bool = False,
    ) -> CudResult:
        """
        Execute an INSERT, UPDATE, DELETE or DDL statement.

        ``parameter_sets=None`` runs the statement once without parameters; an
        empty list runs nothing.
        """
        chunks = self._chunks(parameter_sets)
        if not chunks:
            return CudResult()

        with self.serialized():
            connection = self.adapter.open_connection(server_only=server_only)
            try:
                self.adapter.begin_transaction(connection)
                affected = 0
                errors: List[CrudError] = []

                for index, chunk in enumerate(chunks):
                    cursor = connection.cursor()
                    try:
                        for parameters in chunk:
                            self._execute(cursor, sql, parameters)
                            affected += max(cursor.rowcount or 0, 0)
                    except Exception as e:
                        errors.append(self._capture(e, sql, index))
                    finally:
                        self._close_cursor(cursor)

                self.adapter.commit(connection)
            finally:
                self.adapter.close_quietly(connection)

        logger.debug(f"'{sql}' affected {affected} rows in {len(chunks)} chunks ({len(errors)} failed)")
        return CudResult(affected_row_count=affected, errors=errors)

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    def execute_read(
        self,
        sql: str,
        parameter_sets: Optional[Sequence[ParameterSet]] = None,
        server_only: bool = False,
    ) -> ReadResult:
        """
        Execute a SELECT once per parameter set and accumulate all rows.

        With no parameter sets the statement runs once without parameters.
        """
        chunks = self._chunks(parameter_sets or None)

        columns: List[str] = []
        rows: List[dict] = []
        errors: List[CrudError] = []

        with self.serialized():
            connection = self.adapter.open_connection(server_only=server_only)
            try:
                self.adapter.begin_transaction(connection)

                for index, chunk in enumerate(chunks):
                    cursor = connection.cursor()
                    try:
                        for parameters in chunk:
                            self._execute(cursor, sql, parameters)
                            if not _advance_to_rows(cursor):
                                continue
                            names = [desc[0] for desc in cursor.description]
                            if not columns:
                                columns = names
                            rows.extend(dict(zip(names, row)) for row in cursor.fetchall())
                    except Exception as e:
                        errors.append(self._capture(e, sql, index))
                    finally:
                        self._close_cursor(cursor)

                self.adapter.commit(connection)
            finally:
                self.adapter.close_quietly(connection)

        logger.debug(f"'{sql}' returned {len(rows)} rows")
        return ReadResult(rows=rows, columns=columns, errors=errors)

    # -------------------------------------------------------------------------
    # Scalar
    # -------------------------------------------------------------------------

    def execute_scalar(
        self,
        sql: str,
        parameters: Optional[ParameterSet] = None,
        server_only: bool = False,
    ) -> ScalarResult:
        """First column of the first row. Never raises."""
        try:
            with self.serialized():
                connection = self.adapter.open_connection(server_only=server_only)
                try:
                    cursor = connection.cursor()
                    try:
                        self._execute(cursor, sql, parameters or None)
                        rows = cursor.fetchall() if _advance_to_rows(cursor) else []
                    finally:
                        self._close_cursor(cursor)
                    self.adapter.commit(connection)
                finally:
                    self.adapter.close_quietly(connection)
        except Exception as e:
            logger.warning(f"Scalar query '{sql}' failed: {e}")
            return ScalarResult(value=None, errors=[CrudError.from_exception(e)])

        return ScalarResult(value=rows[0][0] if rows else None)

    # -------------------------------------------------------------------------
    # Unmanaged statements
    # -------------------------------------------------------------------------

    def execute_statement(self, sql: str, server_only: bool = True) -> None:
        """
        Run one statement in autocommit mode, outside any transaction.

        Used for CREATE/DROP DATABASE, which servers refuse inside a
        transaction.

        Raises:
            ConnectionError: If the connection cannot be opened
            QueryError: If the statement fails
        """
        with self.serialized():
            connection = self.adapter.open_connection(server_only=server_only, autocommit=True)
            try:
                cursor = connection.cursor()
                try:
                    cursor.execute(sql)
                finally:
                    self._close_cursor(cursor)
            except self.adapter.driver_errors as e:
                raise QueryError(f"{self.adapter.ENGINE} statement failed: {e}", engine=self.adapter.ENGINE, original_error=e)
            finally:
                self.adapter.close_quietly(connection)
