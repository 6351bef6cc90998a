"""
Base Adapter Interface for AnyBase

Adapters are the connection factory: given a ConnectionDescriptor they open
DB-API connections, translate placeholders to the driver's paramstyle, and
supply the provider-specific lifecycle SQL.

DESIGN PRINCIPLES:
-----------------
1. A connection is opened fresh per operation; the caller closes it
2. Statements use @name placeholders (adapter converts as needed)
3. Driver exceptions are exposed as ``driver_errors`` so the executor can
   capture them per chunk
4. Connection failures are wrapped in ConnectionError with a message built
   from the descriptor
5. Adapters hold no connection state
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from anybase.connection.descriptor import ConnectionDescriptor, DatabaseProvider, describe_for_error
from anybase.core.config import Settings, get_settings
from anybase.shared.exceptions import ConnectionError
from anybase.sql.parameters import Parameter, build_parameters
from anybase.sql.statements import WHERE_PREFIX, build_select, use_clause

logger = logging.getLogger(__name__)

# @name, but not @@name (SQL Server globals) or e-mail-like text
_PLACEHOLDER = re.compile(r"(?<![@\w])@(\w+)")


class BaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    Each adapter must implement:
    - _connect(): Open a raw DB-API connection
    - driver_errors: Exception classes raised by the driver
    - the lifecycle SQL hooks for its provider

    Usage:
        adapter = get_adapter(descriptor)
        connection = adapter.open_connection()
        try:
            adapter.begin_transaction(connection)
            cursor = connection.cursor()
            sql, params = adapter.convert_placeholders(sql, parameters)
            cursor.execute(sql, params)
            connection.commit()
        finally:
            adapter.close_quietly(connection)
    """

    # Engine identifier
    ENGINE: str = "base"
    PROVIDER: Optional[DatabaseProvider] = None

    # DB-API paramstyle used by the driver: named, pyformat or qmark
    PARAM_STYLE: str = "named"

    # Statements must select the database with USE
    REQUIRES_USE_CLAUSE: bool = False

    # Existence means a file on disk rather than a server catalog entry
    FILE_BASED: bool = False

    def __init__(self, descriptor: ConnectionDescriptor, settings: Optional[Settings] = None):
        self.descriptor = descriptor
        self.settings = settings or get_settings()

    # -------------------------------------------------------------------------
    # Connections
    # -------------------------------------------------------------------------

    @abstractmethod
    def _connect(self, server_only: bool, autocommit: bool) -> Any:
        """Open a raw DB-API connection."""
        pass

    @property
    @abstractmethod
    def driver_errors(self) -> Tuple[type, ...]:
        """Exception classes raised by the driver for data-level failures."""
        pass

    def open_connection(self, server_only: bool = False, autocommit: bool = False) -> Any:
        """
        Open a connection to the database, or only to the server.

        Raises:
            ConnectionError: If the connection cannot be opened
        """
        try:
            connection = self._connect(server_only, autocommit)
        except ConnectionError:
            raise
        except Exception as e:
            message = self.explain_connection_failure(e, server_only)
            logger.error(message)
            raise ConnectionError(message, engine=self.ENGINE, original_error=e)

        logger.debug(f"{self.ENGINE} connection opened ({'server' if server_only else 'database'})")
        return connection

    def explain_connection_failure(self, error: Exception, server_only: bool) -> str:
        return f"{describe_for_error(self.descriptor, server_only)}: {error}"

    def begin_transaction(self, connection: Any) -> None:
        """DB-API drivers open a transaction implicitly; override where they don't."""
        pass

    def commit(self, connection: Any) -> None:
        connection.commit()

    def close_quietly(self, connection: Any) -> None:
        try:
            connection.close()
        except Exception as e:
            logger.warning(f"Error closing {self.ENGINE} connection: {e}")

    # -------------------------------------------------------------------------
    # Placeholders
    # -------------------------------------------------------------------------

    def convert_placeholders(
        self,
        sql: str,
        parameters: Optional[Sequence[Parameter]] = None,
    ) -> Tuple[str, Any]:
        """
        Convert @name placeholders to the driver's paramstyle.

        Returns (sql, params); params is None for parameterless statements.
        """
        if not parameters:
            return sql, None

        values: Dict[str, Any] = {p.key: p.value for p in parameters}

        if self.PARAM_STYLE == "named":
            return sql, values

        if self.PARAM_STYLE == "pyformat":
            escaped = sql.replace("%", "%%")
            return _PLACEHOLDER.sub(lambda m: f"%({m.group(1)})s", escaped), values

        if self.PARAM_STYLE == "qmark":
            ordered: List[Any] = []

            def _positional(match):
                ordered.append(values[match.group(1)])
                return "?"

            return _PLACEHOLDER.sub(_positional, sql), ordered

        raise ValueError(f"Unknown paramstyle {self.PARAM_STYLE}")

    # -------------------------------------------------------------------------
    # Lifecycle SQL
    # -------------------------------------------------------------------------

    def use_clause(self) -> str:
        if not self.REQUIRES_USE_CLAUSE:
            return ""
        return use_clause(self.descriptor.provider, self.descriptor.database_name)

    def _where_query(
        self,
        table: str,
        select_fields: Sequence[str],
        where_fields: Sequence[str],
        where_values: Sequence[Any],
        use: str = "",
        suffix: str = "",
    ) -> Tuple[str, List[Parameter]]:
        sql = build_select(table, select_fields, where_fields, [where_values], use) + suffix
        parameters = build_parameters(self.descriptor.provider, where_fields, where_values, WHERE_PREFIX)
        return sql, parameters

    def database_exists_query(self) -> Tuple[str, List[Parameter]]:
        """Scalar query returning a positive count when the database exists."""
        raise NotImplementedError(f"{self.ENGINE} has no server catalog")

    def create_database_sql(self) -> str:
        raise NotImplementedError(f"{self.ENGINE} creates databases on connect")

    def drop_database_sql(self) -> str:
        raise NotImplementedError(f"{self.ENGINE} drops databases by deleting files")

    @abstractmethod
    def table_exists_query(self, table_name: str) -> Tuple[str, List[Parameter]]:
        """Read query returning one row when the table exists."""
        pass

    @abstractmethod
    def table_columns_query(self, table_name: str) -> Tuple[str, List[Parameter], str]:
        """Read query listing column names, plus the result column holding the name."""
        pass

    def get_engine_info(self) -> Dict[str, Any]:
        """Get information about this adapter/engine."""
        return {
            "engine": self.ENGINE,
            "paramstyle": self.PARAM_STYLE,
            "use_clause": self.REQUIRES_USE_CLAUSE,
            "file_based": self.FILE_BASED,
        }
