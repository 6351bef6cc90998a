"""
Connection Descriptors

Immutable connection targets and the connection strings derived from them.
"""

from anybase.connection.descriptor import (
    DatabaseProvider,
    ConnectionKind,
    ConnectionDescriptor,
    sqlite_connection,
    mysql_connection,
    sqlserver_connection,
    trusted_connection,
    connection_from_settings,
    database_file_path,
    server_connection_string,
    database_connection_string,
    describe_for_error,
)

__all__ = [
    "DatabaseProvider",
    "ConnectionKind",
    "ConnectionDescriptor",
    "sqlite_connection",
    "mysql_connection",
    "sqlserver_connection",
    "trusted_connection",
    "connection_from_settings",
    "database_file_path",
    "server_connection_string",
    "database_connection_string",
    "describe_for_error",
]
