"""
Connection Descriptors

An immutable description of how to reach one database. Descriptors never open
anything themselves; adapters read them to build driver arguments.

KINDS:
------
    FILE          - SQLite file in a folder
    CREDENTIALED  - MySQL or SQL Server with user name and password
    TRUSTED       - SQL Server with integrated (Windows) authentication

Usage:
    descriptor = sqlite_connection("/data", "orders.db", mutex_key="orders")
    descriptor = mysql_connection("db.local", 3306, "app", "secret", "orders")
    descriptor = trusted_connection("sql01", "orders")

    database_connection_string(descriptor)
    describe_for_error(descriptor, server_only=False)
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from anybase.core.config import Settings
from anybase.shared.exceptions import ConnectionError

logger = logging.getLogger(__name__)


class DatabaseProvider(str, Enum):
    """Supported database engines."""
    SQLSERVER = "sqlserver"
    MYSQL = "mysql"
    SQLITE = "sqlite"


class ConnectionKind(str, Enum):
    FILE = "file"
    CREDENTIALED = "credentialed"
    TRUSTED = "trusted"


@dataclass(frozen=True)
class ConnectionDescriptor:
    """
    How to reach one database.

    Attributes:
        provider: Database engine
        server_address: Host name or IP (server engines)
        port: Server port (MySQL, SQL Server)
        user_name: Login name (credentialed kinds)
        password: Login password, or the SQLite file password
        database_name: Database (server engines) or file name (SQLite)
        mutex_key: Serialize whole operations under this named lock
        folder_path: Folder holding the SQLite file
        trusted: Use integrated authentication (SQL Server)
    """
    provider: DatabaseProvider
    server_address: Optional[str] = None
    port: Optional[int] = None
    user_name: Optional[str] = None
    password: Optional[str] = None
    database_name: Optional[str] = None
    mutex_key: Optional[str] = None
    folder_path: Optional[str] = None
    trusted: bool = False

    @property
    def kind(self) -> ConnectionKind:
        if self.provider == DatabaseProvider.SQLITE:
            return ConnectionKind.FILE
        if self.trusted:
            return ConnectionKind.TRUSTED
        return ConnectionKind.CREDENTIALED

    def __repr__(self) -> str:
        # Keep passwords out of logs
        return (
            f"ConnectionDescriptor(provider={self.provider.value!r}, "
            f"server_address={self.server_address!r}, port={self.port!r}, "
            f"database_name={self.database_name!r}, kind={self.kind.value!r})"
        )


# =============================================================================
# CONSTRUCTORS
# =============================================================================

def sqlite_connection(
    folder_path: str,
    database_name: str,
    password: Optional[str] = None,
    mutex_key: Optional[str] = None,
) -> ConnectionDescriptor:
    return ConnectionDescriptor(
        provider=DatabaseProvider.SQLITE,
        folder_path=folder_path,
        database_name=database_name,
        password=password,
        mutex_key=mutex_key,
    )


def mysql_connection(
    server_address: str,
    port: int = 3306,
    user_name: str = "root",
    password: Optional[str] = None,
    database_name: Optional[str] = None,
    mutex_key: Optional[str] = None,
) -> ConnectionDescriptor:
    return ConnectionDescriptor(
        provider=DatabaseProvider.MYSQL,
        server_address=server_address,
        port=port,
        user_name=user_name,
        password=password,
        database_name=database_name,
        mutex_key=mutex_key,
    )


def sqlserver_connection(
    server_address: str,
    user_name: str,
    password: Optional[str] = None,
    database_name: Optional[str] = None,
    port: int = 1433,
    mutex_key: Optional[str] = None,
) -> ConnectionDescriptor:
    return ConnectionDescriptor(
        provider=DatabaseProvider.SQLSERVER,
        server_address=server_address,
        port=port,
        user_name=user_name,
        password=password,
        database_name=database_name,
        mutex_key=mutex_key,
    )


def trusted_connection(
    server_address: str,
    database_name: Optional[str] = None,
    mutex_key: Optional[str] = None,
) -> ConnectionDescriptor:
    """SQL Server with integrated authentication."""
    return ConnectionDescriptor(
        provider=DatabaseProvider.SQLSERVER,
        server_address=server_address,
        port=1433,
        database_name=database_name,
        mutex_key=mutex_key,
        trusted=True,
    )


def connection_from_settings(settings: Settings) -> ConnectionDescriptor:
    """
    Build a descriptor from ``ANYBASE_*`` configuration.

    Raises:
        ConnectionError: If the provider is missing or unknown
    """
    if not settings.provider:
        raise ConnectionError("ANYBASE_PROVIDER is not set", engine="unknown")

    try:
        provider = DatabaseProvider(settings.provider.lower())
    except ValueError as e:
        supported = ", ".join(p.value for p in DatabaseProvider)
        raise ConnectionError(
            f"Unsupported provider: {settings.provider}. Available: {supported}",
            engine=settings.provider,
            original_error=e,
        )

    if provider == DatabaseProvider.SQLITE:
        return sqlite_connection(
            settings.folder or os.getcwd(),
            settings.database or "anybase.db",
            password=settings.password,
            mutex_key=settings.mutex_key,
        )

    if provider == DatabaseProvider.MYSQL:
        return mysql_connection(
            settings.server or "localhost",
            port=settings.port or 3306,
            user_name=settings.user or settings.default_user_name,
            password=settings.password,
            database_name=settings.database,
            mutex_key=settings.mutex_key,
        )

    if settings.trusted:
        return trusted_connection(settings.server or "localhost", settings.database, settings.mutex_key)

    return sqlserver_connection(
        settings.server or "localhost",
        settings.user or settings.default_user_name,
        password=settings.password,
        database_name=settings.database,
        port=settings.port or 1433,
        mutex_key=settings.mutex_key,
    )


# =============================================================================
# CONNECTION STRINGS
# =============================================================================

def database_file_path(descriptor: ConnectionDescriptor) -> str:
    """Full path of a SQLite database file."""
    return os.path.join(descriptor.folder_path or "", descriptor.database_name or "")


def server_connection_string(descriptor: ConnectionDescriptor) -> str:
    """
    Connection string for the server, without selecting a database.

    Raises:
        ConnectionError: For SQLite, which has no server
    """
    kind = descriptor.kind
    if kind == ConnectionKind.FILE:
        raise ConnectionError(describe_for_error(descriptor, server_only=True), engine=descriptor.provider.value)
    if kind == ConnectionKind.TRUSTED:
        return f"Server={descriptor.server_address};Trusted_Connection=Yes;"
    if descriptor.provider == DatabaseProvider.MYSQL:
        return (
            f"server={descriptor.server_address};port={descriptor.port};"
            f"user id={descriptor.user_name};password={descriptor.password or ''}"
        )
    return f"Server={descriptor.server_address};User Id={descriptor.user_name};Password={descriptor.password or ''};"


def database_connection_string(descriptor: ConnectionDescriptor) -> str:
    """Connection string selecting the descriptor's database."""
    kind = descriptor.kind
    if kind == ConnectionKind.FILE:
        return (
            f"Data Source={database_file_path(descriptor)};Version=3;Pooling=true;"
            f"Max Pool Size=100;Password={descriptor.password or ''}"
        )
    if kind == ConnectionKind.TRUSTED:
        return f"Server={descriptor.server_address};Database={descriptor.database_name};Trusted_Connection=Yes;"
    if descriptor.provider == DatabaseProvider.MYSQL:
        return (
            f"server={descriptor.server_address};port={descriptor.port};database={descriptor.database_name};"
            f"user id={descriptor.user_name};password={descriptor.password or ''}"
        )
    return (
        f"Server={descriptor.server_address};Database={descriptor.database_name};"
        f"User Id={descriptor.user_name};Password={descriptor.password or ''};"
    )


def describe_for_error(descriptor: ConnectionDescriptor, server_only: bool = False) -> str:
    """
    Describe the connection target for an error message.

    Never raises: attributes are read with getattr so a half-built
    descriptor still produces a usable message.
    """
    try:
        provider = getattr(descriptor, "provider", None)
        server = getattr(descriptor, "server_address", None) or "(no server)"
        database = getattr(descriptor, "database_name", None) or "(no database)"
        user = getattr(descriptor, "user_name", None) or "(no user)"
        port = getattr(descriptor, "port", None)

        if provider == DatabaseProvider.SQLITE:
            if server_only:
                return "Cannot connect to a SQLite server. SQLite does not use servers"
            return f"Cannot connect to SQLite database file {database_file_path(descriptor)}"

        if provider == DatabaseProvider.MYSQL:
            target = f"MySQL server {server} on port {port}"
        elif provider == DatabaseProvider.SQLSERVER:
            target = f"SQL Server {server}"
        else:
            target = f"server {server}"

        if getattr(descriptor, "trusted", False):
            credentials = "using trusted authentication"
        else:
            credentials = f"as user {user}"

        if server_only:
            return f"Cannot connect to {target} {credentials}"
        return f"Cannot connect to database {database} on {target} {credentials}"
    except Exception:
        return "Cannot connect to the database"
