"""
Adapter Factory for AnyBase

Resolves the adapter class for a descriptor's provider through a registry,
so tests and applications can register replacements.

Usage:
    from anybase.adapters import get_adapter

    adapter = get_adapter(sqlite_connection("/data", "orders.db"))
    connection = adapter.open_connection()
"""

import logging
from typing import Dict, List, Optional, Type, Union

from anybase.adapters.base import BaseAdapter
from anybase.connection.descriptor import ConnectionDescriptor, DatabaseProvider
from anybase.core.config import Settings
from anybase.shared.exceptions import ConnectionError

logger = logging.getLogger(__name__)


# =============================================================================
# ADAPTER REGISTRY
# =============================================================================

# Map of provider -> adapter class
_ADAPTER_REGISTRY: Dict[DatabaseProvider, Type[BaseAdapter]] = {}


def _provider(provider: Union[str, DatabaseProvider]) -> DatabaseProvider:
    if isinstance(provider, DatabaseProvider):
        return provider
    return DatabaseProvider(str(provider).lower())


def register_adapter(provider: Union[str, DatabaseProvider], adapter_class: Type[BaseAdapter]) -> None:
    """
    Register an adapter class for a provider.

    Args:
        provider: Provider identifier (e.g., "sqlite", "mysql")
        adapter_class: Adapter class to use for this provider
    """
    _ADAPTER_REGISTRY[_provider(provider)] = adapter_class
    logger.debug(f"Registered adapter for provider: {provider}")


def list_adapters() -> List[str]:
    """Get list of registered providers."""
    return [p.value for p in _ADAPTER_REGISTRY]


def is_provider_supported(provider: Union[str, DatabaseProvider]) -> bool:
    """Check if a provider has a registered adapter."""
    try:
        return _provider(provider) in _ADAPTER_REGISTRY
    except ValueError:
        return False


# =============================================================================
# ADAPTER FACTORY
# =============================================================================

def get_adapter(descriptor: ConnectionDescriptor, settings: Optional[Settings] = None) -> BaseAdapter:
    """
    Get an adapter instance for the descriptor's provider.

    Raises:
        ConnectionError: If the provider has no adapter or its driver is missing
    """
    adapter_class = _ADAPTER_REGISTRY.get(descriptor.provider)
    if adapter_class is None:
        available = ", ".join(list_adapters())
        raise ConnectionError(
            f"Unsupported provider: {descriptor.provider}. Available: {available}",
            engine=str(descriptor.provider)
        )
    return adapter_class(descriptor, settings)


# =============================================================================
# AUTO-REGISTER BUILT-IN ADAPTERS
# =============================================================================

def _register_builtin_adapters():
    """Register all built-in adapters."""

    # SQLite (built-in, no dependencies)
    from anybase.adapters.sqlite_adapter import SQLiteAdapter
    register_adapter(DatabaseProvider.SQLITE, SQLiteAdapter)

    # MySQL / MariaDB
    from anybase.adapters.mysql_adapter import MySQLAdapter
    register_adapter(DatabaseProvider.MYSQL, MySQLAdapter)

    # SQL Server / Azure SQL
    from anybase.adapters.sqlserver_adapter import SQLServerAdapter
    register_adapter(DatabaseProvider.SQLSERVER, SQLServerAdapter)


_register_builtin_adapters()
