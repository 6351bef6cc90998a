"""
Configuration Management

Centralized configuration using Pydantic Settings. Every value can be set
through an ``ANYBASE_`` prefixed environment variable or a ``.env`` file:

    ANYBASE_BATCH_SIZE=500
    ANYBASE_PROVIDER=sqlite
    ANYBASE_FOLDER=/var/lib/app
    ANYBASE_DATABASE=orders.db
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings."""

    model_config = SettingsConfigDict(
        env_prefix="ANYBASE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Execution
    batch_size: int = Field(default=10000, gt=0)
    connect_timeout: int = Field(default=30, ge=0)
    lock_directory: Optional[str] = None

    # Schema
    default_primary_key_name: str = "id"
    template_catalog_path: Optional[str] = None

    # Credentials
    default_user_name: str = "root"

    # SQL Server
    sqlserver_use_pyodbc: bool = False
    sqlserver_odbc_driver: Optional[str] = None
    sqlserver_data_directory: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    # Connection target (used by connection_from_settings and the CLI)
    provider: Optional[str] = None
    server: Optional[str] = None
    port: Optional[int] = None
    user: Optional[str] = None
    password: Optional[str] = None
    database: Optional[str] = None
    folder: Optional[str] = None
    mutex_key: Optional[str] = None
    trusted: bool = False


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, read from the environment once."""
    return Settings()
