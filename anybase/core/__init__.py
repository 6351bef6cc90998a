"""
Core Components

Settings and logging configuration.
"""

from anybase.core.config import Settings, get_settings
from anybase.core.logging_config import configure_logging

__all__ = ["Settings", "get_settings", "configure_logging"]
