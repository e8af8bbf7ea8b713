"""
Configuration package.
"""

from .database import (
    close_database_connections,
    get_db_session,
    get_session_factory,
)
from .logging import configure_logging, get_logger
from .settings import Settings, settings

__all__ = [
    "Settings",
    "settings",
    "configure_logging",
    "get_logger",
    "get_session_factory",
    "get_db_session",
    "close_database_connections",
]
