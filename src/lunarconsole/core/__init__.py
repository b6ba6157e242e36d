"""Core console utilities.

This module exports core utilities for use throughout the package.
"""

from lunarconsole.core.config import Settings, get_settings
from lunarconsole.core.exceptions import (
    BackendError,
    ConsoleError,
    NetworkFailure,
    SchemaValidationError,
    ServerRejected,
)
from lunarconsole.core.logging import LoggingContext, configure_logging, get_logger

__all__ = [
    "BackendError",
    "ConsoleError",
    "LoggingContext",
    "NetworkFailure",
    "SchemaValidationError",
    "ServerRejected",
    "Settings",
    "configure_logging",
    "get_logger",
    "get_settings",
]
