"""Core module exports."""

from codenav.core.errors import (
    CodeNavError,
    ConfigError,
    ErrorCode,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    StoreError,
)
from codenav.core.logging import configure_logging, get_logger, project_context
from codenav.core.progress import pluralize, spinner, status

__all__ = [
    # Errors
    "CodeNavError",
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "InvalidArgumentError",
    "NotFoundError",
    "StoreError",
    # Logging
    "configure_logging",
    "get_logger",
    "project_context",
    # Console
    "pluralize",
    "spinner",
    "status",
]
