"""Config module exports."""

from codenav.config.loader import load_config
from codenav.config.models import (
    CodeNavConfig,
    IndexingConfig,
    LimitsConfig,
    LoggingConfig,
    StoreConfig,
)

__all__ = [
    "load_config",
    "CodeNavConfig",
    "IndexingConfig",
    "LimitsConfig",
    "LoggingConfig",
    "StoreConfig",
]
