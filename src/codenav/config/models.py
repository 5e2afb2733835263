"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (CODENAV__SECTION__KEY)
3. Repo YAML (.codenav/config.yaml)
4. Global YAML (~/.config/codenav/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    CODENAV__<SECTION>__<KEY>=<VALUE>

Examples:
    CODENAV__LOGGING__LEVEL=DEBUG
    CODENAV__STORE__ROOT=/var/lib/codenav
    CODENAV__LIMITS__LIST_DEFAULT=50
    CODENAV__INDEXING__MAX_WORKERS=4
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from codenav.config.constants import LIST_MAX_LIMIT, SEARCH_MAX_LIMIT, TRAVERSAL_MAX_DEPTH

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        CODENAV__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every store scan.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class StoreConfig(BaseModel):
    """Document store configuration.

    Env vars:
        CODENAV__STORE__ROOT: Directory holding one store per project
        CODENAV__STORE__BUSY_TIMEOUT_MS: SQLite busy timeout
        CODENAV__STORE__MAX_RETRIES: Max retry attempts for locked DB
    """

    root: str = Field(
        default="~/.local/share/codenav/stores",
        description="Directory holding one store directory per project id.",
    )
    busy_timeout_ms: int = Field(
        default=30000,
        description="SQLite busy timeout (ms). How long to wait for locks.",
    )
    max_retries: int = Field(
        default=3,
        description="Max retry attempts for locked database errors.",
    )
    retry_base_delay_sec: float = Field(
        default=0.1,
        description="Base delay between retries (exponential backoff).",
    )

    @property
    def root_path(self) -> Path:
        return Path(self.root).expanduser()

    @field_validator("busy_timeout_ms", "max_retries")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Must be >= 0, got {v}")
        return v


class LimitsConfig(BaseModel):
    """Pagination and traversal defaults.

    These are DEFAULT values. See constants.py for hard maximums.

    Env vars:
        CODENAV__LIMITS__LIST_DEFAULT: Default page size for listings
        CODENAV__LIMITS__DEPTH_DEFAULT: Default traversal depth
    """

    list_default: int = Field(default=100, description="Default page size for listings.")
    list_max: int = Field(default=LIST_MAX_LIMIT, description="Largest page size accepted.")
    depth_default: int = Field(default=1, description="Default caller/callee depth.")
    depth_max: int = Field(default=10, description="Deepest caller/callee traversal accepted.")
    search_default: int = Field(default=20, description="Default text search results.")

    @model_validator(mode="after")
    def validate_bounds(self) -> "LimitsConfig":
        if not 1 <= self.list_default <= self.list_max <= LIST_MAX_LIMIT:
            raise ValueError(
                f"Require 1 <= list_default <= list_max <= {LIST_MAX_LIMIT}, "
                f"got {self.list_default}/{self.list_max}"
            )
        if not 1 <= self.depth_default <= self.depth_max <= TRAVERSAL_MAX_DEPTH:
            raise ValueError(
                f"Require 1 <= depth_default <= depth_max <= {TRAVERSAL_MAX_DEPTH}, "
                f"got {self.depth_default}/{self.depth_max}"
            )
        if not 1 <= self.search_default <= SEARCH_MAX_LIMIT:
            raise ValueError(f"search_default must be 1-{SEARCH_MAX_LIMIT}")
        return self


class IndexingConfig(BaseModel):
    """Background indexing configuration.

    Env vars:
        CODENAV__INDEXING__MAX_WORKERS: Projects indexed in parallel
        CODENAV__INDEXING__RECORD_EXTERNAL_CALLS: Keep calls into external code
        CODENAV__INDEXING__ATTRIBUTE_INITIALIZER_CALLS: Keep attribute/initializer calls
    """

    max_workers: int = Field(
        default=2,
        description="Projects indexed in parallel. Each project uses its own store file.",
    )
    record_external_calls: bool = Field(
        default=True,
        description="Record calls whose callee lives outside the indexed project.",
    )
    attribute_initializer_calls: bool = Field(
        default=False,
        description="Record calls made from attribute arguments and field initializers. "
        "Changing this shrinks or grows ground truth; run cleanup afterwards.",
    )

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_workers must be >= 1, got {v}")
        return v


class CodeNavConfig(BaseModel):
    """Root configuration for codenav.

    All settings can be configured via:
    1. Environment variables: CODENAV__SECTION__KEY
    2. YAML config files (repo or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    indexing: IndexingConfig = Field(default_factory=IndexingConfig)
