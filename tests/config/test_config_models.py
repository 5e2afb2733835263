"""Tests for config/models.py module.

Covers:
- LogOutputConfig destination validation
- StoreConfig root path expansion and validators
- LimitsConfig bounds
- IndexingConfig
- CodeNavConfig root model
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from codenav.config.constants import LIST_MAX_LIMIT, SEARCH_MAX_LIMIT, TRAVERSAL_MAX_DEPTH
from codenav.config.models import (
    CodeNavConfig,
    IndexingConfig,
    LimitsConfig,
    LogOutputConfig,
    StoreConfig,
)


class TestLogOutputConfig:
    """Tests for LogOutputConfig model."""

    def test_defaults(self) -> None:
        config = LogOutputConfig()
        assert config.format == "console"
        assert config.destination == "stderr"
        assert config.level is None

    def test_absolute_file_destination(self, tmp_path: Path) -> None:
        """Absolute file paths are accepted."""
        config = LogOutputConfig(destination=str(tmp_path / "app.log"))
        assert config.destination == str(tmp_path / "app.log")

    def test_relative_file_destination_rejected(self) -> None:
        """Relative file paths are rejected."""
        with pytest.raises(ValidationError, match="absolute"):
            LogOutputConfig(destination="logs/app.log")


class TestStoreConfig:
    """Tests for StoreConfig model."""

    def test_root_path_expands_user(self) -> None:
        config = StoreConfig(root="~/stores")
        assert config.root_path == Path("~/stores").expanduser()

    def test_negative_retries_rejected(self) -> None:
        with pytest.raises(ValidationError):
            StoreConfig(max_retries=-1)


class TestLimitsConfig:
    """Tests for LimitsConfig bounds."""

    def test_defaults_within_hard_maximums(self) -> None:
        config = LimitsConfig()
        assert config.list_max <= LIST_MAX_LIMIT
        assert config.depth_max <= TRAVERSAL_MAX_DEPTH
        assert config.search_default <= SEARCH_MAX_LIMIT

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"list_default": 0},
            {"list_default": 50, "list_max": 10},
            {"list_max": LIST_MAX_LIMIT + 1},
            {"depth_default": 0},
            {"depth_max": TRAVERSAL_MAX_DEPTH + 1},
            {"search_default": SEARCH_MAX_LIMIT + 1},
        ],
    )
    def test_out_of_bounds_rejected(self, kwargs: dict[str, int]) -> None:
        with pytest.raises(ValidationError):
            LimitsConfig(**kwargs)


class TestIndexingConfig:
    def test_zero_workers_rejected(self) -> None:
        with pytest.raises(ValidationError):
            IndexingConfig(max_workers=0)


class TestCodeNavConfig:
    def test_all_sections_present(self) -> None:
        config = CodeNavConfig()
        assert config.logging.level == "INFO"
        assert config.store.busy_timeout_ms == 30000
        assert config.limits.depth_default == 1
        assert config.indexing.max_workers == 2
