"""Shared fixtures for CLI tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from cli_support import invoke
from factories import sample_project, write_jsonl


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Run from an empty directory with no global config."""
    monkeypatch.chdir(tmp_path)
    with patch("codenav.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "no-global.yaml"):
        yield tmp_path


@pytest.fixture
def facts_file(workspace: Path) -> Path:
    return write_jsonl(workspace / "project" / "facts.jsonl", sample_project())


@pytest.fixture
def store_path(workspace: Path, facts_file: Path) -> Path:
    """Store populated through the ingest command."""
    path = workspace / "store.db"
    result = invoke("ingest", str(facts_file), "--store", str(path))
    assert result.exit_code == 0, result.output
    return path
