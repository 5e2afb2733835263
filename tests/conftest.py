"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import logging
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local codenav package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Test helpers (factories.py) live next to this file
_tests_dir = Path(__file__).parent
if str(_tests_dir) not in sys.path:
    sys.path.insert(0, str(_tests_dir))

# Force reimport of codenav modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("codenav"):
        del sys.modules[module_name]

from codenav.store import SqliteDocumentStore  # noqa: E402


@pytest.fixture
def store(tmp_path: Path) -> Generator[SqliteDocumentStore, None, None]:
    """Empty SQLite document store in a temp directory."""
    s = SqliteDocumentStore(tmp_path / "store.db")
    yield s
    s.close()


@pytest.fixture(autouse=True)
def _reset_root_logging() -> Generator[None, None, None]:
    """Drop handlers installed by configure_logging (they may hold captured streams)."""
    yield
    logging.getLogger().handlers.clear()
