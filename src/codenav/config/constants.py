"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
For configurable values, see models.py (LimitsConfig, StoreConfig, etc.).
"""

# =============================================================================
# Query Maximums
# =============================================================================
# Hard caps for API stability. Users can configure defaults below these,
# but cannot exceed them.

LIST_MAX_LIMIT = 1000
"""Maximum page size for class/method listings."""

TRAVERSAL_MAX_DEPTH = 50
"""Maximum call graph traversal depth."""

SEARCH_MAX_LIMIT = 100
"""Maximum results for store text search."""

# =============================================================================
# Store Layout
# =============================================================================

STORE_FILENAME = "store.db"
"""SQLite file name inside each project's store directory."""

PROJECT_ID_LENGTH = 16
"""Hex digits of the SHA-256 path digest used as project id."""

# =============================================================================
# Extraction Front End
# =============================================================================

FACTS_FILENAME = "facts.jsonl"
"""Default fact file emitted by the extraction front end."""

FACTS_SUFFIX = ".facts.jsonl"
"""Suffix of additional per-unit fact files inside a project directory."""
