"""Accuracy measurement and stale fact cleanup."""

from codenav.consistency.cleanup import CleanupReport, StaleFactCleaner, TypeCleanup
from codenav.consistency.diff import (
    AccuracyMetrics,
    AccuracyReport,
    StoredFacts,
    compare,
    compare_by_type,
    load_stored_facts,
)

__all__ = [
    "AccuracyMetrics",
    "AccuracyReport",
    "CleanupReport",
    "StaleFactCleaner",
    "StoredFacts",
    "TypeCleanup",
    "compare",
    "compare_by_type",
    "load_stored_facts",
]
