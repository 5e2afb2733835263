"""Fact ingestion, call graph traversal, and enumeration queries."""

from codenav.index.enumeration import EntryPoint, EnumerationService, Page
from codenav.index.graph import (
    CallGraph,
    CallSite,
    ClassReference,
    ClassReferences,
    TraversalEntry,
    TraversalResult,
)
from codenav.index.writer import FactWriter, WriteResult

__all__ = [
    "CallGraph",
    "CallSite",
    "ClassReference",
    "ClassReferences",
    "EntryPoint",
    "EnumerationService",
    "FactWriter",
    "Page",
    "TraversalEntry",
    "TraversalResult",
    "WriteResult",
]
