"""Shared fixtures for index tests."""

from __future__ import annotations

import pytest

from codenav.index import CallGraph, FactWriter
from codenav.store import SqliteDocumentStore
from factories import sample_project


@pytest.fixture
def seeded_store(store: SqliteDocumentStore) -> SqliteDocumentStore:
    """Store holding the sample project's facts."""
    result = FactWriter(store).ingest(sample_project())
    assert result.invalid == 0, result.errors
    return store


@pytest.fixture
def graph(seeded_store: SqliteDocumentStore) -> CallGraph:
    return CallGraph.from_store(seeded_store)
