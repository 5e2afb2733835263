"""Tests for store/document_store.py - the SQLite document store."""

from __future__ import annotations

from pathlib import Path

import pytest

from codenav.config.models import StoreConfig
from codenav.store import DocumentStore, SqliteDocumentStore, remove_store_files


class TestDocumentStoreContract:
    """Basic add/get/list/delete behaviour."""

    def test_given_store_when_checked_then_satisfies_protocol(
        self, store: SqliteDocumentStore
    ) -> None:
        """SqliteDocumentStore implements DocumentStore."""
        # Given / When / Then
        assert isinstance(store, DocumentStore)

    def test_given_added_text_when_fetched_then_content_and_metadata(
        self, store: SqliteDocumentStore
    ) -> None:
        """Documents round-trip with their metadata."""
        # Given
        doc_id = store.add_text("hello world", {"type": "class_definition", "class": "App.A"})

        # When
        doc = store.get(doc_id)

        # Then
        assert doc is not None
        assert doc.id == doc_id
        assert doc.content == "hello world"
        assert doc.metadata == {"type": "class_definition", "class": "App.A"}

    def test_given_unknown_id_when_fetched_then_none(self, store: SqliteDocumentStore) -> None:
        assert store.get("missing") is None

    def test_given_documents_when_listed_then_insertion_order(
        self, store: SqliteDocumentStore
    ) -> None:
        """get_all_ids returns ids in the order documents were added."""
        # Given
        ids = [store.add_text(f"doc {i}", {"type": "x"}) for i in range(3)]

        # When
        listed = store.get_all_ids()

        # Then
        assert listed == ids
        assert store.count() == 3

    def test_given_document_when_deleted_then_true_then_false(
        self, store: SqliteDocumentStore
    ) -> None:
        """Deleting twice reports False the second time."""
        # Given
        doc_id = store.add_text("doomed", {})

        # When
        first = store.delete(doc_id)
        second = store.delete(doc_id)

        # Then
        assert first is True
        assert second is False
        assert store.get(doc_id) is None


class TestSearchText:
    """Term-count ranked text search."""

    def test_given_documents_when_searched_then_ranked_by_term_count(
        self, store: SqliteDocumentStore
    ) -> None:
        """More occurrences rank higher; non-matching documents are excluded."""
        # Given
        once = store.add_text("Method Run calls Save", {})
        twice = store.add_text("Save calls Save", {})
        store.add_text("unrelated", {})

        # When
        hits = store.search_text("save")

        # Then
        assert [h.id for h in hits] == [twice, once]
        assert [h.score for h in hits] == [2.0, 1.0]

    def test_given_limit_when_searched_then_truncated(self, store: SqliteDocumentStore) -> None:
        # Given
        for i in range(5):
            store.add_text(f"match {i}", {})

        # When
        hits = store.search_text("match", limit=2)

        # Then
        assert len(hits) == 2

    @pytest.mark.parametrize(("query", "limit"), [("", 10), ("   ", 10), ("match", 0)])
    def test_given_empty_query_or_limit_when_searched_then_no_hits(
        self, store: SqliteDocumentStore, query: str, limit: int
    ) -> None:
        # Given
        store.add_text("match", {})

        # When / Then
        assert store.search_text(query, limit) == []

    @pytest.mark.parametrize("query", ["a_b", "a%b"])
    def test_given_like_wildcards_when_searched_then_matched_literally(
        self, store: SqliteDocumentStore, query: str
    ) -> None:
        """_ and % in a query are ordinary characters."""
        # Given
        store.add_text("App.Axb", {})
        literal = store.add_text(f"App.{query}", {})

        # When
        hits = store.search_text(query)

        # Then
        assert [h.id for h in hits] == [literal]
        assert all(h.score > 0 for h in hits)


class TestStoreFiles:
    """Store lifecycle on disk."""

    def test_given_nested_path_when_opened_then_parent_created(self, tmp_path: Path) -> None:
        # Given
        db_path = tmp_path / "a" / "b" / "store.db"

        # When
        with SqliteDocumentStore(db_path, StoreConfig(busy_timeout_ms=1000)) as s:
            s.add_text("x", {})

        # Then
        assert db_path.exists()

    def test_given_store_when_destroyed_then_files_removed(self, tmp_path: Path) -> None:
        """destroy removes the database and its WAL/SHM siblings."""
        # Given
        db_path = tmp_path / "store.db"
        s = SqliteDocumentStore(db_path)
        s.add_text("x", {})

        # When
        s.destroy()

        # Then
        assert list(tmp_path.iterdir()) == []

    def test_given_missing_files_when_removed_then_no_error(self, tmp_path: Path) -> None:
        remove_store_files(tmp_path / "never.db")

    def test_given_reopened_store_when_listed_then_documents_persist(
        self, tmp_path: Path
    ) -> None:
        # Given
        db_path = tmp_path / "store.db"
        with SqliteDocumentStore(db_path) as s:
            doc_id = s.add_text("kept", {"type": "x"})

        # When
        with SqliteDocumentStore(db_path) as s:
            ids = s.get_all_ids()

        # Then
        assert ids == [doc_id]
