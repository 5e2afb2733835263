"""Document store contract and its SQLite implementation.

The query engine talks to a store only through ``DocumentStore``:
add_text, get, get_all_ids, delete and search_text. Everything it reads is a
scan over all ids followed by per-id fetches, so concurrent writers are
tolerated and simply show up in whatever snapshot a scan observes.
"""

from __future__ import annotations

import json
import re
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable
from uuid import uuid4

import structlog
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select

from codenav.core.errors import StoreError
from codenav.store.database import Database
from codenav.store.models import DocumentRow

if TYPE_CHECKING:
    from codenav.config.models import StoreConfig

log = structlog.get_logger(__name__)

_SQLITE_SUFFIXES = ("", "-wal", "-shm")


@dataclass(frozen=True, slots=True)
class Document:
    """A stored document as returned by ``get``."""

    id: str
    content: str
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SearchHit:
    """One ranked text search result."""

    id: str
    score: float
    content: str
    metadata: dict[str, str] = field(default_factory=dict)


@runtime_checkable
class DocumentStore(Protocol):
    """ID-keyed document persistence used by the query engine."""

    def add_text(self, content: str, metadata: Mapping[str, str]) -> str: ...

    def get(self, doc_id: str) -> Document | None: ...

    def get_all_ids(self) -> list[str]: ...

    def delete(self, doc_id: str) -> bool: ...

    def search_text(self, query: str, limit: int = 20) -> list[SearchHit]: ...


def _terms(query: str) -> list[str]:
    return [t for t in re.split(r"\s+", query.lower().strip()) if t]


class SqliteDocumentStore:
    """DocumentStore backed by a single SQLite file (WAL mode)."""

    def __init__(self, db_path: Path, config: StoreConfig | None = None) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        if config is None:
            self.db = Database(self.db_path)
        else:
            self.db = Database(
                self.db_path,
                busy_timeout_ms=config.busy_timeout_ms,
                max_retries=config.max_retries,
                retry_base_delay=config.retry_base_delay_sec,
            )
        try:
            self.db.create_all()
        except SQLAlchemyError as e:
            log.error("store_open_failed", db_path=str(self.db_path), error=str(e))
            raise StoreError.write_failed(str(e), db_path=str(self.db_path)) from e

    def __enter__(self) -> SqliteDocumentStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def add_text(self, content: str, metadata: Mapping[str, str]) -> str:
        doc_id = uuid4().hex
        row = DocumentRow(
            id=doc_id,
            type=str(metadata.get("type", "")),
            content=content,
            metadata_json=json.dumps(dict(metadata), sort_keys=True),
            created_at=time.time(),
        )
        try:
            with self.db.immediate_transaction() as session:
                session.add(row)
        except SQLAlchemyError as e:
            log.error("store_add_failed", db_path=str(self.db_path), error=str(e))
            raise StoreError.write_failed(str(e), db_path=str(self.db_path)) from e
        return doc_id

    def get(self, doc_id: str) -> Document | None:
        try:
            with self.db.session() as session:
                row = session.get(DocumentRow, doc_id)
                if row is None:
                    return None
                return Document(id=row.id, content=row.content, metadata=row.get_metadata())
        except (SQLAlchemyError, json.JSONDecodeError) as e:
            log.error("store_get_failed", db_path=str(self.db_path), doc_id=doc_id, error=str(e))
            raise StoreError.read_failed(str(e), db_path=str(self.db_path), doc_id=doc_id) from e

    def get_all_ids(self) -> list[str]:
        try:
            with self.db.session() as session:
                stmt = select(DocumentRow.id).order_by(
                    col(DocumentRow.created_at), col(DocumentRow.id)
                )
                return list(session.exec(stmt).all())
        except SQLAlchemyError as e:
            log.error("store_scan_failed", db_path=str(self.db_path), error=str(e))
            raise StoreError.read_failed(str(e), db_path=str(self.db_path)) from e

    def delete(self, doc_id: str) -> bool:
        try:
            with self.db.immediate_transaction() as session:
                row = session.get(DocumentRow, doc_id)
                if row is None:
                    return False
                session.delete(row)
        except SQLAlchemyError as e:
            log.error("store_delete_failed", db_path=str(self.db_path), doc_id=doc_id, error=str(e))
            raise StoreError.delete_failed(str(e), db_path=str(self.db_path), doc_id=doc_id) from e
        return True

    def search_text(self, query: str, limit: int = 20) -> list[SearchHit]:
        """Rank documents by how often the query terms occur in their text.

        Terms match literally (``%`` and ``_`` are not wildcards). Ties are
        broken by id so results are deterministic.
        """
        terms = _terms(query)
        if not terms or limit < 1:
            return []
        try:
            with self.db.session() as session:
                content = col(DocumentRow.content)
                stmt = select(DocumentRow).where(
                    or_(*(content.icontains(term, autoescape=True) for term in terms))
                )
                rows = list(session.exec(stmt).all())
                hits = []
                for row in rows:
                    lowered = row.content.lower()
                    score = float(sum(lowered.count(term) for term in terms))
                    if not score:
                        continue
                    hits.append(
                        SearchHit(
                            id=row.id,
                            score=score,
                            content=row.content,
                            metadata=row.get_metadata(),
                        )
                    )
        except SQLAlchemyError as e:
            log.error("store_search_failed", db_path=str(self.db_path), error=str(e))
            raise StoreError.read_failed(str(e), db_path=str(self.db_path)) from e

        hits.sort(key=lambda h: (-h.score, h.id))
        return hits[:limit]

    def count(self) -> int:
        """Number of stored documents."""
        return len(self.get_all_ids())

    def close(self) -> None:
        self.db.dispose()

    def destroy(self) -> None:
        """Close the store and remove its database files."""
        self.close()
        remove_store_files(self.db_path)


def remove_store_files(db_path: Path) -> None:
    """Delete a store's SQLite file and its WAL/SHM siblings if present."""
    for suffix in _SQLITE_SUFFIXES:
        path = db_path.with_name(db_path.name + suffix)
        path.unlink(missing_ok=True)
    log.debug("store_destroyed", db_path=str(db_path))
