"""Snapshot scans over a document store.

Every read path lists all ids and then fetches documents one at a time. A
document deleted between the two steps is skipped. Documents whose metadata
does not parse into a known fact are skipped and counted by callers that care.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

import structlog

from codenav.facts import Fact, FactType, fact_from_metadata

if TYPE_CHECKING:
    from codenav.store import Document, DocumentStore

log = structlog.get_logger(__name__)


def iter_documents(store: DocumentStore) -> Iterator[Document]:
    for doc_id in store.get_all_ids():
        doc = store.get(doc_id)
        if doc is not None:
            yield doc


def parse_document(doc: Document) -> Fact | None:
    """Typed fact for a stored document, or None when untyped or unparseable."""
    if not doc.metadata.get("type"):
        return None
    return fact_from_metadata(doc.metadata)


def iter_facts(
    store: DocumentStore, types: frozenset[FactType] | None = None
) -> Iterator[tuple[str, Fact]]:
    """Yield (doc_id, fact) for every parseable document, optionally of selected types."""
    skipped = 0
    for doc in iter_documents(store):
        if types is not None and doc.metadata.get("type") not in types:
            continue
        fact = parse_document(doc)
        if fact is None:
            skipped += 1
            continue
        yield doc.id, fact
    if skipped:
        log.debug("unparseable_documents_skipped", count=skipped)
