"""Fact ingestion.

The writer is the only path that adds facts to a store. It never writes an
invalid fact and never writes a second fact with the same (type, identity
key) as one already stored or already seen in the same batch.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from codenav.facts import Fact, FactType, describe_fact, fact_to_metadata, validate_facts
from codenav.index.scan import iter_facts

if TYPE_CHECKING:
    from codenav.store import DocumentStore

log = structlog.get_logger(__name__)


@dataclass
class WriteResult:
    """Outcome of an ingestion batch."""

    written: int = 0
    duplicates: int = 0
    invalid: int = 0
    errors: list[str] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)  # written per fact type


class FactWriter:
    """Validates and writes facts, de-duplicating on identity key."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self._existing: set[tuple[FactType, str]] | None = None

    def _existing_keys(self) -> set[tuple[FactType, str]]:
        if self._existing is None:
            self._existing = {(fact.fact_type, fact.key) for _, fact in iter_facts(self.store)}
        return self._existing

    def write(self, facts: Iterable[Fact]) -> WriteResult:
        """Write already-validated facts."""
        result = WriteResult()
        existing = self._existing_keys()
        for fact in facts:
            identity = (fact.fact_type, fact.key)
            if identity in existing:
                result.duplicates += 1
                continue
            self.store.add_text(describe_fact(fact), fact_to_metadata(fact))
            existing.add(identity)
            result.written += 1
            result.counts[fact.fact_type.value] = result.counts.get(fact.fact_type.value, 0) + 1

        log.debug("facts_written", written=result.written, duplicates=result.duplicates)
        return result

    def ingest(self, raw_facts: Iterable[Mapping[str, Any]]) -> WriteResult:
        """Validate raw facts, reject invalid ones with every error, write the rest."""
        batch = validate_facts(raw_facts)
        result = self.write(batch.facts)
        result.invalid = batch.invalid_count
        result.errors = batch.error_messages()
        if batch.invalid_count:
            log.warning("invalid_facts_rejected", count=batch.invalid_count)
        return result
