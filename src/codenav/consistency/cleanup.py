"""Stale fact cleanup.

Every stored document is classified exactly once:

- skipped: untyped, unknown type, or metadata that does not parse
- kept: its identity key is in ground truth for its type
- stale: anything else

Stale documents are deleted one at a time. A failed deletion is logged and
counted and never stops the rest of the run. A fact whose key is in ground
truth is never deleted, so a second run against unchanged ground truth finds
nothing stale.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from codenav.facts import Fact, FactType
from codenav.index.scan import iter_documents, parse_document

if TYPE_CHECKING:
    from codenav.store import DocumentStore

log = structlog.get_logger(__name__)


@dataclass
class TypeCleanup:
    """Cleanup counts for one fact type."""

    kept: int = 0
    stale: int = 0
    deleted: int = 0
    failed: int = 0
    stale_items: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "kept": self.kept,
            "stale": self.stale,
            "deleted": self.deleted,
            "failed": self.failed,
            "stale_items": sorted(self.stale_items),
        }


@dataclass
class CleanupReport:
    per_type: dict[FactType, TypeCleanup] = field(default_factory=dict)
    skipped: int = 0
    dry_run: bool = False

    def for_type(self, fact_type: FactType) -> TypeCleanup:
        return self.per_type.setdefault(fact_type, TypeCleanup())

    @property
    def total_kept(self) -> int:
        return sum(t.kept for t in self.per_type.values())

    @property
    def total_stale(self) -> int:
        return sum(t.stale for t in self.per_type.values())

    @property
    def total_deleted(self) -> int:
        return sum(t.deleted for t in self.per_type.values())

    @property
    def total_failed(self) -> int:
        return sum(t.failed for t in self.per_type.values())

    def to_dict(self) -> dict[str, object]:
        return {
            "dry_run": self.dry_run,
            "skipped": self.skipped,
            "kept": self.total_kept,
            "stale": self.total_stale,
            "deleted": self.total_deleted,
            "failed": self.total_failed,
            "per_type": {t.value: c.to_dict() for t, c in self.per_type.items()},
        }


class StaleFactCleaner:
    """Removes stored facts that no longer appear in ground truth."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def cleanup(self, ground_truth: Iterable[Fact], dry_run: bool = False) -> CleanupReport:
        truth: dict[FactType, set[str]] = {}
        for fact in ground_truth:
            truth.setdefault(fact.fact_type, set()).add(fact.key)

        report = CleanupReport(dry_run=dry_run)
        stale_ids: list[tuple[str, FactType, str]] = []

        for doc in iter_documents(self.store):
            fact = parse_document(doc)
            if fact is None:
                report.skipped += 1
                continue
            counts = report.for_type(fact.fact_type)
            if fact.key in truth.get(fact.fact_type, ()):
                counts.kept += 1
            else:
                counts.stale += 1
                counts.stale_items.append(fact.key)
                stale_ids.append((doc.id, fact.fact_type, fact.key))

        if not dry_run:
            for doc_id, fact_type, key in stale_ids:
                self._delete(doc_id, fact_type, key, report.for_type(fact_type))

        log.info(
            "stale_cleanup_completed",
            dry_run=dry_run,
            kept=report.total_kept,
            stale=report.total_stale,
            deleted=report.total_deleted,
            failed=report.total_failed,
            skipped=report.skipped,
        )
        return report

    def _delete(self, doc_id: str, fact_type: FactType, key: str, counts: TypeCleanup) -> None:
        try:
            removed = self.store.delete(doc_id)
        except Exception as e:
            log.warning(
                "stale_fact_delete_failed",
                doc_id=doc_id,
                fact_type=fact_type.value,
                key=key,
                error=str(e),
            )
            counts.failed += 1
            return
        if removed:
            counts.deleted += 1
            log.debug("stale_fact_deleted", doc_id=doc_id, fact_type=fact_type.value, key=key)
        else:
            counts.failed += 1
            log.warning(
                "stale_fact_delete_failed",
                doc_id=doc_id,
                fact_type=fact_type.value,
                key=key,
                error="document not found",
            )
