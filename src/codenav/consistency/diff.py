"""Set-based accuracy between ground truth and stored facts.

Two facts are the same iff their identity keys are equal. Per-type metrics
compare key sets; the overall figure sums correct/stored/ground-truth counts
across types before recomputing precision, recall and F1.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from codenav.facts import Fact, FactType, identity_key
from codenav.index.scan import iter_documents, parse_document

if TYPE_CHECKING:
    from codenav.store import DocumentStore

log = structlog.get_logger(__name__)


def _ratio(numerator: int, denominator: int) -> float:
    return numerator / denominator if denominator else 0.0


def _f1(precision: float, recall: float) -> float:
    total = precision + recall
    return 2 * precision * recall / total if total else 0.0


@dataclass
class AccuracyMetrics:
    correct: int = 0
    ground_truth_count: int = 0
    stored_count: int = 0
    missing_items: list[str] = field(default_factory=list)
    extra_items: list[str] = field(default_factory=list)

    @property
    def missing(self) -> int:
        return len(self.missing_items)

    @property
    def extra(self) -> int:
        return len(self.extra_items)

    @property
    def precision(self) -> float:
        return _ratio(self.correct, self.stored_count)

    @property
    def recall(self) -> float:
        return _ratio(self.correct, self.ground_truth_count)

    @property
    def f1(self) -> float:
        return _f1(self.precision, self.recall)

    def to_dict(self) -> dict[str, object]:
        return {
            "correct": self.correct,
            "missing": self.missing,
            "extra": self.extra,
            "ground_truth_count": self.ground_truth_count,
            "stored_count": self.stored_count,
            "precision": self.precision,
            "recall": self.recall,
            "f1": self.f1,
            "missing_items": list(self.missing_items),
            "extra_items": list(self.extra_items),
        }


@dataclass
class AccuracyReport:
    per_type: dict[FactType, AccuracyMetrics] = field(default_factory=dict)

    @property
    def overall(self) -> AccuracyMetrics:
        """Aggregate counts across types. Items are prefixed with their fact type."""
        return AccuracyMetrics(
            correct=sum(m.correct for m in self.per_type.values()),
            ground_truth_count=sum(m.ground_truth_count for m in self.per_type.values()),
            stored_count=sum(m.stored_count for m in self.per_type.values()),
            missing_items=sorted(
                f"{t.value}:{k}" for t, m in self.per_type.items() for k in m.missing_items
            ),
            extra_items=sorted(
                f"{t.value}:{k}" for t, m in self.per_type.items() for k in m.extra_items
            ),
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "per_type": {t.value: m.to_dict() for t, m in self.per_type.items()},
            "overall": self.overall.to_dict(),
        }


@dataclass
class StoredFacts:
    """Parsed facts from a store scan plus the number of documents skipped."""

    facts: list[Fact] = field(default_factory=list)
    skipped: int = 0


def compare(
    ground_truth: Iterable[Fact],
    stored: Iterable[Fact],
    key: Callable[[Fact], str] = identity_key,
) -> AccuracyMetrics:
    """Compare two fact collections by identity key."""
    truth_keys = {key(f) for f in ground_truth}
    stored_keys = {key(f) for f in stored}
    return AccuracyMetrics(
        correct=len(truth_keys & stored_keys),
        ground_truth_count=len(truth_keys),
        stored_count=len(stored_keys),
        missing_items=sorted(truth_keys - stored_keys),
        extra_items=sorted(stored_keys - truth_keys),
    )


def compare_by_type(ground_truth: Iterable[Fact], stored: Iterable[Fact]) -> AccuracyReport:
    """One comparison per fact type present on either side."""
    truth_by_type: dict[FactType, list[Fact]] = {}
    stored_by_type: dict[FactType, list[Fact]] = {}
    for fact in ground_truth:
        truth_by_type.setdefault(fact.fact_type, []).append(fact)
    for fact in stored:
        stored_by_type.setdefault(fact.fact_type, []).append(fact)

    report = AccuracyReport()
    for fact_type in FactType:
        if fact_type in truth_by_type or fact_type in stored_by_type:
            report.per_type[fact_type] = compare(
                truth_by_type.get(fact_type, []), stored_by_type.get(fact_type, [])
            )
    return report


def load_stored_facts(store: DocumentStore) -> StoredFacts:
    result = StoredFacts()
    for doc in iter_documents(store):
        fact = parse_document(doc)
        if fact is None:
            result.skipped += 1
        else:
            result.facts.append(fact)
    log.debug("stored_facts_loaded", facts=len(result.facts), skipped=result.skipped)
    return result
