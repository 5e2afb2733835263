"""Query surface by project id.

Navigator resolves a project through the registry, opens its store for the
duration of one call, runs the matching service, and closes the store. No
state is cached between calls.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

import structlog

from codenav.config.constants import SEARCH_MAX_LIMIT
from codenav.config.models import CodeNavConfig
from codenav.consistency import (
    AccuracyReport,
    CleanupReport,
    StaleFactCleaner,
    compare_by_type,
    load_stored_facts,
)
from codenav.core.errors import InvalidArgumentError
from codenav.core.logging import project_context
from codenav.extraction import ExtractionOptions, FactExtractor
from codenav.facts import ClassDefinition, Fact, MethodDefinition, validate_facts
from codenav.index import (
    CallGraph,
    ClassReferences,
    EntryPoint,
    EnumerationService,
    Page,
    TraversalResult,
)
from codenav.projects import ProjectInfo, ProjectRegistry, ProjectStatus
from codenav.store import SearchHit, SqliteDocumentStore

log = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class GroundTruth:
    """Validated facts from a fresh extraction, plus what went wrong producing them."""

    path: Path
    facts: list[Fact] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    files_processed: int = 0
    invalid_count: int = 0

    @property
    def problems(self) -> list[str]:
        problems = list(self.errors)
        if not self.files_processed and not problems:
            problems.append("no fact files were read")
        if self.invalid_count:
            problems.append(f"{self.invalid_count} invalid fact(s) dropped")
        return problems

    @property
    def complete(self) -> bool:
        """Every fact was read and valid, so absence from ``facts`` means absent."""
        return not self.problems

    def require_complete(self) -> None:
        if not self.complete:
            raise InvalidArgumentError.incomplete_ground_truth(str(self.path), self.problems)


def extract_ground_truth(
    extractor: FactExtractor, path: Path, options: ExtractionOptions
) -> GroundTruth:
    """Fresh extraction, validated. Invalid facts are dropped and logged."""
    extraction = extractor.extract(path, options)
    batch = validate_facts(extraction.facts)
    if batch.invalid_count:
        log.warning(
            "ground_truth_invalid_facts_dropped",
            path=str(path),
            count=batch.invalid_count,
            first_error=batch.error_messages()[0],
        )
    if extraction.errors:
        log.warning("ground_truth_extraction_errors", path=str(path), count=len(extraction.errors))
    return GroundTruth(
        path=path,
        facts=batch.facts,
        errors=list(extraction.errors),
        files_processed=extraction.files_processed,
        invalid_count=batch.invalid_count,
    )


def check_search_limit(limit: int) -> None:
    if not 1 <= limit <= SEARCH_MAX_LIMIT:
        raise InvalidArgumentError.out_of_range(
            "limit", limit, f"must be between 1 and {SEARCH_MAX_LIMIT}"
        )


class Navigator:
    """Code navigation queries over registered projects."""

    def __init__(self, registry: ProjectRegistry, config: CodeNavConfig | None = None) -> None:
        self.registry = registry
        self.config = config or registry.config

    @contextmanager
    def _store(self, project_id: str) -> Iterator[SqliteDocumentStore]:
        store = self.registry.open_store(project_id)
        try:
            with project_context(project_id):
                yield store
        finally:
            store.close()

    def _with_store(self, project_id: str, fn: Callable[[SqliteDocumentStore], T]) -> T:
        with self._store(project_id) as store:
            return fn(store)

    def _enumeration(self, store: SqliteDocumentStore) -> EnumerationService:
        return EnumerationService(store, limit_max=self.config.limits.list_max)

    def _options(self, options: ExtractionOptions | None) -> ExtractionOptions:
        return options or ExtractionOptions.from_config(self.config.indexing)

    # =========================================================================
    # Projects
    # =========================================================================

    def index_project(
        self, path: str | Path, name: str | None = None, options: ExtractionOptions | None = None
    ) -> str:
        return self.registry.index_project(path, name, self._options(options))

    def get_status(self, project_id: str) -> ProjectStatus:
        return self.registry.get_status(project_id)

    def list_projects(self) -> list[ProjectInfo]:
        return self.registry.list_projects()

    def delete_project(self, project_id: str) -> bool:
        return self.registry.delete_project(project_id)

    # =========================================================================
    # Enumeration
    # =========================================================================

    def list_classes(
        self,
        project_id: str,
        namespace: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> Page[ClassDefinition]:
        page_size = self.config.limits.list_default if limit is None else limit
        return self._with_store(
            project_id,
            lambda s: self._enumeration(s).list_classes(namespace, page_size, offset),
        )

    def list_methods(
        self,
        project_id: str,
        class_name: str | None = None,
        namespace: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> Page[MethodDefinition]:
        page_size = self.config.limits.list_default if limit is None else limit
        return self._with_store(
            project_id,
            lambda s: self._enumeration(s).list_methods(class_name, namespace, page_size, offset),
        )

    def list_entry_points(self, project_id: str, entry_type: str | None = None) -> list[EntryPoint]:
        return self._with_store(
            project_id, lambda s: self._enumeration(s).list_entry_points(entry_type)
        )

    def get_method(self, project_id: str, method_fqn: str) -> MethodDefinition:
        return self._with_store(project_id, lambda s: self._enumeration(s).get_method(method_fqn))

    def get_class(self, project_id: str, class_fqn: str) -> ClassDefinition:
        return self._with_store(project_id, lambda s: self._enumeration(s).get_class(class_fqn))

    def get_class_methods(self, project_id: str, class_fqn: str) -> list[MethodDefinition]:
        return self._with_store(
            project_id, lambda s: self._enumeration(s).get_class_methods(class_fqn)
        )

    # =========================================================================
    # Call graph
    # =========================================================================

    def get_callers(
        self,
        project_id: str,
        method_fqn: str,
        depth: int | None = None,
        include_self: bool = False,
    ) -> TraversalResult:
        levels = self.config.limits.depth_default if depth is None else depth
        return self._with_store(
            project_id,
            lambda s: CallGraph.from_store(s).get_callers(
                method_fqn, levels, include_self, depth_limit=self.config.limits.depth_max
            ),
        )

    def get_callees(
        self,
        project_id: str,
        method_fqn: str,
        depth: int | None = None,
        include_self: bool = False,
    ) -> TraversalResult:
        levels = self.config.limits.depth_default if depth is None else depth
        return self._with_store(
            project_id,
            lambda s: CallGraph.from_store(s).get_callees(
                method_fqn, levels, include_self, depth_limit=self.config.limits.depth_max
            ),
        )

    def get_class_references(
        self, project_id: str, class_fqn: str, relationship_type: str | None = None
    ) -> ClassReferences:
        return self._with_store(
            project_id,
            lambda s: CallGraph.from_store(s).get_class_references(class_fqn, relationship_type),
        )

    # =========================================================================
    # Consistency
    # =========================================================================

    def _ground_truth(self, project_id: str, options: ExtractionOptions | None) -> GroundTruth:
        path = self.registry.get_project(project_id).project_path
        return extract_ground_truth(self.registry.extractor, path, self._options(options))

    def compare_against_ground_truth(
        self, project_id: str, options: ExtractionOptions | None = None
    ) -> AccuracyReport:
        ground_truth = self._ground_truth(project_id, options)
        stored = self._with_store(project_id, load_stored_facts)
        report = compare_by_type(ground_truth.facts, stored.facts)
        overall = report.overall
        log.info(
            "accuracy_computed",
            project_id=project_id,
            precision=round(overall.precision, 4),
            recall=round(overall.recall, 4),
            f1=round(overall.f1, 4),
            skipped=stored.skipped,
        )
        return report

    def cleanup_stale(
        self,
        project_id: str,
        options: ExtractionOptions | None = None,
        dry_run: bool = False,
    ) -> CleanupReport:
        """Delete stored facts absent from a fresh extraction.

        Raises InvalidArgumentError when the extraction reported errors, read no
        fact files, or produced invalid facts. A partial ground truth would make
        live facts look stale.
        """
        ground_truth = self._ground_truth(project_id, options)
        ground_truth.require_complete()
        return self._with_store(
            project_id, lambda s: StaleFactCleaner(s).cleanup(ground_truth.facts, dry_run=dry_run)
        )

    # =========================================================================
    # Search
    # =========================================================================

    def search_text(self, project_id: str, query: str, limit: int | None = None) -> list[SearchHit]:
        count = self.config.limits.search_default if limit is None else limit
        check_search_limit(count)
        return self._with_store(project_id, lambda s: s.search_text(query, count))
