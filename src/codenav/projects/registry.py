"""Project registry with background indexing.

Each project gets its own store under ``<store root>/<project id>/``. Indexing
runs on a thread pool; the registry lock only guards inserting and removing
entries (a new entry is published together with its submitted task), and
each entry carries its own lock for status updates, so projects never
serialize behind one another.

``delete_project`` blocks until the project's indexing task has finished.
That wait is unbounded and is the one blocking call in the registry.
"""

from __future__ import annotations

import concurrent.futures
import dataclasses
import hashlib
import re
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import structlog

from codenav.config.constants import PROJECT_ID_LENGTH, STORE_FILENAME
from codenav.config.models import CodeNavConfig
from codenav.core.errors import InvalidArgumentError, NotFoundError
from codenav.core.logging import project_context
from codenav.extraction import ExtractionOptions, FactExtractor, JsonLinesFactExtractor
from codenav.index.writer import FactWriter
from codenav.projects.models import IndexingState, ProjectInfo, ProjectStatus, check_transition
from codenav.store import SqliteDocumentStore, remove_store_files

logger = structlog.get_logger()

_DRIVE_PATH = re.compile(r"^[A-Za-z]:/")


def normalize_project_path(path: str | Path) -> str:
    """Case- and slash-normalised absolute form of a project path.

    Backslashes become ``/``. A Windows drive path (``C:/...``) is already
    absolute; anything else is made absolute against the working directory.
    Repeated and trailing slashes are collapsed and the result is lower-cased.
    """
    text = str(path).strip().replace("\\", "/")
    if not _DRIVE_PATH.match(text):
        text = Path(text).expanduser().absolute().as_posix()
    text = re.sub(r"/{2,}", "/", text)
    if len(text) > 1 and not re.fullmatch(r"[A-Za-z]:/", text):
        text = text.rstrip("/")
    return text.lower()


def project_id_for(path: str | Path) -> str:
    """Deterministic project id: leading hex digits of SHA-256 of the normalised path."""
    digest = hashlib.sha256(normalize_project_path(path).encode("utf-8")).hexdigest()
    return digest[:PROJECT_ID_LENGTH]


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass
class _ProjectEntry:
    info: ProjectInfo
    status: ProjectStatus
    lock: threading.Lock = field(default_factory=threading.Lock)
    future: Future[None] | None = None


class ProjectRegistry:
    """Tracks projects, their stores, and their indexing lifecycle."""

    def __init__(
        self,
        config: CodeNavConfig | None = None,
        extractor: FactExtractor | None = None,
        store_root: Path | None = None,
    ) -> None:
        self.config = config or CodeNavConfig()
        self.extractor: FactExtractor = extractor or JsonLinesFactExtractor()
        self.store_root = store_root or self.config.store.root_path
        self._entries: dict[str, _ProjectEntry] = {}
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.indexing.max_workers,
            thread_name_prefix="codenav-indexer",
        )

    def __enter__(self) -> ProjectRegistry:
        return self

    def __exit__(self, *exc: object) -> None:
        self.shutdown()

    # =========================================================================
    # Lookup
    # =========================================================================

    def _entry(self, project_id: str) -> _ProjectEntry:
        pid = (project_id or "").strip()
        if not pid:
            raise InvalidArgumentError.required("project_id")
        with self._lock:
            entry = self._entries.get(pid)
        if entry is None:
            raise NotFoundError.project(pid)
        return entry

    def get_status(self, project_id: str) -> ProjectStatus:
        """Snapshot of a project's status; later updates do not affect it."""
        entry = self._entry(project_id)
        with entry.lock:
            return dataclasses.replace(entry.status, errors=list(entry.status.errors))

    def get_project(self, project_id: str) -> ProjectInfo:
        entry = self._entry(project_id)
        with entry.lock:
            return dataclasses.replace(entry.info, fact_counts=dict(entry.info.fact_counts))

    def list_projects(self) -> list[ProjectInfo]:
        with self._lock:
            ids = list(self._entries)
        projects = []
        for pid in ids:
            try:
                projects.append(self.get_project(pid))
            except NotFoundError:
                continue  # deleted while listing
        return sorted(projects, key=lambda p: (p.created_at, p.project_id))

    def open_store(self, project_id: str) -> SqliteDocumentStore:
        """Open the store of a known project. Caller closes it."""
        entry = self._entry(project_id)
        return SqliteDocumentStore(entry.info.store_path, self.config.store)

    # =========================================================================
    # Indexing
    # =========================================================================

    def index_project(
        self,
        path: str | Path,
        name: str | None = None,
        options: ExtractionOptions | None = None,
    ) -> str:
        """Register a project and start indexing it in the background.

        Equivalent paths map to the same id; a repeated call returns the
        existing id and does nothing else. Indexing failures are recorded in
        the project status and never raised here.
        """
        if not str(path).strip():
            raise InvalidArgumentError.required("path")
        normalized = normalize_project_path(path)
        project_id = project_id_for(path)
        source = Path(str(path).strip()).expanduser().absolute()

        opts = options or ExtractionOptions.from_config(self.config.indexing)
        start_error: RuntimeError | None = None
        with self._lock:
            if project_id in self._entries:
                logger.debug("project_already_registered", project_id=project_id)
                return project_id
            info = ProjectInfo(
                project_id=project_id,
                project_name=(name or "").strip() or source.name or normalized,
                project_path=source,
                normalized_path=normalized,
                store_path=self.store_root / project_id / STORE_FILENAME,
                created_at=_now(),
            )
            entry = _ProjectEntry(
                info=info,
                status=ProjectStatus(project_id=project_id, message="Queued for indexing"),
            )
            # The future is attached before the entry is published, so a
            # concurrent delete_project always has a task to wait on.
            try:
                entry.future = self._executor.submit(self._run_indexing, entry, opts)
            except RuntimeError as e:
                start_error = e
            self._entries[project_id] = entry

        logger.info("project_registered", project_id=project_id, path=str(source))
        if start_error is not None:
            self._fail(entry, f"Indexing could not start: {start_error}")
        return project_id

    def _set_state(
        self,
        entry: _ProjectEntry,
        state: IndexingState,
        progress: int,
        message: str,
    ) -> None:
        with entry.lock:
            check_transition(entry.status.state, state)
            entry.status.state = state
            entry.status.progress = progress
            entry.status.message = message
            if state is IndexingState.INDEXING:
                entry.status.started_at = _now()
            if state.is_terminal:
                entry.status.completed_at = _now()

    def _set_progress(self, entry: _ProjectEntry, progress: int, message: str) -> None:
        with entry.lock:
            entry.status.progress = progress
            entry.status.message = message

    def _fail(self, entry: _ProjectEntry, reason: str) -> None:
        with entry.lock:
            entry.status.errors.append(reason)
        self._set_state(entry, IndexingState.FAILED, entry.status.progress, reason)
        logger.error("project_indexing_failed", project_id=entry.info.project_id, error=reason)

    def _run_indexing(self, entry: _ProjectEntry, options: ExtractionOptions) -> None:
        """Indexing task body; runs on the executor."""
        with project_context(entry.info.project_id):
            self._index(entry, options)

    def _index(self, entry: _ProjectEntry, options: ExtractionOptions) -> None:
        self._set_state(entry, IndexingState.INDEXING, 10, "Initializing store...")
        try:
            store = SqliteDocumentStore(entry.info.store_path, self.config.store)
            try:
                self._set_progress(entry, 20, "Extracting facts...")
                extraction = self.extractor.extract(entry.info.project_path, options)
                written = FactWriter(store).ingest(extraction.facts)
            finally:
                store.close()
        except Exception as e:
            self._fail(entry, f"Indexing failed: {e}")
            return

        warnings = [*extraction.errors, *written.errors]
        with entry.lock:
            entry.status.errors.extend(warnings)
            entry.info.indexed_at = _now()
            entry.info.files_processed = extraction.files_processed
            for fact_type, count in written.counts.items():
                entry.info.fact_counts[fact_type] = entry.info.fact_counts.get(fact_type, 0) + count

        if warnings:
            message = f"Indexing completed with {len(warnings)} warning(s)"
        else:
            message = "Indexing completed successfully"
        self._set_state(entry, IndexingState.COMPLETED, 100, message)
        logger.info(
            "project_indexed",
            facts_written=written.written,
            duplicates=written.duplicates,
            invalid=written.invalid,
            warnings=len(warnings),
        )

    def wait(self, project_id: str, timeout: float | None = None) -> ProjectStatus:
        """Block until the project's indexing task finishes (or timeout)."""
        entry = self._entry(project_id)
        with entry.lock:
            future = entry.future
        if future is not None:
            concurrent.futures.wait([future], timeout=timeout)
        return self.get_status(project_id)

    # =========================================================================
    # Deletion
    # =========================================================================

    def delete_project(self, project_id: str) -> bool:
        """Delete a project and its store; False for an unknown id.

        Waits for in-flight indexing first. Store removal is best effort: a
        failure is logged and the registry entry is removed regardless.
        """
        pid = (project_id or "").strip()
        if not pid:
            raise InvalidArgumentError.required("project_id")
        with self._lock:
            entry = self._entries.get(pid)
        if entry is None:
            return False

        with entry.lock:
            future = entry.future
        if future is not None:
            concurrent.futures.wait([future])

        store_path = entry.info.store_path
        try:
            remove_store_files(store_path)
            if store_path.parent.exists() and not any(store_path.parent.iterdir()):
                store_path.parent.rmdir()
        except OSError as e:
            logger.warning("project_store_delete_failed", project_id=pid, error=str(e))

        with self._lock:
            self._entries.pop(pid, None)
        logger.info("project_deleted", project_id=pid)
        return True

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; optionally wait for running indexing tasks."""
        self._executor.shutdown(wait=wait)
        logger.debug("project_registry_shutdown")
