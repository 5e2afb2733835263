"""Project registry records and the indexing state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from codenav.core.errors import InternalError


class IndexingState(Enum):
    """Project indexing lifecycle."""

    QUEUED = "queued"
    INDEXING = "indexing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (IndexingState.COMPLETED, IndexingState.FAILED)


_TRANSITIONS: dict[IndexingState, frozenset[IndexingState]] = {
    IndexingState.QUEUED: frozenset({IndexingState.INDEXING, IndexingState.FAILED}),
    IndexingState.INDEXING: frozenset({IndexingState.COMPLETED, IndexingState.FAILED}),
    IndexingState.COMPLETED: frozenset(),
    IndexingState.FAILED: frozenset(),
}


def check_transition(current: IndexingState, target: IndexingState) -> None:
    """Raise InternalError unless ``current -> target`` is a legal transition."""
    if target not in _TRANSITIONS[current]:
        raise InternalError.invalid_transition(current.value, target.value)


@dataclass
class ProjectStatus:
    project_id: str
    state: IndexingState = IndexingState.QUEUED
    progress: int = 0
    message: str = ""
    errors: list[str] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "project_id": self.project_id,
            "status": self.state.value,
            "progress": self.progress,
            "message": self.message,
            "errors": list(self.errors),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass
class ProjectInfo:
    """A registered project.

    ``project_path`` is the absolute path as given (used for extraction);
    ``normalized_path`` is the case/slash-normalised form the id is derived from.
    """

    project_id: str
    project_name: str
    project_path: Path
    normalized_path: str
    store_path: Path
    created_at: datetime
    indexed_at: datetime | None = None
    fact_counts: dict[str, int] = field(default_factory=dict)
    files_processed: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "project_id": self.project_id,
            "project_name": self.project_name,
            "project_path": str(self.project_path),
            "store_path": str(self.store_path),
            "created_at": self.created_at.isoformat(),
            "indexed_at": self.indexed_at.isoformat() if self.indexed_at else None,
            "fact_counts": dict(self.fact_counts),
            "files_processed": self.files_processed,
        }
