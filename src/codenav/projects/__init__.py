"""Project registry and indexing lifecycle."""

from codenav.projects.models import IndexingState, ProjectInfo, ProjectStatus
from codenav.projects.registry import ProjectRegistry, normalize_project_path, project_id_for

__all__ = [
    "IndexingState",
    "ProjectInfo",
    "ProjectRegistry",
    "ProjectStatus",
    "normalize_project_path",
    "project_id_for",
]
