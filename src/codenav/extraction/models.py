"""Types shared by extraction front ends."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from codenav.facts import parse_bool

if TYPE_CHECKING:
    from codenav.config.models import IndexingConfig

_ATTRIBUTE_KINDS = frozenset({"attribute", "initializer"})


@dataclass(frozen=True, slots=True)
class ExtractionOptions:
    """Capability switches for what a front end reports.

    Narrowing these shrinks ground truth, which legitimately turns previously
    stored facts stale on the next cleanup.
    """

    record_external_calls: bool = True
    attribute_initializer_calls: bool = False

    @classmethod
    def from_config(cls, config: IndexingConfig) -> ExtractionOptions:
        return cls(
            record_external_calls=config.record_external_calls,
            attribute_initializer_calls=config.attribute_initializer_calls,
        )

    def accepts(self, raw: Mapping[str, Any]) -> bool:
        """Whether a raw fact falls inside these options."""
        if raw.get("type") != "method_call":
            return True
        kind = str(raw.get("call_kind") or "invocation").strip().lower()
        if kind in _ATTRIBUTE_KINDS and not self.attribute_initializer_calls:
            return False
        return not (parse_bool(raw.get("is_external")) and not self.record_external_calls)


@dataclass
class ExtractionResult:
    """Raw facts produced for a project, plus non-fatal problems."""

    facts: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    files_processed: int = 0


class FactExtractor(Protocol):
    """Turns a project on disk into raw facts."""

    def extract(self, path: Path, options: ExtractionOptions) -> ExtractionResult: ...
