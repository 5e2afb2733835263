"""Read facts emitted by an external front end as JSON lines."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog

from codenav.config.constants import FACTS_FILENAME, FACTS_SUFFIX
from codenav.extraction.models import ExtractionOptions, ExtractionResult

log = structlog.get_logger(__name__)


class JsonLinesFactExtractor:
    """FactExtractor over ``.jsonl`` files.

    ``path`` may be a single ``.jsonl`` file, or a directory whose
    ``facts.jsonl`` and ``*.facts.jsonl`` files (non-recursive) are read in
    name order. Malformed lines are reported as errors and skipped.
    """

    def discover(self, path: Path) -> list[Path]:
        if path.is_file():
            return [path]
        if not path.is_dir():
            return []
        return sorted(
            p
            for p in path.iterdir()
            if p.is_file() and (p.name == FACTS_FILENAME or p.name.endswith(FACTS_SUFFIX))
        )

    def extract(self, path: Path, options: ExtractionOptions) -> ExtractionResult:
        result = ExtractionResult()
        files = self.discover(path)
        if not files:
            result.errors.append(f"No fact files found at {path}")
            return result

        for file in files:
            try:
                lines = file.read_text(encoding="utf-8").splitlines()
            except (OSError, UnicodeDecodeError) as e:
                result.errors.append(f"{file}: cannot read: {e}")
                continue
            result.files_processed += 1
            for lineno, line in enumerate(lines, start=1):
                raw = self._parse_line(line, file, lineno, result)
                if raw is not None and options.accepts(raw):
                    result.facts.append(raw)

        log.debug(
            "facts_extracted",
            path=str(path),
            files=result.files_processed,
            facts=len(result.facts),
            errors=len(result.errors),
        )
        return result

    def _parse_line(
        self, line: str, file: Path, lineno: int, result: ExtractionResult
    ) -> dict[str, Any] | None:
        if not line.strip():
            return None
        try:
            raw = json.loads(line)
        except json.JSONDecodeError as e:
            result.errors.append(f"{file}:{lineno}: invalid JSON: {e.msg}")
            return None
        if not isinstance(raw, dict):
            result.errors.append(f"{file}:{lineno}: expected a JSON object")
            return None
        return raw
