"""Fact validation and normalisation.

``validate_fact`` never raises. It walks every field of the fact's record
type and reports every violated rule, so a batch can be fixed in one scan.
The returned fact is always normalised (strings trimmed, optional fields
defaulted, bad line numbers clamped to 1) even when it is invalid; callers
must check ``is_valid`` before writing it anywhere.
"""

from __future__ import annotations

import functools
import typing
from collections.abc import Iterable, Mapping
from dataclasses import MISSING, dataclass, field, fields
from typing import Any

from codenav.facts.models import FACT_CLASSES, Fact, FactType, metadata_key

_TRUE_STRINGS = frozenset({"true", "1", "yes", "y"})


@dataclass
class ValidationResult:
    """Outcome of validating a single raw fact."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    fact: Fact | None = None


@dataclass
class BatchValidationResult:
    """Outcome of validating a batch; errors are keyed by input position."""

    facts: list[Fact] = field(default_factory=list)
    errors: dict[int, list[str]] = field(default_factory=dict)

    @property
    def invalid_count(self) -> int:
        return len(self.errors)

    def error_messages(self) -> list[str]:
        """Flatten errors as ``fact #<n>: <message>`` lines."""
        return [f"fact #{index}: {msg}" for index, msgs in self.errors.items() for msg in msgs]


@functools.cache
def _field_kinds(cls: type) -> dict[str, type]:
    hints = typing.get_type_hints(cls)
    kinds: dict[str, type] = {}
    for name, hint in hints.items():
        if typing.get_origin(hint) is typing.ClassVar:
            continue
        kinds[name] = tuple if typing.get_origin(hint) is tuple else hint
    return kinds


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_bool(value: Any) -> bool:
    """Lenient boolean: real bools, or "true", "1", "yes", "y" in any case."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_STRINGS


def _parse_collection(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    items = value.split(",") if isinstance(value, str) else value
    return tuple(text for item in items if (text := str(item).strip()))


def _parse_int(value: Any) -> int | None:
    """Parse an int; None when the value is not an integer."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _normalise_int(name: str, value: Any, errors: list[str]) -> int:
    minimum = 1 if name == "line_number" else 0
    if _is_blank(value):
        parsed = 0
    else:
        parsed = _parse_int(value)
        if parsed is None:
            errors.append(f"Field '{name}' must be an integer, got '{value}'")
            return minimum
    if parsed < minimum:
        if name == "line_number":
            errors.append(f"Required field 'line_number' must be >= 1, got {parsed}")
        else:
            errors.append(f"Field '{name}' must be >= 0, got {parsed}")
        return minimum
    return parsed


def validate_fact(raw: Mapping[str, Any]) -> ValidationResult:
    """Validate and normalise one raw fact (a metadata map or decoded JSON object)."""
    type_value = raw.get("type")
    if _is_blank(type_value):
        missing = "Required field 'type' is missing or empty"
        return ValidationResult(is_valid=False, errors=[missing])
    try:
        fact_type = FactType(str(type_value).strip())
    except ValueError:
        return ValidationResult(is_valid=False, errors=[f"Unknown fact type '{type_value}'"])

    cls = FACT_CLASSES[fact_type]
    kinds = _field_kinds(cls)
    errors: list[str] = []
    values: dict[str, Any] = {}

    for f in fields(cls):
        name = metadata_key(f)
        value = raw.get(name)
        required = f.default is MISSING and f.default_factory is MISSING
        kind = kinds[f.name]

        if kind is int:
            values[f.name] = _normalise_int(name, value, errors)
        elif kind is bool:
            values[f.name] = parse_bool(value)
        elif kind is tuple:
            values[f.name] = _parse_collection(value)
        else:
            text = "" if value is None else str(value).strip()
            if not text:
                if required:
                    errors.append(f"Required field '{name}' is missing or empty")
                elif f.default is not MISSING:
                    text = f.default
            values[f.name] = text

    return ValidationResult(is_valid=not errors, errors=errors, fact=cls(**values))


def validate_facts(batch: Iterable[Mapping[str, Any]]) -> BatchValidationResult:
    """Validate a batch, keeping valid facts and every error of every invalid one."""
    result = BatchValidationResult()
    for index, raw in enumerate(batch):
        outcome = validate_fact(raw)
        if outcome.is_valid and outcome.fact is not None:
            result.facts.append(outcome.fact)
        else:
            result.errors[index] = outcome.errors
    return result


def fact_from_metadata(meta: Mapping[str, Any]) -> Fact | None:
    """Parse stored document metadata into a typed fact; None when it does not validate."""
    outcome = validate_fact(meta)
    return outcome.fact if outcome.is_valid else None
