"""Listing, lookup, and entry-point classification over definition facts.

Filters are case-insensitive equality matches: the namespace against the
definition namespace, the class name against the simple class name (or the
class FQN when the filter contains a dot). Listings sort by FQN and paginate
the filtered set, so ``total_count`` is the post-filter, pre-pagination size.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

import structlog

from codenav.config.constants import LIST_MAX_LIMIT
from codenav.core.errors import InvalidArgumentError, NotFoundError
from codenav.facts import ClassDefinition, FactType, MethodDefinition
from codenav.index.scan import iter_facts

if TYPE_CHECKING:
    from codenav.store import DocumentStore

log = structlog.get_logger(__name__)

T = TypeVar("T")

ENTRY_POINT_TYPES = ("Main", "Controller")

_UNKNOWN = "Unknown"


@dataclass
class Page(Generic[T]):
    """One page of a filtered, sorted listing."""

    items: list[T] = field(default_factory=list)
    total_count: int = 0
    offset: int = 0
    limit: int = 0

    @property
    def count(self) -> int:
        return len(self.items)

    @property
    def has_more(self) -> bool:
        return self.offset + self.count < self.total_count


@dataclass(frozen=True, slots=True)
class EntryPoint:
    method: MethodDefinition
    entry_type: str  # Main or Controller
    http_method: str | None = None
    route: str | None = None


def _matches(value: str, wanted: str | None) -> bool:
    if wanted is None or not wanted.strip():
        return True
    return value.lower() == wanted.strip().lower()


def _matches_class(method: MethodDefinition, wanted: str | None) -> bool:
    if wanted is not None and "." in wanted:
        return _matches(method.class_fqn, wanted)
    return _matches(method.class_name, wanted)


def _paginate(items: list[T], limit: int, offset: int) -> Page[T]:
    return Page(
        items=items[offset : offset + limit],
        total_count=len(items),
        offset=offset,
        limit=limit,
    )


def _require(value: str, name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidArgumentError.required(name)
    return text


class EnumerationService:
    """Read-only queries over one store snapshot per call."""

    def __init__(self, store: DocumentStore, *, limit_max: int = LIST_MAX_LIMIT) -> None:
        self.store = store
        self.limit_max = limit_max

    def _check_page(self, limit: int, offset: int) -> None:
        if limit < 1:
            raise InvalidArgumentError.out_of_range("limit", limit, "must be >= 1")
        if limit > self.limit_max:
            raise InvalidArgumentError.out_of_range(
                "limit", limit, f"must be <= {self.limit_max}"
            )
        if offset < 0:
            raise InvalidArgumentError.out_of_range("offset", offset, "must be >= 0")

    def _classes(self) -> list[ClassDefinition]:
        facts = [
            fact
            for _, fact in iter_facts(self.store, frozenset({FactType.CLASS_DEFINITION}))
            if isinstance(fact, ClassDefinition)
        ]
        return sorted(facts, key=lambda c: c.fqn)

    def _methods(self) -> list[MethodDefinition]:
        facts = [
            fact
            for _, fact in iter_facts(self.store, frozenset({FactType.METHOD_DEFINITION}))
            if isinstance(fact, MethodDefinition)
        ]
        return sorted(facts, key=lambda m: m.fqn)

    def list_classes(
        self, namespace: str | None = None, limit: int = 100, offset: int = 0
    ) -> Page[ClassDefinition]:
        self._check_page(limit, offset)
        matched = [c for c in self._classes() if _matches(c.namespace, namespace)]
        return _paginate(matched, limit, offset)

    def list_methods(
        self,
        class_name: str | None = None,
        namespace: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Page[MethodDefinition]:
        """List methods whose containing class and namespace match the filters."""
        self._check_page(limit, offset)
        matched = [
            m
            for m in self._methods()
            if _matches_class(m, class_name) and _matches(m.namespace, namespace)
        ]
        return _paginate(matched, limit, offset)

    def get_method(self, method_fqn: str) -> MethodDefinition:
        fqn = _require(method_fqn, "method_fqn")
        for _, fact in iter_facts(self.store, frozenset({FactType.METHOD_DEFINITION})):
            if isinstance(fact, MethodDefinition) and fact.fqn == fqn:
                return fact
        raise NotFoundError.method(fqn)

    def get_class(self, class_fqn: str) -> ClassDefinition:
        fqn = _require(class_fqn, "class_fqn")
        for _, fact in iter_facts(self.store, frozenset({FactType.CLASS_DEFINITION})):
            if isinstance(fact, ClassDefinition) and fact.fqn == fqn:
                return fact
        raise NotFoundError.klass(fqn)

    def get_class_methods(self, class_fqn: str) -> list[MethodDefinition]:
        """Methods of a class; the class itself must have a definition fact."""
        cls = self.get_class(class_fqn)
        return [m for m in self._methods() if m.class_fqn == cls.fqn]

    def list_entry_points(self, entry_type: str | None = None) -> list[EntryPoint]:
        """Main methods and controller-convention methods.

        Routes and HTTP verbs are not inspected; controller entries report them
        as ``Unknown``.
        """
        wanted: str | None = None
        if entry_type is not None and entry_type.strip():
            lookup = {t.lower(): t for t in ENTRY_POINT_TYPES}
            wanted = lookup.get(entry_type.strip().lower())
            if wanted is None:
                raise InvalidArgumentError.out_of_range(
                    "entry_type", entry_type, f"must be one of {', '.join(ENTRY_POINT_TYPES)}"
                )

        entries: list[EntryPoint] = []
        for method in self._methods():
            if method.name == "Main":
                entries.append(EntryPoint(method=method, entry_type="Main"))
            elif method.class_name.lower().endswith("controller"):
                entries.append(
                    EntryPoint(
                        method=method,
                        entry_type="Controller",
                        http_method=_UNKNOWN,
                        route=_UNKNOWN,
                    )
                )

        if wanted is not None:
            entries = [e for e in entries if e.entry_type == wanted]
        log.debug("entry_points_listed", entry_type=wanted, count=len(entries))
        return entries
