"""Call graph index, bounded traversal, and class references.

The graph is rebuilt from the store for every request. Traversal is a
breadth-first walk with a discovered set:

- the seed counts as discovered before the walk, so it never shows up at
  depth >= 1 (cycles back to the seed are dropped);
- a node is reported only at the first depth it is discovered;
- every distinct call site that discovers a node at that depth is reported;
- the walk stops early when a level discovers nothing new.

Entries are presented sorted by (depth, fqn, file_path, line_number).
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

import structlog

from codenav.config.constants import TRAVERSAL_MAX_DEPTH
from codenav.core.errors import InvalidArgumentError, NotFoundError
from codenav.facts import (
    ClassDefinition,
    Fact,
    FactType,
    InterfaceDefinition,
    MethodCall,
    MethodDefinition,
    StructDefinition,
)
from codenav.index.scan import iter_facts

if TYPE_CHECKING:
    from codenav.store import DocumentStore

log = structlog.get_logger(__name__)

Direction = Literal["callers", "callees"]

RELATIONSHIP_TYPES = ("calls", "inherits", "implements")

_GRAPH_TYPES = frozenset(
    {
        FactType.METHOD_CALL,
        FactType.METHOD_DEFINITION,
        FactType.CLASS_DEFINITION,
        FactType.INTERFACE_DEFINITION,
        FactType.STRUCT_DEFINITION,
    }
)


@dataclass(frozen=True, slots=True, order=True)
class CallSite:
    """The far endpoint of an edge plus where the call happens."""

    method: str
    file_path: str
    line_number: int


@dataclass(frozen=True, slots=True)
class Endpoint:
    """Containing class and namespace of a method as seen on call facts."""

    class_fqn: str
    namespace: str


@dataclass(frozen=True, slots=True)
class TraversalEntry:
    method_fqn: str
    class_fqn: str
    namespace: str
    file_path: str
    line_number: int
    depth: int

    @property
    def method_name(self) -> str:
        return self.method_fqn.rsplit(".", 1)[-1]


@dataclass
class TraversalResult:
    method_fqn: str
    direction: Direction
    entries: list[TraversalEntry] = field(default_factory=list)
    max_depth: int = 0

    @property
    def total_count(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class ClassReference:
    """A class that references the target class."""

    class_fqn: str
    class_name: str
    namespace: str
    relationship_type: str
    file_path: str
    line_number: int


@dataclass
class ClassReferences:
    class_fqn: str
    references: list[ClassReference] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.references)


def _simple_name(fqn: str) -> str:
    return fqn.rsplit(".", 1)[-1]


class CallGraph:
    """Adjacency maps over the method_call facts of one store snapshot."""

    def __init__(self) -> None:
        self.callers_of: dict[str, set[CallSite]] = defaultdict(set)
        self.callees_of: dict[str, set[CallSite]] = defaultdict(set)
        self.endpoints: dict[str, Endpoint] = {}
        self.methods: dict[str, MethodDefinition] = {}
        self.classes: dict[str, ClassDefinition] = {}
        self.interfaces: dict[str, InterfaceDefinition] = {}
        self.structs: dict[str, StructDefinition] = {}
        self.calls: list[MethodCall] = []

    @classmethod
    def from_store(cls, store: DocumentStore) -> CallGraph:
        graph = cls.from_facts(fact for _, fact in iter_facts(store, _GRAPH_TYPES))
        log.debug(
            "call_graph_built",
            calls=len(graph.calls),
            methods=len(graph.methods),
            classes=len(graph.classes),
        )
        return graph

    @classmethod
    def from_facts(cls, facts: Iterable[Fact]) -> CallGraph:
        graph = cls()
        for fact in facts:
            graph.add(fact)
        return graph

    def add(self, fact: Fact) -> None:
        match fact:
            case MethodCall():
                self.calls.append(fact)
                self.callers_of[fact.callee].add(
                    CallSite(fact.caller, fact.file_path, fact.line_number)
                )
                self.callees_of[fact.caller].add(
                    CallSite(fact.callee, fact.file_path, fact.line_number)
                )
                self.endpoints.setdefault(
                    fact.caller, Endpoint(fact.caller_class, fact.caller_namespace)
                )
                self.endpoints.setdefault(
                    fact.callee, Endpoint(fact.callee_class, fact.callee_namespace)
                )
            case MethodDefinition():
                self.methods[fact.fqn] = fact
            case ClassDefinition():
                self.classes[fact.fqn] = fact
            case InterfaceDefinition():
                self.interfaces[fact.fqn] = fact
            case StructDefinition():
                self.structs[fact.fqn] = fact

    # =========================================================================
    # Traversal
    # =========================================================================

    def get_callers(
        self,
        method_fqn: str,
        depth: int = 1,
        include_self: bool = False,
        *,
        depth_limit: int = TRAVERSAL_MAX_DEPTH,
    ) -> TraversalResult:
        """Methods that (transitively) call ``method_fqn``."""
        return self._traverse(method_fqn, depth, include_self, "callers", depth_limit)

    def get_callees(
        self,
        method_fqn: str,
        depth: int = 1,
        include_self: bool = False,
        *,
        depth_limit: int = TRAVERSAL_MAX_DEPTH,
    ) -> TraversalResult:
        """Methods (transitively) called by ``method_fqn``."""
        return self._traverse(method_fqn, depth, include_self, "callees", depth_limit)

    def _traverse(
        self,
        method_fqn: str,
        depth: int,
        include_self: bool,
        direction: Direction,
        depth_limit: int,
    ) -> TraversalResult:
        seed = (method_fqn or "").strip()
        if not seed:
            raise InvalidArgumentError.required("method_fqn")
        if depth < 1:
            raise InvalidArgumentError.out_of_range("depth", depth, "must be >= 1")
        if depth > depth_limit:
            raise InvalidArgumentError.out_of_range("depth", depth, f"must be <= {depth_limit}")

        definition = self.methods.get(seed)
        if definition is None:
            raise NotFoundError.method(seed)

        adjacency = self.callers_of if direction == "callers" else self.callees_of
        result = TraversalResult(method_fqn=seed, direction=direction)
        if include_self:
            result.entries.append(
                TraversalEntry(
                    method_fqn=seed,
                    class_fqn=definition.class_fqn,
                    namespace=definition.namespace,
                    file_path=definition.file_path,
                    line_number=definition.line_number,
                    depth=0,
                )
            )

        discovered = {seed}
        frontier = [seed]
        for level in range(1, depth + 1):
            if not frontier:
                break
            result.max_depth = level
            found: dict[str, None] = {}
            emitted: set[CallSite] = set()
            for node in frontier:
                for site in sorted(adjacency.get(node, ())):
                    if site.method in discovered or site in emitted:
                        continue
                    emitted.add(site)
                    found.setdefault(site.method, None)
                    result.entries.append(self._entry(site, level))
            discovered.update(found)
            frontier = list(found)

        result.entries.sort(key=lambda e: (e.depth, e.method_fqn, e.file_path, e.line_number))
        log.debug(
            "call_graph_traversed",
            method=seed,
            direction=direction,
            depth=depth,
            entries=result.total_count,
            max_depth=result.max_depth,
        )
        return result

    def _entry(self, site: CallSite, depth: int) -> TraversalEntry:
        endpoint = self.endpoints.get(site.method)
        definition = self.methods.get(site.method)
        if endpoint is not None:
            class_fqn, namespace = endpoint.class_fqn, endpoint.namespace
        elif definition is not None:
            class_fqn, namespace = definition.class_fqn, definition.namespace
        else:
            class_fqn, namespace = "", ""
        return TraversalEntry(
            method_fqn=site.method,
            class_fqn=class_fqn,
            namespace=namespace,
            file_path=site.file_path,
            line_number=site.line_number,
            depth=depth,
        )

    # =========================================================================
    # Class references
    # =========================================================================

    def get_class_references(
        self, class_fqn: str, relationship_type: str | None = None
    ) -> ClassReferences:
        """Classes that call into, inherit from, or implement ``class_fqn``.

        The target may be a class or an interface definition. References are
        de-duplicated by (referencing class, relationship type); the first call
        site in store order is reported for ``calls``.
        """
        target_fqn = (class_fqn or "").strip()
        if not target_fqn:
            raise InvalidArgumentError.required("class_fqn")

        wanted: str | None = None
        if relationship_type is not None and relationship_type.strip():
            wanted = relationship_type.strip().lower()
            if wanted not in RELATIONSHIP_TYPES:
                raise InvalidArgumentError.out_of_range(
                    "relationship_type",
                    relationship_type,
                    f"must be one of {', '.join(RELATIONSHIP_TYPES)}",
                )

        target = self.classes.get(target_fqn) or self.interfaces.get(target_fqn)
        if target is None:
            raise NotFoundError.klass(target_fqn)

        names = {target.fqn.lower(), target.name.lower()}

        def matches(ref: str) -> bool:
            return bool(ref) and ref.lower() in names

        refs: dict[tuple[str, str], ClassReference] = {}

        def add(ref: ClassReference) -> None:
            refs.setdefault((ref.class_fqn, ref.relationship_type), ref)

        for call in self.calls:
            if matches(call.callee_class) and not matches(call.caller_class):
                add(
                    ClassReference(
                        class_fqn=call.caller_class,
                        class_name=_simple_name(call.caller_class),
                        namespace=call.caller_namespace,
                        relationship_type="calls",
                        file_path=call.file_path,
                        line_number=call.line_number,
                    )
                )

        for cls in self.classes.values():
            if cls.fqn == target.fqn:
                continue
            if matches(cls.base_class):
                add(self._definition_reference(cls, "inherits"))
            if any(matches(i) for i in cls.interfaces):
                add(self._definition_reference(cls, "implements"))

        for struct in self.structs.values():
            if any(matches(i) for i in struct.interfaces):
                add(self._definition_reference(struct, "implements"))

        for iface in self.interfaces.values():
            if iface.fqn != target.fqn and any(matches(i) for i in iface.base_interfaces):
                add(self._definition_reference(iface, "implements"))

        references = [r for r in refs.values() if wanted is None or r.relationship_type == wanted]
        references.sort(key=lambda r: (r.relationship_type, r.class_fqn))
        return ClassReferences(class_fqn=target.fqn, references=references)

    @staticmethod
    def _definition_reference(
        definition: ClassDefinition | StructDefinition | InterfaceDefinition,
        relationship_type: str,
    ) -> ClassReference:
        return ClassReference(
            class_fqn=definition.fqn,
            class_name=definition.name,
            namespace=definition.namespace,
            relationship_type=relationship_type,
            file_path=definition.file_path,
            line_number=definition.line_number,
        )
