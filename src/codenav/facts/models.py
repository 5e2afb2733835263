"""Typed fact records.

One frozen dataclass per fact type. Field metadata ``key`` names the
metadata key a field maps to when it differs from the attribute name
(``class`` and the definition FQN/name fields).

Collection fields travel as comma-joined strings in store metadata and are
tuples in memory. Booleans are written as ``true``/``false``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import StrEnum
from typing import ClassVar


class FactType(StrEnum):
    """Fact type discriminator as stored in the ``type`` metadata key."""

    METHOD_CALL = "method_call"
    METHOD_DEFINITION = "method_definition"
    CLASS_DEFINITION = "class_definition"
    INTERFACE_DEFINITION = "interface_definition"
    STRUCT_DEFINITION = "struct_definition"
    ENUM_DEFINITION = "enum_definition"
    PROPERTY_DEFINITION = "property_definition"
    FIELD_DEFINITION = "field_definition"


def _key(name: str) -> dict[str, str]:
    return {"key": name}


@dataclass(frozen=True, slots=True)
class MethodCall:
    """A call site: ``caller`` invokes ``callee`` at ``file_path:line_number``."""

    fact_type: ClassVar[FactType] = FactType.METHOD_CALL

    caller: str
    callee: str
    caller_class: str
    callee_class: str
    file_path: str
    line_number: int
    caller_namespace: str = ""
    callee_namespace: str = ""
    call_kind: str = "invocation"  # invocation, attribute, initializer
    is_external: bool = False

    @property
    def key(self) -> str:
        return f"{self.caller}->{self.callee}@{self.file_path}:{self.line_number}"


@dataclass(frozen=True, slots=True)
class MethodDefinition:
    fact_type: ClassVar[FactType] = FactType.METHOD_DEFINITION

    fqn: str = field(metadata=_key("method"))
    name: str = field(metadata=_key("method_name"))
    class_fqn: str = field(metadata=_key("class"))
    return_type: str
    access_modifier: str
    file_path: str
    line_number: int
    namespace: str = ""
    parameters: tuple[str, ...] = ()
    is_static: bool = False
    is_virtual: bool = False
    is_abstract: bool = False
    is_override: bool = False

    @property
    def key(self) -> str:
        return self.fqn

    @property
    def class_name(self) -> str:
        """Simple name of the containing class."""
        return self.class_fqn.rsplit(".", 1)[-1]


@dataclass(frozen=True, slots=True)
class ClassDefinition:
    fact_type: ClassVar[FactType] = FactType.CLASS_DEFINITION

    fqn: str = field(metadata=_key("class"))
    name: str = field(metadata=_key("class_name"))
    access_modifier: str
    file_path: str
    line_number: int
    namespace: str = ""
    base_class: str = ""
    interfaces: tuple[str, ...] = ()
    is_static: bool = False
    is_abstract: bool = False
    is_sealed: bool = False
    method_count: int = 0
    property_count: int = 0
    field_count: int = 0

    @property
    def key(self) -> str:
        return self.fqn


@dataclass(frozen=True, slots=True)
class InterfaceDefinition:
    fact_type: ClassVar[FactType] = FactType.INTERFACE_DEFINITION

    fqn: str = field(metadata=_key("interface"))
    name: str = field(metadata=_key("interface_name"))
    access_modifier: str
    file_path: str
    line_number: int
    namespace: str = ""
    base_interfaces: tuple[str, ...] = ()
    method_count: int = 0
    property_count: int = 0

    @property
    def key(self) -> str:
        return self.fqn


@dataclass(frozen=True, slots=True)
class StructDefinition:
    fact_type: ClassVar[FactType] = FactType.STRUCT_DEFINITION

    fqn: str = field(metadata=_key("struct"))
    name: str = field(metadata=_key("struct_name"))
    access_modifier: str
    file_path: str
    line_number: int
    namespace: str = ""
    is_readonly: bool = False
    is_ref: bool = False
    interfaces: tuple[str, ...] = ()
    method_count: int = 0
    property_count: int = 0
    field_count: int = 0

    @property
    def key(self) -> str:
        return self.fqn


@dataclass(frozen=True, slots=True)
class EnumDefinition:
    fact_type: ClassVar[FactType] = FactType.ENUM_DEFINITION

    fqn: str = field(metadata=_key("enum"))
    name: str = field(metadata=_key("enum_name"))
    access_modifier: str
    file_path: str
    line_number: int
    namespace: str = ""
    underlying_type: str = "int"
    values: tuple[str, ...] = ()
    value_count: int = 0

    @property
    def key(self) -> str:
        return self.fqn


@dataclass(frozen=True, slots=True)
class PropertyDefinition:
    fact_type: ClassVar[FactType] = FactType.PROPERTY_DEFINITION

    fqn: str = field(metadata=_key("property"))
    name: str = field(metadata=_key("property_name"))
    class_fqn: str = field(metadata=_key("class"))
    property_type: str
    access_modifier: str
    file_path: str
    line_number: int
    namespace: str = ""
    is_static: bool = False
    is_virtual: bool = False
    is_abstract: bool = False
    is_override: bool = False
    has_getter: bool = False
    has_setter: bool = False
    is_auto_property: bool = False

    @property
    def key(self) -> str:
        return self.fqn


@dataclass(frozen=True, slots=True)
class FieldDefinition:
    fact_type: ClassVar[FactType] = FactType.FIELD_DEFINITION

    fqn: str = field(metadata=_key("field"))
    name: str = field(metadata=_key("field_name"))
    class_fqn: str = field(metadata=_key("class"))
    field_type: str
    access_modifier: str
    file_path: str
    line_number: int
    namespace: str = ""
    is_static: bool = False
    is_readonly: bool = False
    is_const: bool = False
    is_volatile: bool = False

    @property
    def key(self) -> str:
        return self.fqn


Fact = (
    MethodCall
    | MethodDefinition
    | ClassDefinition
    | InterfaceDefinition
    | StructDefinition
    | EnumDefinition
    | PropertyDefinition
    | FieldDefinition
)

FACT_CLASSES: dict[FactType, type[Fact]] = {
    FactType.METHOD_CALL: MethodCall,
    FactType.METHOD_DEFINITION: MethodDefinition,
    FactType.CLASS_DEFINITION: ClassDefinition,
    FactType.INTERFACE_DEFINITION: InterfaceDefinition,
    FactType.STRUCT_DEFINITION: StructDefinition,
    FactType.ENUM_DEFINITION: EnumDefinition,
    FactType.PROPERTY_DEFINITION: PropertyDefinition,
    FactType.FIELD_DEFINITION: FieldDefinition,
}


def metadata_key(f: object) -> str:
    """Metadata key for a dataclass field."""
    return f.metadata.get("key", f.name)  # type: ignore[attr-defined]


def identity_key(fact: Fact) -> str:
    """Identity key used for de-duplication and set comparison."""
    return fact.key


def fact_to_metadata(fact: Fact) -> dict[str, str]:
    """Flatten a fact into the string-keyed metadata map stored with its document."""
    meta: dict[str, str] = {"type": fact.fact_type.value}
    for f in fields(fact):
        value = getattr(fact, f.name)
        if isinstance(value, bool):
            text = "true" if value else "false"
        elif isinstance(value, tuple):
            text = ",".join(value)
        else:
            text = str(value)
        meta[metadata_key(f)] = text
    return meta


def describe_fact(fact: Fact) -> str:
    """Render the document text stored alongside a fact (used by text search)."""
    where = f"{fact.file_path}:{fact.line_number}"
    match fact:
        case MethodCall():
            kind = "" if fact.call_kind == "invocation" else f" ({fact.call_kind})"
            return f"Method {fact.caller} calls {fact.callee}{kind} at {where}"
        case MethodDefinition():
            params = ", ".join(fact.parameters)
            return (
                f"{fact.access_modifier} method {fact.fqn}({params}) "
                f"returns {fact.return_type} in class {fact.class_fqn} at {where}"
            )
        case ClassDefinition():
            text = f"{fact.access_modifier} class {fact.fqn}"
            if fact.base_class:
                text += f" extends {fact.base_class}"
            if fact.interfaces:
                text += f" implements {', '.join(fact.interfaces)}"
            return f"{text} at {where}"
        case InterfaceDefinition():
            text = f"{fact.access_modifier} interface {fact.fqn}"
            if fact.base_interfaces:
                text += f" extends {', '.join(fact.base_interfaces)}"
            return f"{text} at {where}"
        case StructDefinition():
            text = f"{fact.access_modifier} struct {fact.fqn}"
            if fact.interfaces:
                text += f" implements {', '.join(fact.interfaces)}"
            return f"{text} at {where}"
        case EnumDefinition():
            return (
                f"{fact.access_modifier} enum {fact.fqn} : {fact.underlying_type} "
                f"with values {', '.join(fact.values)} at {where}"
            )
        case PropertyDefinition():
            return (
                f"{fact.access_modifier} property {fact.fqn} of type {fact.property_type} "
                f"in class {fact.class_fqn} at {where}"
            )
        case FieldDefinition():
            return (
                f"{fact.access_modifier} field {fact.fqn} of type {fact.field_type} "
                f"in class {fact.class_fqn} at {where}"
            )
