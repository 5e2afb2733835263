"""Fact schema, identity keys, and validation."""

from codenav.facts.models import (
    FACT_CLASSES,
    ClassDefinition,
    EnumDefinition,
    Fact,
    FactType,
    FieldDefinition,
    InterfaceDefinition,
    MethodCall,
    MethodDefinition,
    PropertyDefinition,
    StructDefinition,
    describe_fact,
    fact_to_metadata,
    identity_key,
)
from codenav.facts.validation import (
    BatchValidationResult,
    ValidationResult,
    fact_from_metadata,
    parse_bool,
    validate_fact,
    validate_facts,
)

__all__ = [
    "FACT_CLASSES",
    "BatchValidationResult",
    "ClassDefinition",
    "EnumDefinition",
    "Fact",
    "FactType",
    "FieldDefinition",
    "InterfaceDefinition",
    "MethodCall",
    "MethodDefinition",
    "PropertyDefinition",
    "StructDefinition",
    "ValidationResult",
    "describe_fact",
    "fact_from_metadata",
    "fact_to_metadata",
    "identity_key",
    "parse_bool",
    "validate_fact",
    "validate_facts",
]
