"""Tests for facts/validation.py - validation never raises and reports every error."""

from __future__ import annotations

from typing import Any

import pytest

from codenav.facts import (
    ClassDefinition,
    EnumDefinition,
    MethodCall,
    MethodDefinition,
    fact_from_metadata,
    parse_bool,
    validate_fact,
    validate_facts,
)
from factories import call, class_def, interface_def, method_def


_COMPLETE_FACTS: dict[str, dict[str, Any]] = {
    "method_call": call("App.Web.Home.Index", "App.Core.Svc.Run"),
    "method_definition": method_def("App.Core.Svc.Run"),
    "class_definition": class_def("App.Core.Svc"),
    "interface_definition": interface_def("App.Core.ISvc"),
    "struct_definition": {
        "type": "struct_definition",
        "struct": "App.Core.Point",
        "struct_name": "Point",
        "access_modifier": "public",
        "file_path": "src/Point.cs",
        "line_number": 3,
    },
    "enum_definition": {
        "type": "enum_definition",
        "enum": "App.Core.Color",
        "enum_name": "Color",
        "access_modifier": "public",
        "file_path": "src/Color.cs",
        "line_number": 5,
    },
    "property_definition": {
        "type": "property_definition",
        "property": "App.Core.Svc.Name",
        "property_name": "Name",
        "class": "App.Core.Svc",
        "property_type": "string",
        "access_modifier": "public",
        "file_path": "src/Svc.cs",
        "line_number": 7,
    },
    "field_definition": {
        "type": "field_definition",
        "field": "App.Core.Svc._repo",
        "field_name": "_repo",
        "class": "App.Core.Svc",
        "field_type": "Repo",
        "access_modifier": "private",
        "file_path": "src/Svc.cs",
        "line_number": 9,
    },
}

_REQUIRED_FIELDS = {
    "method_call": ("caller", "callee", "caller_class", "callee_class", "file_path"),
    "method_definition": (
        "method",
        "method_name",
        "class",
        "return_type",
        "access_modifier",
        "file_path",
    ),
    "class_definition": ("class", "class_name", "access_modifier", "file_path"),
    "interface_definition": ("interface", "interface_name", "access_modifier", "file_path"),
    "struct_definition": ("struct", "struct_name", "access_modifier", "file_path"),
    "enum_definition": ("enum", "enum_name", "access_modifier", "file_path"),
    "property_definition": (
        "property",
        "property_name",
        "class",
        "property_type",
        "access_modifier",
        "file_path",
    ),
    "field_definition": (
        "field",
        "field_name",
        "class",
        "field_type",
        "access_modifier",
        "file_path",
    ),
}


class TestValidateFactType:
    """The type discriminator is checked first."""

    @pytest.mark.parametrize("raw", [{}, {"type": ""}, {"type": "   "}, {"type": None}])
    def test_given_missing_type_when_validated_then_single_error(
        self, raw: dict[str, Any]
    ) -> None:
        """Missing type is reported and no fact is produced."""
        # Given / When
        result = validate_fact(raw)

        # Then
        assert result.is_valid is False
        assert result.errors == ["Required field 'type' is missing or empty"]
        assert result.fact is None

    def test_given_unknown_type_when_validated_then_reports_type(self) -> None:
        """Unknown types name the offending value."""
        # Given / When
        result = validate_fact({"type": "lambda_definition"})

        # Then
        assert result.errors == ["Unknown fact type 'lambda_definition'"]
        assert result.fact is None


class TestValidateFactCompleteness:
    """Every violated rule is reported, not just the first."""

    def test_given_empty_method_call_when_validated_then_every_error_reported(self) -> None:
        """All five required strings and the line number are reported together."""
        # Given
        raw = {"type": "method_call"}

        # When
        result = validate_fact(raw)

        # Then
        assert result.is_valid is False
        assert result.errors == [
            "Required field 'caller' is missing or empty",
            "Required field 'callee' is missing or empty",
            "Required field 'caller_class' is missing or empty",
            "Required field 'callee_class' is missing or empty",
            "Required field 'file_path' is missing or empty",
            "Required field 'line_number' must be >= 1, got 0",
        ]

    def test_given_complete_fact_of_each_type_when_validated_then_valid(self) -> None:
        for fact_type, raw in _COMPLETE_FACTS.items():
            result = validate_fact(raw)
            assert result.errors == [], fact_type

    @pytest.mark.parametrize(
        ("fact_type", "key"),
        [(t, key) for t, keys in _REQUIRED_FIELDS.items() for key in keys],
    )
    def test_given_required_field_dropped_when_validated_then_error_names_it(
        self, fact_type: str, key: str
    ) -> None:
        """Each type reports exactly the required field that is absent."""
        # Given
        raw = dict(_COMPLETE_FACTS[fact_type])
        del raw[key]

        # When
        result = validate_fact(raw)

        # Then
        assert result.is_valid is False
        assert result.errors == [f"Required field '{key}' is missing or empty"]

    @pytest.mark.parametrize("fact_type", list(_COMPLETE_FACTS))
    def test_given_line_number_dropped_when_validated_then_error_names_it(
        self, fact_type: str
    ) -> None:
        # Given
        raw = dict(_COMPLETE_FACTS[fact_type])
        del raw["line_number"]

        # When
        result = validate_fact(raw)

        # Then
        assert result.errors == ["Required field 'line_number' must be >= 1, got 0"]

    def test_given_blank_strings_when_validated_then_treated_as_missing(self) -> None:
        """Whitespace-only values count as empty."""
        # Given
        raw = method_def("App.Svc.Run", return_type="  ", access_modifier="")

        # When
        result = validate_fact(raw)

        # Then
        assert result.errors == [
            "Required field 'return_type' is missing or empty",
            "Required field 'access_modifier' is missing or empty",
        ]

    def test_given_negative_line_when_validated_then_error_and_clamped(self) -> None:
        """Bad line numbers are reported and the normalized fact carries 1."""
        # Given
        raw = call("A.B.m", "A.C.n", line=-3)

        # When
        result = validate_fact(raw)

        # Then
        assert result.errors == ["Required field 'line_number' must be >= 1, got -3"]
        assert isinstance(result.fact, MethodCall)
        assert result.fact.line_number == 1

    def test_given_non_integer_count_when_validated_then_error_and_zero(self) -> None:
        """Non-integer numeric fields are reported and normalized to their minimum."""
        # Given
        raw = class_def("App.Svc", method_count="many", field_count=-1)

        # When
        result = validate_fact(raw)

        # Then
        assert result.errors == [
            "Field 'method_count' must be an integer, got 'many'",
            "Field 'field_count' must be >= 0, got -1",
        ]
        assert isinstance(result.fact, ClassDefinition)
        assert result.fact.method_count == 0
        assert result.fact.field_count == 0


class TestValidateFactNormalization:
    """Valid facts come back trimmed and defaulted."""

    def test_given_valid_call_when_validated_then_typed_fact(self) -> None:
        """Optional fields take their defaults."""
        # Given
        raw = {
            "type": "method_call",
            "caller": " App.Web.HomeController.Index ",
            "callee": "App.Core.Service.Run",
            "caller_class": "App.Web.HomeController",
            "callee_class": "App.Core.Service",
            "file_path": "src/HomeController.cs",
            "line_number": "12",
        }

        # When
        result = validate_fact(raw)

        # Then
        assert result.is_valid
        assert result.fact == MethodCall(
            caller="App.Web.HomeController.Index",
            callee="App.Core.Service.Run",
            caller_class="App.Web.HomeController",
            callee_class="App.Core.Service",
            file_path="src/HomeController.cs",
            line_number=12,
        )
        assert result.fact.call_kind == "invocation"
        assert result.fact.caller_namespace == ""

    def test_given_collections_and_bools_as_strings_when_validated_then_parsed(self) -> None:
        """Comma strings become tuples and boolean strings become bools."""
        # Given
        raw = method_def("App.Svc.Run", parameters="int a, string b", is_static="true")

        # When
        result = validate_fact(raw)

        # Then
        assert isinstance(result.fact, MethodDefinition)
        assert result.fact.parameters == ("int a", "string b")
        assert result.fact.is_static is True
        assert result.fact.is_virtual is False

    def test_given_enum_without_underlying_type_when_validated_then_int(self) -> None:
        """A blank underlying type defaults to int."""
        # Given
        raw = {
            "type": "enum_definition",
            "enum": "App.Color",
            "enum_name": "Color",
            "access_modifier": "public",
            "file_path": "src/Color.cs",
            "line_number": 3,
            "values": ["Red", "Green"],
            "underlying_type": "",
        }

        # When
        result = validate_fact(raw)

        # Then
        assert isinstance(result.fact, EnumDefinition)
        assert result.fact.underlying_type == "int"
        assert result.fact.values == ("Red", "Green")


class TestValidateFacts:
    """Batch validation keeps valid facts and every error, keyed by position."""

    def test_given_mixed_batch_when_validated_then_errors_indexed(self) -> None:
        """Invalid facts are excluded and their errors kept by input index."""
        # Given
        batch = [
            class_def("App.A"),
            {"type": "method_call"},
            class_def("App.B", line_number=0),
        ]

        # When
        result = validate_facts(batch)

        # Then
        assert [f.fqn for f in result.facts] == ["App.A"]  # type: ignore[union-attr]
        assert set(result.errors) == {1, 2}
        assert result.invalid_count == 2
        assert len(result.errors[1]) == 6
        assert result.error_messages()[-1] == (
            "fact #2: Required field 'line_number' must be >= 1, got 0"
        )


class TestFactFromMetadata:
    def test_given_invalid_metadata_when_parsed_then_none(self) -> None:
        assert fact_from_metadata({"type": "class_definition", "class": "X"}) is None

    def test_given_valid_metadata_when_parsed_then_fact(self) -> None:
        fact = fact_from_metadata(class_def("App.A"))
        assert isinstance(fact, ClassDefinition)
        assert fact.name == "A"


class TestParseBool:
    """Shared by validation and the extraction filters."""

    @pytest.mark.parametrize("value", [True, "true", "TRUE", " 1 ", 1, "yes", "Y"])
    def test_given_truthy_value_when_parsed_then_true(self, value: Any) -> None:
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", [False, None, "", "false", "0", "no", "maybe"])
    def test_given_other_value_when_parsed_then_false(self, value: Any) -> None:
        assert parse_bool(value) is False
