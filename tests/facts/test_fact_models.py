"""Tests for facts/models.py - identity keys, metadata flattening, document text."""

from __future__ import annotations

from codenav.facts import (
    FACT_CLASSES,
    ClassDefinition,
    FactType,
    MethodCall,
    MethodDefinition,
    describe_fact,
    fact_to_metadata,
    identity_key,
    validate_fact,
)


def _call(**overrides: object) -> MethodCall:
    values: dict[str, object] = {
        "caller": "App.A.Run",
        "callee": "App.B.Go",
        "caller_class": "App.A",
        "callee_class": "App.B",
        "file_path": "src/A.cs",
        "line_number": 7,
    }
    values.update(overrides)
    return MethodCall(**values)  # type: ignore[arg-type]


class TestIdentityKey:
    """Identity keys drive de-duplication and accuracy comparison."""

    def test_given_call_when_keyed_then_caller_callee_and_site(self) -> None:
        """Calls are keyed by caller->callee@file:line."""
        # Given
        fact = _call()

        # When
        key = identity_key(fact)

        # Then
        assert key == "App.A.Run->App.B.Go@src/A.cs:7"

    def test_given_same_call_on_other_line_when_keyed_then_distinct(self) -> None:
        """Two call sites of the same pair are different facts."""
        # Given / When / Then
        assert identity_key(_call()) != identity_key(_call(line_number=8))

    def test_given_definition_when_keyed_then_fqn(self) -> None:
        """Definitions are keyed by fully-qualified name."""
        # Given
        fact = ClassDefinition(
            fqn="App.A", name="A", access_modifier="public", file_path="a.cs", line_number=1
        )

        # When / Then
        assert identity_key(fact) == "App.A"


class TestFactToMetadata:
    """Metadata flattening uses the stored key names."""

    def test_given_method_definition_when_flattened_then_store_keys(self) -> None:
        """FQN, name and class map to method, method_name and class."""
        # Given
        fact = MethodDefinition(
            fqn="App.A.Run",
            name="Run",
            class_fqn="App.A",
            return_type="void",
            access_modifier="public",
            file_path="a.cs",
            line_number=3,
            parameters=("int x", "string y"),
            is_static=True,
        )

        # When
        meta = fact_to_metadata(fact)

        # Then
        assert meta["type"] == "method_definition"
        assert meta["method"] == "App.A.Run"
        assert meta["method_name"] == "Run"
        assert meta["class"] == "App.A"
        assert meta["parameters"] == "int x,string y"
        assert meta["is_static"] == "true"
        assert meta["is_virtual"] == "false"
        assert meta["line_number"] == "3"

    def test_given_flattened_fact_when_validated_then_same_fact(self) -> None:
        """Stored metadata parses back into the fact it came from."""
        # Given
        fact = _call(call_kind="attribute", is_external=True, caller_namespace="App")

        # When
        parsed = validate_fact(fact_to_metadata(fact)).fact

        # Then
        assert parsed == fact

    def test_every_fact_type_has_a_class(self) -> None:
        assert set(FACT_CLASSES) == set(FactType)
        assert all(cls.fact_type is t for t, cls in FACT_CLASSES.items())


class TestDescribeFact:
    """Document text is what text search matches against."""

    def test_given_call_when_described_then_mentions_both_methods(self) -> None:
        # Given / When
        text = describe_fact(_call())

        # Then
        assert text == "Method App.A.Run calls App.B.Go at src/A.cs:7"

    def test_given_attribute_call_when_described_then_kind_shown(self) -> None:
        assert "(attribute)" in describe_fact(_call(call_kind="attribute"))

    def test_given_class_with_base_when_described_then_extends_shown(self) -> None:
        # Given
        fact = ClassDefinition(
            fqn="App.Dog",
            name="Dog",
            access_modifier="public",
            file_path="dog.cs",
            line_number=1,
            base_class="App.Animal",
            interfaces=("App.IPet",),
        )

        # When
        text = describe_fact(fact)

        # Then
        assert text == "public class App.Dog extends App.Animal implements App.IPet at dog.cs:1"

    def test_given_method_when_class_name_read_then_simple_name(self) -> None:
        fact = MethodDefinition(
            fqn="App.Web.HomeController.Index",
            name="Index",
            class_fqn="App.Web.HomeController",
            return_type="void",
            access_modifier="public",
            file_path="h.cs",
            line_number=1,
        )
        assert fact.class_name == "HomeController"
