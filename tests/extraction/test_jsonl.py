"""Tests for extraction - JSON lines front end and extraction options."""

from __future__ import annotations

from pathlib import Path

import pytest

from codenav.config.models import IndexingConfig
from codenav.extraction import ExtractionOptions, JsonLinesFactExtractor
from factories import call, class_def, write_jsonl


class TestExtractionOptions:
    """Capability switches applied to raw facts."""

    def test_given_config_when_built_then_copies_switches(self) -> None:
        # Given
        config = IndexingConfig(record_external_calls=False, attribute_initializer_calls=True)

        # When
        options = ExtractionOptions.from_config(config)

        # Then
        assert options.record_external_calls is False
        assert options.attribute_initializer_calls is True

    @pytest.mark.parametrize(
        ("overrides", "options", "accepted"),
        [
            ({}, ExtractionOptions(), True),
            ({"call_kind": "attribute"}, ExtractionOptions(), False),
            (
                {"call_kind": "initializer"},
                ExtractionOptions(attribute_initializer_calls=True),
                True,
            ),
            ({"is_external": "true"}, ExtractionOptions(record_external_calls=False), False),
            ({"is_external": True}, ExtractionOptions(), True),
            ({"is_external": "false"}, ExtractionOptions(record_external_calls=False), True),
            ({"is_external": " Y "}, ExtractionOptions(record_external_calls=False), False),
        ],
    )
    def test_given_call_when_filtered_then_options_decide(
        self, overrides: dict[str, object], options: ExtractionOptions, accepted: bool
    ) -> None:
        """Attribute/initializer and external calls follow their switches."""
        # Given
        raw = call("A.B.m", "A.C.n", **overrides)

        # When / Then
        assert options.accepts(raw) is accepted

    def test_given_definition_when_filtered_then_always_accepted(self) -> None:
        options = ExtractionOptions(record_external_calls=False)
        assert options.accepts(class_def("App.A")) is True


class TestJsonLinesFactExtractor:
    """Reading facts from .jsonl files."""

    def test_given_single_file_when_extracted_then_facts_returned(self, tmp_path: Path) -> None:
        # Given
        path = write_jsonl(tmp_path / "facts.jsonl", [class_def("App.A"), call("App.A.m", "B.C.n")])

        # When
        result = JsonLinesFactExtractor().extract(path, ExtractionOptions())

        # Then
        assert result.files_processed == 1
        assert [f["type"] for f in result.facts] == ["class_definition", "method_call"]
        assert result.errors == []

    def test_given_directory_when_discovered_then_only_fact_files_in_name_order(
        self, tmp_path: Path
    ) -> None:
        """facts.jsonl and *.facts.jsonl are read; other files are ignored."""
        # Given
        write_jsonl(tmp_path / "web.facts.jsonl", [class_def("App.Web")])
        write_jsonl(tmp_path / "facts.jsonl", [class_def("App.Core")])
        write_jsonl(tmp_path / "notes.jsonl", [class_def("App.Ignored")])
        write_jsonl(tmp_path / "sub" / "facts.jsonl", [class_def("App.Nested")])

        # When
        extractor = JsonLinesFactExtractor()
        files = extractor.discover(tmp_path)
        result = extractor.extract(tmp_path, ExtractionOptions())

        # Then
        assert [f.name for f in files] == ["facts.jsonl", "web.facts.jsonl"]
        assert [f["class"] for f in result.facts] == ["App.Core", "App.Web"]

    def test_given_bad_lines_when_extracted_then_reported_and_skipped(
        self, tmp_path: Path
    ) -> None:
        """Malformed lines are errors; blank lines are ignored."""
        # Given
        path = tmp_path / "facts.jsonl"
        path.write_text('{"type": "class_definition"}\n\nnot json\n[1, 2]\n')

        # When
        result = JsonLinesFactExtractor().extract(path, ExtractionOptions())

        # Then
        assert len(result.facts) == 1
        assert len(result.errors) == 2
        assert result.errors[0].startswith(f"{path}:3: invalid JSON")
        assert result.errors[1] == f"{path}:4: expected a JSON object"

    def test_given_empty_directory_when_extracted_then_error(self, tmp_path: Path) -> None:
        # Given / When
        result = JsonLinesFactExtractor().extract(tmp_path, ExtractionOptions())

        # Then
        assert result.facts == []
        assert result.errors == [f"No fact files found at {tmp_path}"]

    def test_given_options_when_extracted_then_filtered_calls_dropped(
        self, tmp_path: Path
    ) -> None:
        # Given
        path = write_jsonl(
            tmp_path / "facts.jsonl",
            [call("A.B.m", "A.C.n"), call("A.B.m", "A.C.attr", call_kind="attribute")],
        )

        # When
        result = JsonLinesFactExtractor().extract(path, ExtractionOptions())

        # Then
        assert [f["callee"] for f in result.facts] == ["A.C.n"]
