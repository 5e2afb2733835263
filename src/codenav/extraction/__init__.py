"""Extraction front-end contract and the JSON-lines fact source."""

from codenav.extraction.jsonl import JsonLinesFactExtractor
from codenav.extraction.models import ExtractionOptions, ExtractionResult, FactExtractor

__all__ = [
    "ExtractionOptions",
    "ExtractionResult",
    "FactExtractor",
    "JsonLinesFactExtractor",
]
