"""codenav ingest command - validate and store facts."""

from pathlib import Path

import click

from codenav.cli.utils import (
    echo_json,
    extraction_flags,
    extraction_options,
    json_option,
    open_store,
    store_option,
)
from codenav.core.progress import pluralize, spinner, status
from codenav.extraction import JsonLinesFactExtractor
from codenav.index import FactWriter


@click.command()
@click.argument("facts", type=click.Path(exists=True, path_type=Path))
@store_option
@extraction_flags
@json_option
@click.pass_context
def ingest_command(
    ctx: click.Context,
    facts: Path,
    store_path: Path,
    external: bool | None,
    attribute_calls: bool | None,
    as_json: bool,
) -> None:
    """Validate facts from FACTS (a .jsonl file or directory) and write them to the store.

    Invalid facts are rejected with every error reported; facts already in the
    store are skipped.
    """
    options = extraction_options(ctx, external, attribute_calls)
    extraction = JsonLinesFactExtractor().extract(facts, options)

    with open_store(ctx, store_path) as store:
        if as_json:
            result = FactWriter(store).ingest(extraction.facts)
        else:
            with spinner(f"Ingesting {pluralize(len(extraction.facts), 'fact')}"):
                result = FactWriter(store).ingest(extraction.facts)

    errors = [*extraction.errors, *result.errors]
    if as_json:
        echo_json(
            {
                "written": result.written,
                "duplicates": result.duplicates,
                "invalid": result.invalid,
                "counts": result.counts,
                "errors": errors,
            }
        )
        return

    status(
        f"Wrote {pluralize(result.written, 'fact')} "
        f"({result.duplicates} duplicate, {result.invalid} invalid)",
        style="success" if not errors else "warning",
    )
    for error in errors:
        status(error, style="error", indent=2)
