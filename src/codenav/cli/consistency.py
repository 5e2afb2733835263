"""codenav accuracy / cleanup commands - compare a store against fresh facts."""

from pathlib import Path

import click

from codenav.cli.utils import (
    echo_json,
    extraction_flags,
    extraction_options,
    json_option,
    library_errors,
    make_table,
    open_store,
    print_table,
    store_option,
)
from codenav.consistency import StaleFactCleaner, compare_by_type, load_stored_facts
from codenav.core.progress import pluralize, status
from codenav.extraction import JsonLinesFactExtractor
from codenav.ops import extract_ground_truth


@click.command()
@click.argument("facts", type=click.Path(exists=True, path_type=Path))
@store_option
@extraction_flags
@json_option
@click.pass_context
def accuracy_command(
    ctx: click.Context,
    facts: Path,
    store_path: Path,
    external: bool | None,
    attribute_calls: bool | None,
    as_json: bool,
) -> None:
    """Report precision/recall/F1 of the store against ground truth in FACTS."""
    options = extraction_options(ctx, external, attribute_calls)
    ground_truth = extract_ground_truth(JsonLinesFactExtractor(), facts, options)
    with open_store(ctx, store_path) as store:
        stored = load_stored_facts(store)
    report = compare_by_type(ground_truth.facts, stored.facts)

    if as_json:
        echo_json({**report.to_dict(), "skipped": stored.skipped})
        return

    table = make_table("Type", "Correct", "Missing", "Extra", "Precision", "Recall", "F1")
    rows = [(t.value, m) for t, m in report.per_type.items()]
    rows.append(("overall", report.overall))
    for name, m in rows:
        table.add_row(
            name,
            str(m.correct),
            str(m.missing),
            str(m.extra),
            f"{m.precision:.3f}",
            f"{m.recall:.3f}",
            f"{m.f1:.3f}",
        )
    print_table(table)
    if stored.skipped:
        skipped = pluralize(stored.skipped, "document")
        status(f"{skipped} skipped (not a known fact)", style="warning")


@click.command()
@click.argument("facts", type=click.Path(exists=True, path_type=Path))
@store_option
@extraction_flags
@click.option("--dry-run", is_flag=True, help="Report stale facts without deleting them")
@json_option
@click.pass_context
def cleanup_command(
    ctx: click.Context,
    facts: Path,
    store_path: Path,
    external: bool | None,
    attribute_calls: bool | None,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Delete stored facts that are absent from ground truth in FACTS.

    Nothing is deleted when FACTS cannot be read completely.
    """
    options = extraction_options(ctx, external, attribute_calls)
    ground_truth = extract_ground_truth(JsonLinesFactExtractor(), facts, options)
    with library_errors():
        ground_truth.require_complete()
    with open_store(ctx, store_path) as store:
        report = StaleFactCleaner(store).cleanup(ground_truth.facts, dry_run=dry_run)

    if as_json:
        echo_json(report.to_dict())
        return

    table = make_table("Type", "Kept", "Stale", "Deleted", "Failed")
    for fact_type, counts in report.per_type.items():
        table.add_row(
            fact_type.value,
            str(counts.kept),
            str(counts.stale),
            str(counts.deleted),
            str(counts.failed),
        )
    print_table(table)
    verb = "Would delete" if dry_run else "Deleted"
    amount = report.total_stale if dry_run else report.total_deleted
    status(
        f"{verb} {pluralize(amount, 'stale fact')}",
        style="warning" if report.total_failed else "success",
    )
