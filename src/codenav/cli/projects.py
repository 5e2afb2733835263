"""codenav index command - register a project and index it into its own store."""

import sys
from pathlib import Path

import click

from codenav.cli.utils import (
    echo_json,
    extraction_flags,
    extraction_options,
    get_config,
    json_option,
    library_errors,
)
from codenav.core.progress import spinner, status
from codenav.projects import IndexingState, ProjectRegistry


@click.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option("--name", default=None, help="Project display name (default: directory name)")
@extraction_flags
@json_option
@click.pass_context
def index_command(
    ctx: click.Context,
    path: Path,
    name: str | None,
    external: bool | None,
    attribute_calls: bool | None,
    as_json: bool,
) -> None:
    """Index the facts of the project at PATH into its per-project store.

    The store lives under the configured store root, keyed by the project id.
    """
    config = get_config(ctx)
    options = extraction_options(ctx, external, attribute_calls)
    with library_errors(), ProjectRegistry(config) as registry:
        project_id = registry.index_project(path, name, options)
        if as_json:
            final = registry.wait(project_id)
        else:
            with spinner(f"Indexing {path}"):
                final = registry.wait(project_id)
        info = registry.get_project(project_id)

    if as_json:
        echo_json({"project": info.to_dict(), "status": final.to_dict()})
        return

    ok = final.state is IndexingState.COMPLETED
    status(final.message, style="success" if ok and not final.errors else "warning")
    status(f"Project {info.project_id} -> {info.store_path}", style="info")
    for error in final.errors:
        status(error, style="error", indent=2)
    if not ok:
        sys.exit(1)
