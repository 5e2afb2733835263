"""codenav CLI - codenav command."""

import click

from codenav import __version__
from codenav.cli.consistency import accuracy_command, cleanup_command
from codenav.cli.ingest import ingest_command
from codenav.cli.projects import index_command
from codenav.cli.query import (
    callees_command,
    callers_command,
    class_command,
    classes_command,
    entry_points_command,
    method_command,
    methods_command,
    references_command,
    search_command,
)
from codenav.cli.utils import library_errors
from codenav.config import load_config
from codenav.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="codenav")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """codenav - navigate call graphs and code facts stored per project."""
    ctx.ensure_object(dict)
    with library_errors():
        config = load_config()
    if verbose:
        config.logging.level = "DEBUG"
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config
    configure_logging(config=config.logging)


cli.add_command(ingest_command, name="ingest")
cli.add_command(index_command, name="index")
cli.add_command(classes_command, name="classes")
cli.add_command(methods_command, name="methods")
cli.add_command(entry_points_command, name="entry-points")
cli.add_command(method_command, name="method")
cli.add_command(class_command, name="class")
cli.add_command(callers_command, name="callers")
cli.add_command(callees_command, name="callees")
cli.add_command(references_command, name="references")
cli.add_command(accuracy_command, name="accuracy")
cli.add_command(cleanup_command, name="cleanup")
cli.add_command(search_command, name="search")


if __name__ == "__main__":
    cli()
