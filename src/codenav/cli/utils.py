"""CLI utilities."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

import click
from rich.console import Console
from rich.table import Table

from codenav.config.models import CodeNavConfig
from codenav.core.errors import CodeNavError
from codenav.extraction import ExtractionOptions
from codenav.facts import Fact, fact_to_metadata
from codenav.store import SqliteDocumentStore

F = TypeVar("F", bound=Callable[..., Any])

DEFAULT_STORE = Path(".codenav") / "store.db"


def store_option(fn: F) -> F:
    """Add the --store option shared by every store command."""
    return click.option(
        "--store",
        "store_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=DEFAULT_STORE,
        show_default=True,
        help="SQLite store file",
    )(fn)


def json_option(fn: F) -> F:
    return click.option("--json", "as_json", is_flag=True, help="Output as JSON")(fn)


def get_config(ctx: click.Context) -> CodeNavConfig:
    obj = ctx.find_object(dict) or {}
    config = obj.get("config")
    return config if isinstance(config, CodeNavConfig) else CodeNavConfig()


@contextmanager
def library_errors() -> Iterator[None]:
    """Turn library errors into click errors (exit code 1, message on stderr)."""
    try:
        yield
    except CodeNavError as e:
        raise click.ClickException(f"{e.error_name}: {e.message}") from e


@contextmanager
def open_store(ctx: click.Context, store_path: Path) -> Iterator[SqliteDocumentStore]:
    with library_errors():
        store = SqliteDocumentStore(store_path, get_config(ctx).store)
        try:
            yield store
        finally:
            store.close()


def fact_dict(fact: Fact) -> dict[str, str]:
    return fact_to_metadata(fact)


def to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {k: to_jsonable(v) for k, v in dataclasses.asdict(value).items()}
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [to_jsonable(v) for v in value]
    if isinstance(value, Path):
        return str(value)
    return value


def echo_json(data: Any) -> None:
    click.echo(json.dumps(to_jsonable(data), indent=2, sort_keys=True))


def make_table(*columns: str) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 1), pad_edge=False)
    for column in columns:
        table.add_column(column)
    return table


def print_table(table: Table) -> None:
    Console().print(table)


def extraction_flags(fn: F) -> F:
    """Add --external/--attribute-calls overrides of the configured extraction options."""
    fn = click.option(
        "--attribute-calls/--no-attribute-calls",
        "attribute_calls",
        default=None,
        help="Keep calls made from attributes and initializers",
    )(fn)
    return click.option(
        "--external/--no-external",
        "external",
        default=None,
        help="Keep calls into code outside the project",
    )(fn)


def extraction_options(
    ctx: click.Context, external: bool | None, attribute_calls: bool | None
) -> ExtractionOptions:
    """Options from config, overridden by explicit flags."""
    defaults = ExtractionOptions.from_config(get_config(ctx).indexing)
    return ExtractionOptions(
        record_external_calls=defaults.record_external_calls if external is None else external,
        attribute_initializer_calls=(
            defaults.attribute_initializer_calls if attribute_calls is None else attribute_calls
        ),
    )
