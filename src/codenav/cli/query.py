"""codenav query commands - listings, lookups, traversal, references, search."""

from pathlib import Path

import click

from codenav.cli.utils import (
    echo_json,
    fact_dict,
    get_config,
    json_option,
    library_errors,
    make_table,
    open_store,
    print_table,
    store_option,
)
from codenav.core.progress import pluralize, status
from codenav.index import CallGraph, EnumerationService, TraversalResult
from codenav.ops import check_search_limit
from codenav.store import DocumentStore


def _enumeration(ctx: click.Context, store: DocumentStore) -> EnumerationService:
    return EnumerationService(store, limit_max=get_config(ctx).limits.list_max)


def _page_footer(total: int, offset: int, count: int) -> None:
    if count < total:
        status(f"Showing {offset + 1}-{offset + count} of {total}", style="info")


@click.command()
@store_option
@click.option("--namespace", default=None, help="Namespace (case-insensitive exact match)")
@click.option("--limit", type=int, default=None, help="Page size")
@click.option("--offset", type=int, default=0, show_default=True)
@json_option
@click.pass_context
def classes_command(
    ctx: click.Context,
    store_path: Path,
    namespace: str | None,
    limit: int | None,
    offset: int,
    as_json: bool,
) -> None:
    """List class definitions, sorted by fully-qualified name."""
    page_size = get_config(ctx).limits.list_default if limit is None else limit
    with open_store(ctx, store_path) as store:
        page = _enumeration(ctx, store).list_classes(namespace, page_size, offset)

    if as_json:
        echo_json(
            {
                "items": [fact_dict(c) for c in page.items],
                "total_count": page.total_count,
                "count": page.count,
                "offset": page.offset,
                "limit": page.limit,
            }
        )
        return

    table = make_table("Class", "Namespace", "Access", "Location")
    for cls in page.items:
        location = f"{cls.file_path}:{cls.line_number}"
        table.add_row(cls.fqn, cls.namespace, cls.access_modifier, location)
    print_table(table)
    _page_footer(page.total_count, page.offset, page.count)


@click.command()
@store_option
@click.option(
    "--class",
    "class_name",
    default=None,
    help="Class simple name or FQN (case-insensitive exact match)",
)
@click.option("--namespace", default=None, help="Namespace (case-insensitive exact match)")
@click.option("--limit", type=int, default=None, help="Page size")
@click.option("--offset", type=int, default=0, show_default=True)
@json_option
@click.pass_context
def methods_command(
    ctx: click.Context,
    store_path: Path,
    class_name: str | None,
    namespace: str | None,
    limit: int | None,
    offset: int,
    as_json: bool,
) -> None:
    """List method definitions, sorted by fully-qualified name."""
    page_size = get_config(ctx).limits.list_default if limit is None else limit
    with open_store(ctx, store_path) as store:
        page = _enumeration(ctx, store).list_methods(class_name, namespace, page_size, offset)

    if as_json:
        echo_json(
            {
                "items": [fact_dict(m) for m in page.items],
                "total_count": page.total_count,
                "count": page.count,
                "offset": page.offset,
                "limit": page.limit,
            }
        )
        return

    table = make_table("Method", "Returns", "Access", "Location")
    for method in page.items:
        table.add_row(
            method.fqn,
            method.return_type,
            method.access_modifier,
            f"{method.file_path}:{method.line_number}",
        )
    print_table(table)
    _page_footer(page.total_count, page.offset, page.count)


@click.command()
@store_option
@click.option("--type", "entry_type", default=None, help="Main or Controller")
@json_option
@click.pass_context
def entry_points_command(
    ctx: click.Context, store_path: Path, entry_type: str | None, as_json: bool
) -> None:
    """List Main methods and controller-convention methods."""
    with open_store(ctx, store_path) as store:
        entries = _enumeration(ctx, store).list_entry_points(entry_type)

    if as_json:
        echo_json(
            [
                {
                    "method": e.method.fqn,
                    "class": e.method.class_fqn,
                    "entry_type": e.entry_type,
                    "http_method": e.http_method,
                    "route": e.route,
                    "file_path": e.method.file_path,
                    "line_number": e.method.line_number,
                }
                for e in entries
            ]
        )
        return

    table = make_table("Type", "Method", "Location")
    for e in entries:
        table.add_row(e.entry_type, e.method.fqn, f"{e.method.file_path}:{e.method.line_number}")
    print_table(table)


@click.command()
@click.argument("fqn")
@store_option
@json_option
@click.pass_context
def method_command(ctx: click.Context, fqn: str, store_path: Path, as_json: bool) -> None:
    """Show one method definition."""
    with open_store(ctx, store_path) as store:
        method = _enumeration(ctx, store).get_method(fqn)

    if as_json:
        echo_json(fact_dict(method))
        return
    table = make_table("Field", "Value")
    for key, value in fact_dict(method).items():
        table.add_row(key, value)
    print_table(table)


@click.command()
@click.argument("fqn")
@store_option
@json_option
@click.pass_context
def class_command(ctx: click.Context, fqn: str, store_path: Path, as_json: bool) -> None:
    """Show one class definition and its methods."""
    with open_store(ctx, store_path) as store:
        service = _enumeration(ctx, store)
        cls = service.get_class(fqn)
        methods = service.get_class_methods(fqn)

    if as_json:
        echo_json({**fact_dict(cls), "methods": [m.fqn for m in methods]})
        return
    table = make_table("Field", "Value")
    for key, value in fact_dict(cls).items():
        table.add_row(key, value)
    print_table(table)
    status(f"{pluralize(len(methods), 'method')}:", style="info")
    for method in methods:
        status(method.fqn, indent=4)


def _print_traversal(result: TraversalResult, as_json: bool) -> None:
    if as_json:
        echo_json(
            {
                "method_fqn": result.method_fqn,
                "direction": result.direction,
                "entries": result.entries,
                "total_count": result.total_count,
                "max_depth": result.max_depth,
            }
        )
        return
    table = make_table("Depth", "Method", "Class", "Call site")
    for entry in result.entries:
        table.add_row(
            str(entry.depth),
            entry.method_fqn,
            entry.class_fqn,
            f"{entry.file_path}:{entry.line_number}",
        )
    print_table(table)
    status(
        f"{pluralize(result.total_count, 'entry', 'entries')}, max depth {result.max_depth}",
        style="info",
    )


def _traverse(
    ctx: click.Context,
    direction: str,
    fqn: str,
    store_path: Path,
    depth: int | None,
    include_self: bool,
) -> TraversalResult:
    limits = get_config(ctx).limits
    levels = limits.depth_default if depth is None else depth
    with open_store(ctx, store_path) as store:
        graph = CallGraph.from_store(store)
        walk = graph.get_callers if direction == "callers" else graph.get_callees
        return walk(fqn, levels, include_self, depth_limit=limits.depth_max)


@click.command()
@click.argument("fqn")
@store_option
@click.option("--depth", type=int, default=None, help="Levels to traverse (default from config)")
@click.option("--include-self", is_flag=True, help="Include the method itself at depth 0")
@json_option
@click.pass_context
def callers_command(
    ctx: click.Context,
    fqn: str,
    store_path: Path,
    depth: int | None,
    include_self: bool,
    as_json: bool,
) -> None:
    """Show methods that call FQN, breadth-first."""
    _print_traversal(_traverse(ctx, "callers", fqn, store_path, depth, include_self), as_json)


@click.command()
@click.argument("fqn")
@store_option
@click.option("--depth", type=int, default=None, help="Levels to traverse (default from config)")
@click.option("--include-self", is_flag=True, help="Include the method itself at depth 0")
@json_option
@click.pass_context
def callees_command(
    ctx: click.Context,
    fqn: str,
    store_path: Path,
    depth: int | None,
    include_self: bool,
    as_json: bool,
) -> None:
    """Show methods called by FQN, breadth-first."""
    _print_traversal(_traverse(ctx, "callees", fqn, store_path, depth, include_self), as_json)


@click.command()
@click.argument("fqn")
@store_option
@click.option("--type", "relationship_type", default=None, help="calls, inherits, or implements")
@json_option
@click.pass_context
def references_command(
    ctx: click.Context,
    fqn: str,
    store_path: Path,
    relationship_type: str | None,
    as_json: bool,
) -> None:
    """Show classes that call into, inherit from, or implement FQN."""
    with open_store(ctx, store_path) as store:
        refs = CallGraph.from_store(store).get_class_references(fqn, relationship_type)

    if as_json:
        echo_json(
            {
                "class_fqn": refs.class_fqn,
                "references": refs.references,
                "total_count": refs.total_count,
            }
        )
        return
    table = make_table("Relationship", "Class", "Location")
    for ref in refs.references:
        table.add_row(ref.relationship_type, ref.class_fqn, f"{ref.file_path}:{ref.line_number}")
    print_table(table)


@click.command()
@click.argument("query")
@store_option
@click.option("--limit", type=int, default=None, help="Maximum results")
@json_option
@click.pass_context
def search_command(
    ctx: click.Context, query: str, store_path: Path, limit: int | None, as_json: bool
) -> None:
    """Search stored fact text for QUERY terms."""
    count = get_config(ctx).limits.search_default if limit is None else limit
    with library_errors():
        check_search_limit(count)
    with open_store(ctx, store_path) as store:
        hits = store.search_text(query, count)

    if as_json:
        echo_json([{"id": h.id, "score": h.score, "content": h.content} for h in hits])
        return
    table = make_table("Score", "Text")
    for hit in hits:
        table.add_row(f"{hit.score:g}", hit.content)
    print_table(table)
