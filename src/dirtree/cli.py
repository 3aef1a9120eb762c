"""CLI for the directory tree (browse, edit, MCP server)."""

import json
import os
import sqlite3
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from dirtree.config import DB_ENV_VAR, resolve_db_path
from dirtree.core.database.store import SqliteNodeStore, connect
from dirtree.core.seed import seed_sample_tree
from dirtree.core.tree.outline import render_outline
from dirtree.core.tree.service import TreeService
from dirtree.core.tree.validation import check_tree
from dirtree.errors import TreeError
from dirtree.logging_config import configure_logging
from dirtree.models.dto import parse_order_entries, views
from dirtree.models.node import Node

app = typer.Typer(help="dirtree: a hierarchical directory tree stored in SQLite.")

_state: dict[str, Path | None] = {"db": None}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Database file (default: $DIRTREE_DB or ~/.local/share/dirtree)"),
    ] = None,
) -> None:
    configure_logging(verbose=verbose)
    _state["db"] = db


@contextmanager
def _open_service() -> Iterator[TreeService]:
    """Open the database and yield a service; tree errors exit with code 1."""
    db_path = resolve_db_path(_state["db"])
    if isinstance(db_path, Path):
        db_path.parent.mkdir(parents=True, exist_ok=True)

    conn: sqlite3.Connection = connect(db_path)
    try:
        yield TreeService(SqliteNodeStore(conn))
    except TreeError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e
    finally:
        conn.close()


def _echo_nodes(nodes: list[Node], *, output_json: bool) -> None:
    if output_json:
        typer.echo(json.dumps(views(nodes), indent=2))
        return
    for n in nodes:
        typer.echo(f"  {n.sort_order:>3}. {n.name}  [id={n.id}]  {n.path}")


@app.command()
def seed() -> None:
    """Create the sample tree (Projects, Documents) in an empty database."""
    with _open_service() as service:
        created = seed_sample_tree(service)
        typer.echo(f"Created {len(created)} directories")


@app.command(name="ls")
def list_cmd(
    all_nodes: bool = typer.Option(False, "--all", "-a", help="List every directory"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """List top-level directories (or every directory with --all)."""
    with _open_service() as service:
        nodes = service.list_all() if all_nodes else service.list_roots()
        _echo_nodes(nodes, output_json=output_json)


@app.command()
def children(
    parent_id: int = typer.Argument(..., help="Parent directory id"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """List the direct children of a directory."""
    with _open_service() as service:
        _echo_nodes(service.list_children(parent_id), output_json=output_json)


@app.command()
def create(
    name: str = typer.Argument(..., help="Directory name"),
    parent: Annotated[
        int | None,
        typer.Option("--parent", "-p", help="Parent directory id"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Create a directory after its existing siblings."""
    with _open_service() as service:
        _echo_nodes([service.create(name, parent)], output_json=output_json)


@app.command()
def move(
    node_id: int = typer.Argument(..., help="Directory to move"),
    parent: Annotated[
        int | None,
        typer.Option("--parent", "-p", help="New parent id (omit for top level)"),
    ] = None,
    sort_order: Annotated[
        int | None,
        typer.Option("--sort-order", "-s", help="Position among siblings (default: last)"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Move a directory and its subtree under a new parent."""
    with _open_service() as service:
        _echo_nodes([service.move(node_id, parent, sort_order)], output_json=output_json)


@app.command()
def reorder(
    source: str = typer.Argument(..., help="JSON file with order entries, or - for stdin"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Apply a batch of {id, parent_id, sort_order} entries."""
    try:
        raw = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    except OSError as e:
        logger.error("Cannot read {}: {}", source, e)
        raise typer.Exit(1) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in {}: {}", source, e)
        raise typer.Exit(1) from e

    with _open_service() as service:
        nodes = service.reorder_batch(parse_order_entries(data))
        _echo_nodes(nodes, output_json=output_json)


@app.command(name="rm")
def remove(node_id: int = typer.Argument(..., help="Directory to delete")) -> None:
    """Delete a directory and its whole subtree."""
    with _open_service() as service:
        removed = service.delete(node_id)
        typer.echo(f"Deleted {removed} directories")


@app.command()
def tree(
    node_id: Annotated[
        int | None,
        typer.Option("--node", "-n", help="Only show the subtree under this directory"),
    ] = None,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    show_ids: bool = typer.Option(False, "--ids", help="Show directory ids"),
) -> None:
    """Print the directory tree as a markdown outline."""
    with _open_service() as service:
        trees = service.get_tree(node_id)
        typer.echo(render_outline(trees, max_depth=max_depth, show_ids=show_ids), nl=False)


@app.command()
def check() -> None:
    """Verify paths, sibling orders and parent links of every directory."""
    with _open_service() as service:
        problems = check_tree(service.list_all())
    if problems:
        for problem in problems:
            typer.echo(f"  {problem}")
        raise typer.Exit(1)
    typer.echo("Tree is consistent.")


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from dirtree.mcp.server import run_mcp_server

    if _state["db"] is not None:
        os.environ[DB_ENV_VAR] = str(_state["db"])

    run_mcp_server()
