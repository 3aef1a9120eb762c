"""MCP server exposing the directory tree operations as tools."""

import sqlite3
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from dirtree.config import resolve_db_path
from dirtree.core.database.store import SqliteNodeStore, connect
from dirtree.core.tree.outline import render_outline
from dirtree.core.tree.service import TreeService
from dirtree.errors import InvalidInputError, TreeError
from dirtree.models.dto import NodeView, parse_order_entries, tree_as_dict, views

T = TypeVar("T")

OUTPUT_FORMATS = ("json", "markdown")


def _guarded(action: str, func: Callable[[], T]) -> T | dict[str, Any]:
    """Run ``func``, turning tree errors into an error payload."""
    try:
        return func()
    except TreeError as e:
        logger.warning("{} failed: {}", action, e)
        return {"error": str(e), "status": e.status}


# --- Core functions (testable without MCP context) ---


def directory_list_all(service: TreeService) -> dict[str, Any]:
    """List every directory (GET /directories)."""

    def run() -> dict[str, Any]:
        nodes = service.list_all()
        return {"directories": views(nodes), "count": len(nodes)}

    return _guarded("List all", run)


def directory_list_roots(service: TreeService) -> dict[str, Any]:
    """List root directories in display order (GET /directories/roots)."""

    def run() -> dict[str, Any]:
        nodes = service.list_roots()
        return {"directories": views(nodes), "count": len(nodes)}

    return _guarded("List roots", run)


def directory_list_children(service: TreeService, *, parent_id: int) -> dict[str, Any]:
    """List direct children in display order (GET /directories/{id}/children)."""

    def run() -> dict[str, Any]:
        nodes = service.list_children(parent_id)
        return {"parent_id": parent_id, "directories": views(nodes), "count": len(nodes)}

    return _guarded("List children", run)


def directory_create(
    service: TreeService,
    *,
    name: str,
    parent_id: int | None = None,
) -> dict[str, Any]:
    """Create a directory as the last child of its parent (POST /directories)."""
    return _guarded(
        "Create",
        lambda: {"directory": NodeView.from_node(service.create(name, parent_id)).as_dict()},
    )


def directory_move(
    service: TreeService,
    *,
    node_id: int,
    parent_id: int | None = None,
    sort_order: int | None = None,
) -> dict[str, Any]:
    """Move a directory under a new parent (PUT /directories/{id}/move).

    Args:
        node_id: Directory to move.
        parent_id: New parent, or None to make it a root.
        sort_order: Position among the new siblings (None = last).
    """
    return _guarded(
        "Move",
        lambda: {
            "directory": NodeView.from_node(
                service.move(node_id, parent_id, sort_order)
            ).as_dict()
        },
    )


def directory_reorder(service: TreeService, *, entries: list[dict[str, Any]]) -> dict[str, Any]:
    """Re-parent and re-sort many directories at once (PUT /directories/order).

    Args:
        entries: List of ``{"id", "parent_id", "sort_order"}`` objects.
    """

    def run() -> dict[str, Any]:
        nodes = service.reorder_batch(parse_order_entries(entries))
        return {"directories": views(nodes), "count": len(nodes)}

    return _guarded("Reorder", run)


def directory_delete(service: TreeService, *, node_id: int) -> dict[str, Any]:
    """Delete a directory and its subtree (DELETE /directories/{id})."""
    return _guarded(
        "Delete",
        lambda: {"deleted": service.delete(node_id), "node_id": node_id},
    )


def directory_tree(
    service: TreeService,
    *,
    node_id: int | None = None,
    max_depth: int | None = None,
    output_format: str = "json",
) -> dict[str, Any]:
    """Return the nested tree (or one subtree) as JSON or a markdown outline."""

    def run() -> dict[str, Any]:
        if output_format not in OUTPUT_FORMATS:
            msg = f"output_format must be one of {', '.join(OUTPUT_FORMATS)}, got {output_format!r}"
            raise InvalidInputError(msg)
        trees = service.get_tree(node_id)
        if output_format == "markdown":
            return {"content": render_outline(trees, max_depth=max_depth, show_ids=True)}
        return {"tree": [tree_as_dict(t) for t in trees]}

    return _guarded("Tree", run)


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    conn: sqlite3.Connection
    service: TreeService


def _resolve_db() -> Path | str:
    db_path = resolve_db_path()
    if isinstance(db_path, Path):
        db_path.parent.mkdir(parents=True, exist_ok=True)
    return db_path


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Open database on startup, close on shutdown."""
    db_path = _resolve_db()
    conn = connect(db_path)
    logger.info("Serving directory tree from {}", db_path)
    try:
        yield ServerContext(conn=conn, service=TreeService(SqliteNodeStore(conn)))
    finally:
        conn.close()


mcp_server = FastMCP(
    "dirtree",
    instructions="""\
A hierarchical directory tree. Every directory has an integer id, a name, an
optional parent, a position (sort_order, 1-based) among its siblings and a
materialized path such as "/Projects/Web".

## Tips
- Use directory_tree_tool with output_format="markdown" for an overview.
- Moving a directory moves its whole subtree; paths update automatically.
- A directory cannot be moved under itself or one of its descendants.
- Deleting a directory deletes its whole subtree.
""",
    lifespan=server_lifespan,
)


def _service(mcp_ctx: Context) -> TreeService:
    ctx: ServerContext = mcp_ctx.request_context.lifespan_context  # type: ignore[assignment]
    return ctx.service


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def directory_list_all_tool(ctx: Context) -> dict[str, Any]:
    """List every directory with id, name, parent_id, sort_order and path."""
    return directory_list_all(_service(ctx))


@mcp_server.tool()
async def directory_list_roots_tool(ctx: Context) -> dict[str, Any]:
    """List top-level directories in display order."""
    return directory_list_roots(_service(ctx))


@mcp_server.tool()
async def directory_list_children_tool(ctx: Context, parent_id: int) -> dict[str, Any]:
    """List the direct children of a directory in display order.

    Args:
        parent_id: Directory whose children to list.
    """
    return directory_list_children(_service(ctx), parent_id=parent_id)


@mcp_server.tool()
async def directory_create_tool(
    ctx: Context,
    name: str,
    parent_id: int | None = None,
) -> dict[str, Any]:
    """Create a directory. It is placed after its existing siblings.

    Args:
        name: Directory name (surrounding whitespace is trimmed).
        parent_id: Parent directory, or None for a top-level directory.
    """
    return directory_create(_service(ctx), name=name, parent_id=parent_id)


@mcp_server.tool()
async def directory_move_tool(
    ctx: Context,
    node_id: int,
    parent_id: int | None = None,
    sort_order: int | None = None,
) -> dict[str, Any]:
    """Move a directory (with its subtree) under a new parent.

    Args:
        node_id: Directory to move.
        parent_id: New parent, or None to make it top-level.
        sort_order: 1-based position among the new siblings (None = last).
    """
    return directory_move(_service(ctx), node_id=node_id, parent_id=parent_id, sort_order=sort_order)


@mcp_server.tool()
async def directory_reorder_tool(ctx: Context, entries: list[dict[str, Any]]) -> dict[str, Any]:
    """Re-parent and re-sort several directories in one step.

    Args:
        entries: Objects with "id", "parent_id" (null for top-level) and
            "sort_order". Affected sibling groups are renumbered 1..k.
    """
    return directory_reorder(_service(ctx), entries=entries)


@mcp_server.tool()
async def directory_delete_tool(ctx: Context, node_id: int) -> dict[str, Any]:
    """Delete a directory and everything below it.

    Args:
        node_id: Directory to delete.
    """
    return directory_delete(_service(ctx), node_id=node_id)


@mcp_server.tool()
async def directory_tree_tool(
    ctx: Context,
    node_id: int | None = None,
    max_depth: int | None = None,
    output_format: str = "json",
) -> dict[str, Any]:
    """Show the directory tree, or the subtree under one directory.

    Args:
        node_id: Subtree root (None = whole tree).
        max_depth: Levels to include in markdown output (None = unlimited).
        output_format: "json" (nested) or "markdown" (outline).
    """
    return directory_tree(
        _service(ctx), node_id=node_id, max_depth=max_depth, output_format=output_format
    )


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from dirtree.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
