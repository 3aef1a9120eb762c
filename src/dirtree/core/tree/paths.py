"""Materialized path computation and subtree refresh."""

from collections import deque
from dataclasses import replace

from loguru import logger

from dirtree.errors import NotFoundError
from dirtree.models.node import Node
from dirtree.protocols import NodeStoreProtocol

SEPARATOR = "/"


def join_path(parent_path: str | None, name: str) -> str:
    """Return ``/name`` for a root, ``parent_path/name`` otherwise."""
    if parent_path is None:
        return SEPARATOR + name
    return parent_path + SEPARATOR + name


def compute_path(store: NodeStoreProtocol, node: Node) -> str:
    """Compute a node's path from its parent's stored path.

    The parent's path must already be consistent.
    """
    if node.parent_id is None:
        return join_path(None, node.name)
    parent = store.find_by_id(node.parent_id)
    if parent is None:
        raise NotFoundError(node.parent_id, what="Parent directory")
    return join_path(parent.path, node.name)


def refresh_subtree(store: NodeStoreProtocol, root: Node) -> int:
    """Recompute and persist ``path`` for every descendant of ``root``.

    Walks breadth-first so each parent is written before its children.
    ``root`` itself must already carry its final path.

    Returns:
        Number of descendants whose path changed.
    """
    if root.id is None:
        return 0

    changed = 0
    queue: deque[Node] = deque([root])
    while queue:
        parent = queue.popleft()
        assert parent.id is not None
        for child in store.find_children_ordered(parent.id):
            new_path = join_path(parent.path, child.name)
            if new_path != child.path:
                child = store.save(replace(child, path=new_path))
                changed += 1
                logger.debug("Path of {} is now {}", child.id, new_path)
            queue.append(child)
    return changed
