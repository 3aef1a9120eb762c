"""Domain models for the directory tree."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Node:
    """A single directory in the tree.

    ``id`` is ``None`` until the store assigns one on first save.
    """

    name: str
    parent_id: int | None
    sort_order: int
    path: str
    id: int | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


@dataclass(frozen=True)
class TreeNode:
    """A directory with its children embedded, in display order."""

    node: Node
    children: tuple["TreeNode", ...] = ()

    def walk(self) -> "list[TreeNode]":
        """Return this node and all descendants, depth-first pre-order."""
        out: list[TreeNode] = []
        stack = [self]
        while stack:
            current = stack.pop()
            out.append(current)
            stack.extend(reversed(current.children))
        return out
