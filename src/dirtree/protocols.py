"""Protocols for dependency injection into the tree service."""

from collections.abc import Iterable
from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from dirtree.models.node import Node


@runtime_checkable
class NodeStoreProtocol(Protocol):
    """Persistent directory storage keyed by id."""

    def transaction(self, *, read_only: bool = False) -> AbstractContextManager[None]:
        """Open a unit of work that commits on success and rolls back on error."""
        ...

    def find_by_id(self, node_id: int) -> Node | None:
        """Return the node with this id, or None."""
        ...

    def find_roots_ordered(self) -> list[Node]:
        """Return root nodes ordered by sort_order, then id."""
        ...

    def find_children_ordered(self, parent_id: int) -> list[Node]:
        """Return direct children ordered by sort_order, then id."""
        ...

    def find_all_by_ids(self, ids: Iterable[int]) -> list[Node]:
        """Return the nodes with these ids; unknown ids are omitted."""
        ...

    def find_all(self) -> list[Node]:
        """Return every node, unordered."""
        ...

    def count(self) -> int:
        """Return the number of stored nodes."""
        ...

    def save(self, node: Node) -> Node:
        """Insert when id is None, update otherwise; return the stored value."""
        ...

    def delete(self, node: Node) -> None:
        """Delete a single row. Callers cascade."""
        ...
