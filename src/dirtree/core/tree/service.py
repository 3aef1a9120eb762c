"""Transactional operations on the directory tree."""

from collections import defaultdict, deque
from collections.abc import Sequence
from dataclasses import replace

from loguru import logger

from dirtree.core.tree.cycles import find_cycle, would_create_cycle
from dirtree.core.tree.paths import compute_path, refresh_subtree
from dirtree.errors import CyclicMoveError, InvalidInputError, NotFoundError
from dirtree.models.dto import OrderEntry
from dirtree.models.node import Node, TreeNode
from dirtree.protocols import NodeStoreProtocol


def _sibling_key(node: Node) -> tuple[int, int]:
    return node.sort_order, node.id or 0


def _check_sort_order(sort_order: int) -> None:
    if sort_order < 1:
        msg = f"sort_order must be 1 or greater, got {sort_order}"
        raise InvalidInputError(msg)


class TreeService:
    """Create, move, reorder and delete directories.

    Every public method runs in one store transaction. Mutations keep paths
    consistent, sibling sort orders distinct and the parent graph acyclic.
    """

    def __init__(self, store: NodeStoreProtocol) -> None:
        self.store = store

    # --- Queries ---

    def list_all(self) -> list[Node]:
        with self.store.transaction(read_only=True):
            return self.store.find_all()

    def list_roots(self) -> list[Node]:
        with self.store.transaction(read_only=True):
            return self.store.find_roots_ordered()

    def list_children(self, parent_id: int) -> list[Node]:
        with self.store.transaction(read_only=True):
            self._require(parent_id, what="Parent directory")
            return self.store.find_children_ordered(parent_id)

    def get(self, node_id: int) -> Node:
        with self.store.transaction(read_only=True):
            return self._require(node_id)

    def get_tree(self, root_id: int | None = None) -> list[TreeNode]:
        """Return the nested tree, or just the subtree under ``root_id``."""
        with self.store.transaction(read_only=True):
            nodes = self.store.find_all()

        by_parent: dict[int | None, list[Node]] = defaultdict(list)
        by_id: dict[int, Node] = {}
        for n in nodes:
            by_parent[n.parent_id].append(n)
            if n.id is not None:
                by_id[n.id] = n
        for group in by_parent.values():
            group.sort(key=_sibling_key)

        def build(root: Node) -> TreeNode:
            order: list[Node] = []
            stack = [root]
            while stack:
                current = stack.pop()
                order.append(current)
                stack.extend(by_parent[current.id])

            # every child appears after its parent in ``order``
            built: dict[int | None, TreeNode] = {}
            for n in reversed(order):
                built[n.id] = TreeNode(
                    node=n, children=tuple(built[c.id] for c in by_parent[n.id])
                )
            return built[root.id]

        if root_id is None:
            return [build(r) for r in by_parent[None]]
        if root_id not in by_id:
            raise NotFoundError(root_id)
        return [build(by_id[root_id])]

    # --- Mutations ---

    def create(self, name: str, parent_id: int | None = None) -> Node:
        """Create a directory as the last child of ``parent_id`` (or as a root)."""
        clean_name = (name or "").strip()
        if not clean_name:
            msg = "Directory name is required"
            raise InvalidInputError(msg)

        with self.store.transaction():
            if parent_id is not None:
                self._require(parent_id, what="Parent directory")

            siblings = self._siblings(parent_id)
            sort_order = max((s.sort_order for s in siblings), default=0) + 1

            node = Node(name=clean_name, parent_id=parent_id, sort_order=sort_order, path="")
            node = replace(node, path=compute_path(self.store, node))
            saved = self.store.save(node)

        logger.info("Created directory {} at {}", saved.id, saved.path)
        return saved

    def move(
        self,
        node_id: int,
        new_parent_id: int | None,
        new_sort_order: int | None = None,
    ) -> Node:
        """Re-parent a directory and place it at ``new_sort_order``.

        The requested position is kept as given. Siblings it displaces shift
        down by one; the group it leaves is compacted. When no position is
        given the directory goes last.
        """
        if new_sort_order is not None:
            _check_sort_order(new_sort_order)

        with self.store.transaction():
            node = self._require(node_id)
            if new_parent_id is not None:
                self._require(new_parent_id, what="Parent directory")
                if would_create_cycle(self.store, node_id, new_parent_id):
                    raise CyclicMoveError(node_id, new_parent_id)

            if node.parent_id != new_parent_id:
                self._renumber([s for s in self._siblings(node.parent_id) if s.id != node_id])

            others = [s for s in self._siblings(new_parent_id) if s.id != node_id]
            if new_sort_order is None:
                new_sort_order = len(others) + 1
            self._renumber(others, gap_at=new_sort_order)

            moved = replace(node, parent_id=new_parent_id, sort_order=new_sort_order)
            moved = replace(moved, path=compute_path(self.store, moved))
            moved = self.store.save(moved)
            changed = refresh_subtree(self.store, moved)

        logger.debug(
            "Moved directory {} under {} at {} ({} descendant paths updated)",
            node_id, new_parent_id, new_sort_order, changed,
        )
        return moved

    def reorder_batch(self, entries: Sequence[OrderEntry]) -> list[Node]:
        """Re-parent and re-sort many directories at once.

        The whole batch is checked for cycles against the resulting parent
        links before anything is written. Every sibling group the batch
        touches is renumbered to 1..k afterwards, requested positions first.
        """
        if not entries:
            return []

        seen: set[int] = set()
        for entry in entries:
            if entry.id in seen:
                msg = f"Directory {entry.id} appears more than once in the batch"
                raise InvalidInputError(msg)
            seen.add(entry.id)
            _check_sort_order(entry.sort_order)

        with self.store.transaction():
            nodes = {n.id: n for n in self.store.find_all_by_ids(e.id for e in entries)}
            parent_ids = {e.parent_id for e in entries if e.parent_id is not None}
            known_parents = {n.id for n in self.store.find_all_by_ids(parent_ids)}
            for entry in entries:
                if entry.id not in nodes:
                    raise NotFoundError(entry.id)
                if entry.parent_id is not None and entry.parent_id not in known_parents:
                    raise NotFoundError(entry.parent_id, what="Parent directory")

            self._check_batch_acyclic(entries)

            groups: set[int | None] = set()
            for entry in entries:
                node = nodes[entry.id]
                groups.add(node.parent_id)
                groups.add(entry.parent_id)
                logger.debug(
                    "Reorder {}: parent {} -> {}, sort_order {} -> {}",
                    entry.id, node.parent_id, entry.parent_id, node.sort_order, entry.sort_order,
                )
                self.store.save(
                    replace(node, parent_id=entry.parent_id, sort_order=entry.sort_order)
                )

            rank = {e.id: i for i, e in enumerate(entries)}
            for group in groups:
                members = self._siblings(group)
                members.sort(
                    key=lambda n: (
                        n.sort_order,
                        0 if n.id in rank else 1,
                        rank.get(n.id, 0),
                        n.id or 0,
                    )
                )
                self._renumber(members)

            for entry in entries:
                node = self._require(entry.id)
                path = compute_path(self.store, node)
                if path != node.path:
                    node = self.store.save(replace(node, path=path))
                refresh_subtree(self.store, node)

            # a later entry may have rewritten the path of an earlier one
            result = [self._require(e.id) for e in entries]

        logger.info("Reordered {} directories across {} sibling groups", len(entries), len(groups))
        return result

    def delete(self, node_id: int) -> int:
        """Delete a directory and its whole subtree.

        Surviving siblings are compacted to 1..k in their previous order.

        Returns:
            Number of directories removed.
        """
        with self.store.transaction():
            node = self._require(node_id)

            subtree: list[Node] = []
            queue: deque[Node] = deque([node])
            while queue:
                current = queue.popleft()
                subtree.append(current)
                assert current.id is not None
                queue.extend(self.store.find_children_ordered(current.id))

            # children before parents
            for doomed in reversed(subtree):
                self.store.delete(doomed)

            self._renumber(self._siblings(node.parent_id))

        logger.info("Deleted directory {} ({} directories removed)", node.path, len(subtree))
        return len(subtree)

    # --- Helpers ---

    def _require(self, node_id: int, *, what: str = "Directory") -> Node:
        node = self.store.find_by_id(node_id)
        if node is None:
            raise NotFoundError(node_id, what=what)
        return node

    def _siblings(self, parent_id: int | None) -> list[Node]:
        if parent_id is None:
            return self.store.find_roots_ordered()
        return self.store.find_children_ordered(parent_id)

    def _renumber(self, ordered: list[Node], *, gap_at: int | None = None) -> None:
        """Write sort orders 1..k, skipping ``gap_at`` if given."""
        position = 1
        for sibling in ordered:
            if position == gap_at:
                position += 1
            if sibling.sort_order != position:
                self.store.save(replace(sibling, sort_order=position))
            position += 1

    def _check_batch_acyclic(self, entries: Sequence[OrderEntry]) -> None:
        parents = {n.id: n.parent_id for n in self.store.find_all() if n.id is not None}
        for entry in entries:
            parents[entry.id] = entry.parent_id
        cycle = find_cycle(parents)
        if cycle is None:
            return
        on_cycle = set(cycle)
        culprit = next(e for e in entries if e.id in on_cycle)
        assert culprit.parent_id is not None
        raise CyclicMoveError(culprit.id, culprit.parent_id)
