"""Audit a directory snapshot against the tree invariants."""

from collections import defaultdict

from dirtree.core.tree.cycles import find_cycle
from dirtree.core.tree.paths import join_path
from dirtree.models.node import Node


def check_tree(nodes: list[Node], *, contiguous: bool = True) -> list[str]:
    """Return a description of every invariant violation in ``nodes``.

    Checks non-blank names, existing parents, acyclic parent links, path
    consistency and distinct (optionally contiguous 1..k) sibling orders.
    An empty list means the snapshot is consistent.
    """
    problems: list[str] = []
    by_id = {n.id: n for n in nodes if n.id is not None}

    for n in nodes:
        if not n.name.strip():
            problems.append(f"Directory {n.id} has a blank name")
        if n.parent_id is not None and n.parent_id not in by_id:
            problems.append(f"Directory {n.id} references missing parent {n.parent_id}")

    cycle = find_cycle({i: n.parent_id for i, n in by_id.items()})
    if cycle is not None:
        problems.append("Cycle in parent links: " + " -> ".join(str(i) for i in cycle))
    else:
        for n in nodes:
            parent = by_id.get(n.parent_id) if n.parent_id is not None else None
            if n.parent_id is not None and parent is None:
                continue
            expected = join_path(parent.path if parent else None, n.name)
            if n.path != expected:
                problems.append(f"Directory {n.id} has path {n.path!r}, expected {expected!r}")

    groups: dict[int | None, list[int]] = defaultdict(list)
    for n in nodes:
        groups[n.parent_id].append(n.sort_order)
    for parent_id, orders in groups.items():
        label = "root group" if parent_id is None else f"children of {parent_id}"
        if len(set(orders)) != len(orders):
            problems.append(f"Duplicate sort orders in {label}: {sorted(orders)}")
        elif contiguous and sorted(orders) != list(range(1, len(orders) + 1)):
            problems.append(f"Sort orders in {label} are not 1..{len(orders)}: {sorted(orders)}")

    return problems
