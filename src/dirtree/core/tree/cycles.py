"""Guard against parent changes that would make the tree cyclic."""

from collections.abc import Mapping

from dirtree.protocols import NodeStoreProtocol


def would_create_cycle(
    store: NodeStoreProtocol, moving_id: int, new_parent_id: int | None
) -> bool:
    """Return True if putting ``moving_id`` under ``new_parent_id`` creates a cycle.

    Walks up from the new parent. The walk is bounded by the node count, so a
    tree that is already corrupt also reports a cycle instead of spinning.
    """
    if new_parent_id is None:
        return False
    if new_parent_id == moving_id:
        return True

    limit = store.count()
    current_id: int | None = new_parent_id
    steps = 0
    while current_id is not None:
        if current_id == moving_id:
            return True
        steps += 1
        if steps > limit:
            return True
        current = store.find_by_id(current_id)
        if current is None:
            return False
        current_id = current.parent_id
    return False


def find_cycle(parents: Mapping[int, int | None]) -> list[int] | None:
    """Find a cycle in an ``id -> parent_id`` snapshot.

    Returns the ids on the first cycle found, or None if every chain reaches a
    root. Parent ids missing from the mapping end the chain.
    """
    done: set[int] = set()
    for start in parents:
        if start in done:
            continue
        chain: list[int] = []
        on_chain: set[int] = set()
        current: int | None = start
        while current is not None and current in parents and current not in done:
            if current in on_chain:
                return chain[chain.index(current):]
            chain.append(current)
            on_chain.add(current)
            current = parents[current]
        done.update(chain)
    return None
