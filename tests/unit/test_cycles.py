"""Tests for the cycle guard."""

import sqlite3

from dirtree.core.tree.cycles import find_cycle, would_create_cycle
from dirtree.core.tree.service import TreeService
from dirtree.models.node import Node


def _id(node: Node) -> int:
    assert node.id is not None
    return node.id


def test_would_create_cycle_for_self_and_descendants(
    service: TreeService, seeded: dict[str, Node]
) -> None:
    store = service.store
    frontend = service.create("Frontend", parent_id=_id(seeded["Web"]))
    projects = _id(seeded["Projects"])

    assert would_create_cycle(store, projects, projects)
    assert would_create_cycle(store, projects, _id(seeded["Web"]))
    assert would_create_cycle(store, projects, _id(frontend))


def test_would_create_cycle_false_for_unrelated_or_root(
    service: TreeService, seeded: dict[str, Node]
) -> None:
    store = service.store
    assert not would_create_cycle(store, _id(seeded["Web"]), _id(seeded["Documents"]))
    assert not would_create_cycle(store, _id(seeded["Web"]), _id(seeded["Tech"]))
    assert not would_create_cycle(store, _id(seeded["Web"]), None)
    # moving a parent under its sibling's child is fine
    assert not would_create_cycle(store, _id(seeded["Documents"]), _id(seeded["Mobile"]))


def test_find_cycle_on_acyclic_snapshot() -> None:
    assert find_cycle({1: None, 2: 1, 3: 2, 4: None, 5: 4}) is None


def test_find_cycle_reports_cycle_members() -> None:
    cycle = find_cycle({1: None, 2: 3, 3: 4, 4: 2, 5: 2})
    assert cycle is not None
    assert sorted(cycle) == [2, 3, 4]


def test_find_cycle_self_loop() -> None:
    assert find_cycle({7: 7}) == [7]


def test_find_cycle_ignores_unknown_parents() -> None:
    assert find_cycle({1: 99}) is None


def test_would_create_cycle_terminates_on_corrupt_loop(
    conn: sqlite3.Connection, service: TreeService
) -> None:
    """An A <-> B loop already on disk is reported instead of walked forever."""
    a = service.create("A")
    b = service.create("B")
    c = service.create("C")

    conn.execute("PRAGMA foreign_keys = OFF")
    conn.execute("UPDATE directory SET parent_id = ? WHERE id = ?", (_id(b), _id(a)))
    conn.execute("UPDATE directory SET parent_id = ? WHERE id = ?", (_id(a), _id(b)))
    conn.commit()

    assert would_create_cycle(service.store, _id(c), _id(a))
