"""Shared test fixtures."""

import sqlite3
from collections.abc import Iterator

import pytest

from dirtree.core.database.store import SqliteNodeStore, connect
from dirtree.core.tree.service import TreeService
from dirtree.models.node import Node


@pytest.fixture
def conn() -> Iterator[sqlite3.Connection]:
    """Return an in-memory DB with the schema created."""
    connection = connect(":memory:")
    yield connection
    connection.close()


@pytest.fixture
def store(conn: sqlite3.Connection) -> SqliteNodeStore:
    return SqliteNodeStore(conn)


@pytest.fixture
def service(store: SqliteNodeStore) -> TreeService:
    return TreeService(store)


@pytest.fixture
def seeded(service: TreeService) -> dict[str, Node]:
    """Projects(Web, Mobile) and Documents(Tech), keyed by name."""
    projects = service.create("Projects")
    documents = service.create("Documents")
    assert projects.id is not None
    assert documents.id is not None
    nodes = {"Projects": projects, "Documents": documents}
    nodes["Web"] = service.create("Web", parent_id=projects.id)
    nodes["Mobile"] = service.create("Mobile", parent_id=projects.id)
    nodes["Tech"] = service.create("Tech", parent_id=documents.id)
    return nodes
