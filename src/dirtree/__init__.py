"""Hierarchical directory tree stored in SQLite."""

from dirtree.core.database.store import SqliteNodeStore, connect
from dirtree.core.tree.service import TreeService
from dirtree.errors import (
    CyclicMoveError,
    InvalidInputError,
    NotFoundError,
    StoreFailureError,
    TreeError,
)
from dirtree.models.dto import NodeView, OrderEntry
from dirtree.models.node import Node, TreeNode
from dirtree.protocols import NodeStoreProtocol

__all__ = [
    "CyclicMoveError",
    "InvalidInputError",
    "Node",
    "NodeStoreProtocol",
    "NodeView",
    "NotFoundError",
    "OrderEntry",
    "SqliteNodeStore",
    "StoreFailureError",
    "TreeError",
    "TreeNode",
    "TreeService",
    "connect",
]
