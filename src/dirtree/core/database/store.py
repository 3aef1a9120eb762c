"""SQLite-backed directory store."""

import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

from dirtree.core.database.schema import migrate_schema
from dirtree.errors import StoreFailureError
from dirtree.models.node import Node

_COLUMNS = "id, name, parent_id, sort_order, path"


def connect(db_path: Path | str) -> sqlite3.Connection:
    """Open a database, enable foreign keys and bring the schema up to date."""
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA foreign_keys = ON")
    migrate_schema(conn)
    return conn


def _to_node(row: tuple) -> Node:
    return Node(id=row[0], name=row[1], parent_id=row[2], sort_order=row[3], path=row[4])


class SqliteNodeStore:
    """Directory rows in a single ``directory`` table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    @contextmanager
    def transaction(self, *, read_only: bool = False) -> Iterator[None]:
        """Run the block in one transaction.

        Joins an already open transaction instead of nesting.
        """
        if self.conn.in_transaction:
            yield
            return

        try:
            self.conn.execute("BEGIN" if read_only else "BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            msg = f"Could not open transaction: {e}"
            raise StoreFailureError(msg) from e

        try:
            yield
        except sqlite3.Error as e:
            self.conn.rollback()
            logger.debug("Rolled back after store error: {}", e)
            msg = f"Store operation failed: {e}"
            raise StoreFailureError(msg) from e
        except BaseException:
            self.conn.rollback()
            raise

        try:
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            msg = f"Commit failed: {e}"
            raise StoreFailureError(msg) from e

    def find_by_id(self, node_id: int) -> Node | None:
        row = self.conn.execute(
            f"SELECT {_COLUMNS} FROM directory WHERE id = ?", (node_id,)
        ).fetchone()
        return _to_node(row) if row else None

    def find_roots_ordered(self) -> list[Node]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM directory WHERE parent_id IS NULL ORDER BY sort_order, id"
        ).fetchall()
        return [_to_node(r) for r in rows]

    def find_children_ordered(self, parent_id: int) -> list[Node]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM directory WHERE parent_id = ? ORDER BY sort_order, id",
            (parent_id,),
        ).fetchall()
        return [_to_node(r) for r in rows]

    def find_all_by_ids(self, ids: Iterable[int]) -> list[Node]:
        id_list = list(dict.fromkeys(ids))
        if not id_list:
            return []
        placeholders = ",".join("?" * len(id_list))
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM directory WHERE id IN ({placeholders})",
            id_list,
        ).fetchall()
        return [_to_node(r) for r in rows]

    def find_all(self) -> list[Node]:
        rows = self.conn.execute(f"SELECT {_COLUMNS} FROM directory").fetchall()
        return [_to_node(r) for r in rows]

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM directory").fetchone()[0]

    def save(self, node: Node) -> Node:
        if node.id is None:
            cursor = self.conn.execute(
                "INSERT INTO directory (name, parent_id, sort_order, path) VALUES (?, ?, ?, ?)",
                (node.name, node.parent_id, node.sort_order, node.path),
            )
            return Node(
                id=cursor.lastrowid,
                name=node.name,
                parent_id=node.parent_id,
                sort_order=node.sort_order,
                path=node.path,
            )

        self.conn.execute(
            "UPDATE directory SET name = ?, parent_id = ?, sort_order = ?, path = ? WHERE id = ?",
            (node.name, node.parent_id, node.sort_order, node.path, node.id),
        )
        return node

    def delete(self, node: Node) -> None:
        self.conn.execute("DELETE FROM directory WHERE id = ?", (node.id,))
