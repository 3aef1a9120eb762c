"""Value shapes exchanged with the request layer."""

from dataclasses import dataclass
from typing import Any

from dirtree.errors import InvalidInputError
from dirtree.models.node import Node, TreeNode


@dataclass(frozen=True)
class NodeView:
    """Serializable snapshot of a directory. Children are not embedded."""

    id: int
    name: str
    parent_id: int | None
    sort_order: int
    path: str

    @classmethod
    def from_node(cls, node: Node) -> "NodeView":
        if node.id is None:
            msg = f"Directory {node.name!r} has not been saved yet"
            raise ValueError(msg)
        return cls(
            id=node.id,
            name=node.name,
            parent_id=node.parent_id,
            sort_order=node.sort_order,
            path=node.path,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "parent_id": self.parent_id,
            "sort_order": self.sort_order,
            "path": self.path,
        }


@dataclass(frozen=True)
class OrderEntry:
    """One line of a bulk reorder request."""

    id: int
    parent_id: int | None
    sort_order: int

    @classmethod
    def from_dict(cls, data: Any) -> "OrderEntry":
        """Decode an entry, accepting ``parentId``/``sortOrder`` spellings too."""
        if not isinstance(data, dict):
            msg = f"Order entry must be an object, got {type(data).__name__}"
            raise InvalidInputError(msg)
        return cls(
            id=_require_int(data, "id"),
            parent_id=_optional_int(data, "parent_id", "parentId"),
            sort_order=_require_int(data, "sort_order", "sortOrder"),
        )


def views(nodes: list[Node]) -> list[dict[str, Any]]:
    """Serialize nodes to a list of NodeView dicts."""
    return [NodeView.from_node(n).as_dict() for n in nodes]


def tree_as_dict(tree: TreeNode) -> dict[str, Any]:
    """Serialize a nested tree, children embedded under ``children``."""
    root = NodeView.from_node(tree.node).as_dict()
    stack = [(tree, root)]
    while stack:
        current, data = stack.pop()
        data["children"] = []
        for child in current.children:
            child_data = NodeView.from_node(child.node).as_dict()
            data["children"].append(child_data)
            stack.append((child, child_data))
    return root


def parse_order_entries(data: Any) -> list[OrderEntry]:
    """Decode a reorder request body (a JSON array of entries)."""
    if not isinstance(data, list):
        msg = "Reorder request must be a list of entries"
        raise InvalidInputError(msg)
    return [OrderEntry.from_dict(item) for item in data]


def _lookup(data: dict[str, Any], *keys: str) -> tuple[bool, Any]:
    for key in keys:
        if key in data:
            return True, data[key]
    return False, None


def _as_int(value: Any, key: str) -> int:
    # bool is an int subclass but never a valid id or position
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"Field {key!r} must be an integer, got {value!r}"
        raise InvalidInputError(msg)
    return value


def _require_int(data: dict[str, Any], *keys: str) -> int:
    found, value = _lookup(data, *keys)
    if not found or value is None:
        msg = f"Missing required field {keys[0]!r}"
        raise InvalidInputError(msg)
    return _as_int(value, keys[0])


def _optional_int(data: dict[str, Any], *keys: str) -> int | None:
    _found, value = _lookup(data, *keys)
    if value is None:
        return None
    return _as_int(value, keys[0])
