"""Tests for domain models and request values."""

import pytest

from dirtree.errors import InvalidInputError
from dirtree.models.dto import NodeView, OrderEntry, parse_order_entries, tree_as_dict
from dirtree.models.node import Node, TreeNode


def test_node_is_frozen() -> None:
    node = Node(id=1, name="Projects", parent_id=None, sort_order=1, path="/Projects")
    assert node.is_root
    with pytest.raises(AttributeError):
        node.name = "changed"  # type: ignore[misc]


def test_node_view_as_dict() -> None:
    node = Node(id=3, name="Web", parent_id=1, sort_order=1, path="/Projects/Web")
    assert NodeView.from_node(node).as_dict() == {
        "id": 3,
        "name": "Web",
        "parent_id": 1,
        "sort_order": 1,
        "path": "/Projects/Web",
    }


def test_node_view_requires_saved_node() -> None:
    with pytest.raises(ValueError, match="has not been saved"):
        NodeView.from_node(Node(name="New", parent_id=None, sort_order=1, path="/New"))


def test_tree_as_dict_embeds_children() -> None:
    root = Node(id=1, name="Projects", parent_id=None, sort_order=1, path="/Projects")
    web = Node(id=2, name="Web", parent_id=1, sort_order=1, path="/Projects/Web")
    data = tree_as_dict(TreeNode(node=root, children=(TreeNode(node=web),)))
    assert data["path"] == "/Projects"
    assert data["children"][0]["name"] == "Web"
    assert data["children"][0]["children"] == []


def test_tree_as_dict_deep_chain() -> None:
    depth = 1500
    tree = TreeNode(node=Node(id=depth, name="leaf", parent_id=depth - 1, sort_order=1, path=""))
    for i in reversed(range(1, depth)):
        node = Node(id=i, name=f"d{i}", parent_id=i - 1 or None, sort_order=1, path="")
        tree = TreeNode(node=node, children=(tree,))

    data = tree_as_dict(tree)
    levels = 1
    while data["children"]:
        (data,) = data["children"]
        levels += 1
    assert levels == depth
    assert data["name"] == "leaf"


def test_order_entry_from_dict_accepts_both_spellings() -> None:
    assert OrderEntry.from_dict({"id": 1, "parent_id": None, "sort_order": 2}) == OrderEntry(
        id=1, parent_id=None, sort_order=2
    )
    assert OrderEntry.from_dict({"id": 1, "parentId": 5, "sortOrder": 3}) == OrderEntry(
        id=1, parent_id=5, sort_order=3
    )
    assert OrderEntry.from_dict({"id": 4, "sort_order": 1}).parent_id is None


@pytest.mark.parametrize(
    "data",
    [
        {"parent_id": None, "sort_order": 1},
        {"id": 1, "parent_id": None},
        {"id": "1", "sort_order": 1},
        {"id": 1, "sort_order": True},
        {"id": 1, "parent_id": "x", "sort_order": 1},
        [1, None, 1],
    ],
)
def test_order_entry_from_dict_rejects_bad_input(data: object) -> None:
    with pytest.raises(InvalidInputError):
        OrderEntry.from_dict(data)


def test_parse_order_entries_requires_list() -> None:
    with pytest.raises(InvalidInputError):
        parse_order_entries({"id": 1, "sort_order": 1})
    assert parse_order_entries([{"id": 1, "sort_order": 1}]) == [
        OrderEntry(id=1, parent_id=None, sort_order=1)
    ]
