"""Render directory trees as markdown outlines."""

import io

from dirtree.models.node import TreeNode


def render_outline(
    trees: list[TreeNode],
    *,
    max_depth: int | None = None,
    show_ids: bool = False,
) -> str:
    """Render trees as an indented markdown bullet list.

    Args:
        trees: Top-level nodes to render, in display order.
        max_depth: Max levels below the top-level nodes (None = unlimited).
        show_ids: Append ``[id=N]`` to each line.

    Returns:
        Markdown string, one bullet per directory.
    """
    out = io.StringIO()
    stack: list[tuple[TreeNode, int]] = [(t, 0) for t in reversed(trees)]

    while stack:
        tree, depth = stack.pop()
        indent = "    " * depth
        suffix = f"  [id={tree.node.id}]" if show_ids else ""
        out.write(f"{indent}- {tree.node.name}{suffix}\n")

        if max_depth is not None and depth >= max_depth:
            # Truncation indicator when children are cut off by max_depth
            if tree.children:
                count = len(tree.children)
                noun = "child" if count == 1 else "children"
                out.write(f"{indent}    - ... ({count} more {noun}, id={tree.node.id})\n")
            continue

        stack.extend((child, depth + 1) for child in reversed(tree.children))

    return out.getvalue()
