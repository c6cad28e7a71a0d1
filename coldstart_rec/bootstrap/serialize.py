from __future__ import annotations

from typing import List, Optional

from .attitude import BRANCH_ORDER
from .tree import Split, TreeNode


def level_order(root: TreeNode, *, drop_empty_tail: bool = True) -> List[List[Optional[int]]]:
    """Flatten the tree into per-level lists of movieIds.

    Depth-first traversal in lover, unknown, hater order, bucketed by depth;
    since every node expands its children in that fixed order, each bucket
    comes out in breadth-first order. A Leaf contributes None and is not
    expanded. With `drop_empty_tail`, trailing levels that hold only None are
    removed (the last level of a full tree is all leaves).
    """
    levels: List[List[Optional[int]]] = []

    def _visit(node: TreeNode, depth: int) -> None:
        if len(levels) <= depth:
            levels.append([])
        if isinstance(node, Split):
            levels[depth].append(int(node.movieId))
            for attitude in BRANCH_ORDER:
                _visit(node.child(attitude), depth + 1)
        else:
            levels[depth].append(None)

    _visit(root, 0)

    if drop_empty_tail:
        while levels and all(v is None for v in levels[-1]):
            levels.pop()
    return levels
