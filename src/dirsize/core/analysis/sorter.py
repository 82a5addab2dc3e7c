from __future__ import annotations

"""
Child Ordering.

Produces ordered listings of a node's immediate children. Name ordering is
ascending; size ordering is descending so the largest consumers come first.
Both are stable with respect to the tree's insertion order.
"""

from typing import List

from dirsize.domain.tree_models import SortKey, TreeNode


def sorted_children(node: TreeNode, sort_key: SortKey = SortKey.NAME) -> List[TreeNode]:
    """
    Return the immediate children of `node` in the requested order.

    Files have no children and yield an empty list.
    """
    children = list(node.iter_children())
    if sort_key is SortKey.SIZE:
        # reverse=True keeps equal sizes in their original relative order
        return sorted(children, key=lambda c: c.size, reverse=True)
    return sorted(children, key=lambda c: c.name)
