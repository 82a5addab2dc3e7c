from __future__ import annotations

"""
Tree Query Service.

Read-only traversals over a built tree: name/kind search across the whole
tree and depth-bounded flattening of a directory's descendants. A failure
raised while visiting a subtree is handled by severity: NORMAL failures are
recorded and traversal continues with the next sibling, CRITICAL failures
stop the traversal and are returned with the entries gathered so far.
"""

import logging
from typing import Iterator, List, Set, Tuple

from dirsize.domain.errors import ScanWarning, TreeError, WrongKindError
from dirsize.domain.result_models import QueryResult
from dirsize.domain.tree_models import EntryKind, TreeNode

logger = logging.getLogger(__name__)

OP_SEARCH = "query.search"
OP_FLATTEN = "query.flatten"

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def search(root: TreeNode, name: str, kind: EntryKind = EntryKind.UNKNOWN) -> QueryResult:
    """
    Find every node named `name` whose kind matches `kind`.

    The whole tree is visited regardless of depth, the root included.
    Directories are always descended into, whether or not they matched.

    Args:
        root: Node to start from.
        name: Exact base name to look for.
        kind: Kind filter; UNKNOWN matches any kind.

    Returns:
        QueryResult: Matches in depth-first order.
    """
    entries: List[TreeNode] = []
    warnings: List[ScanWarning] = []
    try:
        _search(root, name, kind, entries, warnings, {id(root)})
    except TreeError as err:
        logger.error(f"Search for '{name}' aborted: {err}")
        return QueryResult(entries=entries, warnings=warnings, error=err)
    return QueryResult(entries=entries, warnings=warnings)


def flatten(node: TreeNode, kind: EntryKind = EntryKind.UNKNOWN, depth: int = 0) -> QueryResult:
    """
    List the descendants of a directory, filtered by kind and bounded by depth.

    Depth semantics:
        depth <= 0: unbounded.
        depth == 1: immediate children only.
        depth > 1: decremented at each level until it reaches 1.

    Args:
        node: Directory to flatten.
        kind: Kind filter; UNKNOWN keeps every entry.
        depth: Maximum depth to descend.

    Returns:
        QueryResult: Matching descendants in depth-first order.

    Raises:
        WrongKindError: `node` is not a directory.
    """
    if not node.is_dir:
        raise WrongKindError(
            f"{node.name} is a {node.kind.value} instead of directory",
            operation=OP_FLATTEN,
            path=node.full_path,
        )

    entries: List[TreeNode] = []
    warnings: List[ScanWarning] = []
    try:
        _flatten(node, kind, depth, entries, warnings, {id(node)})
    except TreeError as err:
        logger.error(f"Flatten of '{node.full_path}' aborted: {err}")
        return QueryResult(entries=entries, warnings=warnings, error=err)
    return QueryResult(entries=entries, warnings=warnings)

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _search(
        root: TreeNode,
        name: str,
        kind: EntryKind,
        acc: List[TreeNode],
        warnings: List[ScanWarning],
        visited: Set[int],
) -> None:
    if kind.matches(root.kind) and root.name == name:
        acc.append(root)
    stack: List[Iterator[TreeNode]] = [root.iter_children()]
    while stack:
        child = next(stack[-1], None)
        if child is None:
            stack.pop()
            continue
        try:
            _enter(child, visited, OP_SEARCH)
            if kind.matches(child.kind) and child.name == name:
                acc.append(child)
        except TreeError as err:
            if err.is_critical:
                raise
            _record(warnings, err)
            continue
        if child.is_dir:
            stack.append(child.iter_children())


def _flatten(
        node: TreeNode,
        kind: EntryKind,
        depth: int,
        acc: List[TreeNode],
        warnings: List[ScanWarning],
        visited: Set[int],
) -> None:
    # Each frame is (pending children, depth left for them)
    stack: List[Tuple[Iterator[TreeNode], int]] = [(node.iter_children(), depth)]
    while stack:
        pending, level = stack[-1]
        child = next(pending, None)
        if child is None:
            stack.pop()
            continue
        try:
            _enter(child, visited, OP_FLATTEN)
            if kind.matches(child.kind):
                acc.append(child)
        except TreeError as err:
            if err.is_critical:
                raise
            _record(warnings, err)
            continue
        if child.is_dir and level != 1:
            stack.append((child.iter_children(), level if level <= 0 else level - 1))


def _enter(child: TreeNode, visited: Set[int], operation: str) -> None:
    """Mark a node as visited; seeing it twice means the tree holds a cycle."""
    if id(child) in visited:
        raise TreeError(
            f"Cycle detected at '{child.full_path}'",
            operation=operation,
            path=child.full_path,
        )
    visited.add(id(child))


def _record(warnings: List[ScanWarning], err: TreeError) -> None:
    logger.warning(f"Skipped '{err.path}': {err}")
    warnings.append(ScanWarning.from_error(err))
