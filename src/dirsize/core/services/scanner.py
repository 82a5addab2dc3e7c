from __future__ import annotations

"""
Directory Scanning and Size Aggregation Service.

Builds the in-memory tree for a root path by depth-first directory listing.
Sizes are aggregated bottom-up: a subdirectory's size is rolled into its
parent only once its own listing has completed. Failures are classified by
severity; NORMAL ones skip the affected subtree and are reported as
warnings, CRITICAL ones abort the scan.
"""

import logging
import os
import stat
from typing import Iterator, List, Tuple

from dirsize.domain.errors import (
    AccessDeniedError,
    EntryNotFoundError,
    NotDirectoryError,
    ScanIOError,
    ScanWarning,
    Severity,
    TreeError,
    WrongKindError,
)
from dirsize.domain.result_models import ScanResult
from dirsize.domain.tree_models import TreeNode

logger = logging.getLogger(__name__)

OP_CREATE = "scanner.create_root"
OP_FILL = "scanner.fill_directory"

# ==============================================================================
# PUBLIC API
# ==============================================================================

def create_root(root_path: str) -> TreeNode:
    """
    Validate a root path and return an empty directory node for it.

    Args:
        root_path: Directory to scan. Relative paths are made absolute.

    Returns:
        TreeNode: Directory node with no children, size 0 and no parent.

    Raises:
        EntryNotFoundError: The path does not exist.
        AccessDeniedError: The path cannot be inspected.
        NotDirectoryError: The path exists but is not a directory.
        ScanIOError: Any other stat failure.
    """
    if not root_path:
        raise EntryNotFoundError("Empty root path", operation=OP_CREATE)

    full_path = os.path.abspath(root_path)
    try:
        st = os.stat(full_path)
    except OSError as e:
        raise _classify(e, full_path, OP_CREATE, critical=True) from e

    if not stat.S_ISDIR(st.st_mode):
        raise NotDirectoryError(
            f"{full_path}: is not a directory", operation=OP_CREATE, path=full_path
        )

    name = os.path.basename(full_path.rstrip(os.sep)) or full_path
    return TreeNode.directory(name, full_path)


def fill_directory(node: TreeNode, *, fatal_on_access_denied: bool = False) -> List[ScanWarning]:
    """
    Recursively populate a directory node and aggregate its size.

    An unreadable `node` itself is always CRITICAL. Below it, permission
    and vanished-entry failures are NORMAL (unless `fatal_on_access_denied`
    promotes permission failures) and every other filesystem failure is
    CRITICAL.

    Args:
        node: Directory node to fill.
        fatal_on_access_denied: Treat permission failures as CRITICAL.

    Returns:
        List[ScanWarning]: Subtrees and entries that were skipped.

    Raises:
        WrongKindError: `node` is not a directory.
        TreeError: A CRITICAL failure aborted the scan.
    """
    if not node.is_dir:
        raise WrongKindError(
            f"{node.name} is {node.kind.value} and not directory",
            operation=OP_FILL,
            path=node.full_path,
        )

    warnings: List[ScanWarning] = []
    _fill(node, warnings, fatal_on_access_denied)
    logger.debug(f"Filled '{node.full_path}': {node.size} bytes, {len(warnings)} warning(s).")
    return warnings


def scan_tree(root_path: str, *, fatal_on_access_denied: bool = False) -> ScanResult:
    """
    Create and fill a tree for `root_path` in one call.

    Returns:
        ScanResult: The populated root and the collected warnings.
    """
    logger.info(f"Scanning directory tree: {root_path}")
    root = create_root(root_path)
    warnings = fill_directory(root, fatal_on_access_denied=fatal_on_access_denied)
    logger.info(f"Scan complete: {root.full_path} ({root.size} bytes, {len(warnings)} skipped)")
    return ScanResult(root=root, warnings=warnings)

# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _fill(top: TreeNode, warnings: List[ScanWarning], fatal_on_access_denied: bool) -> None:
    """
    Depth-first listing of `top` driven by an explicit stack.

    Each frame holds a directory and the entries still to visit. A
    subdirectory is attached to its parent when its frame is popped, so its
    size is rolled up only once its own subtree is complete.
    """
    stack: List[Tuple[TreeNode, Iterator[os.DirEntry]]] = [
        (top, _list_entries(top, fatal_on_access_denied, critical=True))
    ]
    while stack:
        node, pending = stack[-1]
        entry = next(pending, None)
        if entry is None:
            stack.pop()
            if stack:
                stack[-1][0].add_child(node)
            continue

        if entry.name in node.children:
            _record(warnings, TreeError(
                f"Duplicate entry name '{entry.name}' skipped",
                operation=OP_FILL, path=entry.path, severity=Severity.NORMAL,
            ))
            continue

        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            size = 0 if is_dir else entry.stat(follow_symlinks=False).st_size
        except OSError as e:
            err = _classify(e, entry.path, OP_FILL, fatal_on_access_denied=fatal_on_access_denied)
            if err.is_critical:
                raise err from e
            _record(warnings, err)
            continue

        if not is_dir:
            node.add_child(TreeNode.file(entry.name, entry.path, size, parent=node))
            continue

        child = TreeNode.directory(entry.name, entry.path, parent=node)
        try:
            entries = _list_entries(child, fatal_on_access_denied, critical=False)
        except TreeError as err:
            if err.is_critical:
                raise
            _record(warnings, err)
            continue
        stack.append((child, entries))


def _list_entries(node: TreeNode, fatal_on_access_denied: bool, critical: bool) -> Iterator[os.DirEntry]:
    """List a directory once, sorted by name."""
    try:
        with os.scandir(node.full_path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise _classify(
            e, node.full_path, OP_FILL,
            critical=critical, fatal_on_access_denied=fatal_on_access_denied
        ) from e
    return iter(entries)


def _classify(
        exc: OSError,
        path: str,
        operation: str,
        *,
        critical: bool = False,
        fatal_on_access_denied: bool = False,
) -> TreeError:
    """Map an OSError onto the tree error taxonomy."""
    if isinstance(exc, PermissionError):
        severity = Severity.CRITICAL if (critical or fatal_on_access_denied) else Severity.NORMAL
        return AccessDeniedError(str(exc), operation=operation, path=path, severity=severity, cause=exc)
    if isinstance(exc, FileNotFoundError):
        severity = Severity.CRITICAL if critical else Severity.NORMAL
        return EntryNotFoundError(str(exc), operation=operation, path=path, severity=severity, cause=exc)
    if isinstance(exc, NotADirectoryError):
        return NotDirectoryError(str(exc), operation=operation, path=path, cause=exc)
    return ScanIOError(str(exc), operation=operation, path=path, cause=exc)


def _record(warnings: List[ScanWarning], err: TreeError) -> None:
    logger.warning(f"Skipped '{err.path}': {err.message}")
    warnings.append(ScanWarning.from_error(err))
