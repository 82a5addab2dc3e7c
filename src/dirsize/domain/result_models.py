from __future__ import annotations

"""
Operation Result Data Models.

Immutable containers returned by the scanner and query services. They pair
the produced data with the NORMAL-severity warnings collected on the way
and, for queries, the CRITICAL error that cut the traversal short.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from dirsize.domain.errors import ScanWarning, TreeError
from dirsize.domain.tree_models import TreeNode


@dataclass(frozen=True)
class ScanResult:
    """
    Outcome of a complete scan.

    Attributes:
        root: Root directory node of the built tree.
        warnings: Subtrees or entries that were skipped.
    """
    root: TreeNode
    warnings: List[ScanWarning] = field(default_factory=list)


@dataclass(frozen=True)
class QueryResult:
    """
    Outcome of a search or flatten traversal.

    Attributes:
        entries: Matching nodes, in traversal order.
        warnings: Tolerated failures met during traversal.
        error: CRITICAL failure that aborted the traversal, if any.
    """
    entries: List[TreeNode] = field(default_factory=list)
    warnings: List[ScanWarning] = field(default_factory=list)
    error: Optional[TreeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __len__(self) -> int:
        return len(self.entries)
