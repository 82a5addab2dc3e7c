from __future__ import annotations

"""
Directory Tree Data Models.

Provides the node type used to represent a scanned filesystem hierarchy,
together with the enumerations that drive queries and ordering. Parent
links are plain back-references owned by nobody: the forward `children`
mapping is the only ownership edge.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

# -----------------------------------------------------------------------------
# ENUMERATIONS
# -----------------------------------------------------------------------------

class EntryKind(str, Enum):
    """
    Kind of a filesystem entry.

    UNKNOWN is only a wildcard for queries; no node ever carries it.
    """
    FILE = "file"
    DIRECTORY = "directory"
    UNKNOWN = "unknown"

    def matches(self, other: "EntryKind") -> bool:
        """Return True if `other` satisfies this kind used as a filter."""
        return self is EntryKind.UNKNOWN or self is other


class SortKey(str, Enum):
    """Ordering applied to the immediate children of a directory."""
    NAME = "name"
    SIZE = "size"


# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass(eq=False)
class TreeNode:
    """
    Represents one entry (file or directory) in the scanned tree.

    Identity semantics are used for equality and hashing so nodes can be
    collected in sets and used as dictionary keys.

    Attributes:
        kind: FILE or DIRECTORY.
        name: Base name of the filesystem object.
        full_path: Absolute path of the object.
        size: Byte count. For directories, the sum of all descendant files.
        children: Child nodes keyed by base name. None for files.
        parent: Owning directory, or None for the root.
    """
    kind: EntryKind
    name: str
    full_path: str
    size: int = 0
    children: Optional[Dict[str, "TreeNode"]] = None
    parent: Optional["TreeNode"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.kind is EntryKind.UNKNOWN:
            raise ValueError("A tree node cannot be of kind UNKNOWN.")
        if self.kind is EntryKind.DIRECTORY and self.children is None:
            self.children = {}
        if self.kind is EntryKind.FILE and self.children is not None:
            raise ValueError(f"File node '{self.name}' cannot own children.")
        if self.size < 0:
            raise ValueError(f"Negative size for '{self.full_path}'.")

    # --- Factories ---

    @classmethod
    def directory(cls, name: str, full_path: str, parent: Optional[TreeNode] = None) -> TreeNode:
        return cls(EntryKind.DIRECTORY, name, full_path, 0, {}, parent)

    @classmethod
    def file(cls, name: str, full_path: str, size: int, parent: Optional[TreeNode] = None) -> TreeNode:
        return cls(EntryKind.FILE, name, full_path, size, None, parent)

    # --- Properties ---

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_root(self) -> bool:
        return self.parent is None

    # --- Mutation (construction time only) ---

    def add_child(self, child: TreeNode) -> None:
        """
        Attach a child, link its parent and roll its size into this node.

        Raises:
            ValueError: If this node is a file or the name is already taken.
        """
        if self.children is None:
            raise ValueError(f"Cannot add '{child.name}' to file '{self.full_path}'.")
        if child.name in self.children:
            raise ValueError(f"Duplicate entry '{child.name}' in '{self.full_path}'.")
        child.parent = self
        self.children[child.name] = child
        self.size += child.size

    # --- Traversal ---

    def iter_children(self) -> Iterator[TreeNode]:
        if self.children:
            yield from self.children.values()

    def walk(self) -> Iterator[TreeNode]:
        """Yield this node and all its descendants in pre-order (iterative)."""
        stack: List[TreeNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            if node.children:
                stack.extend(reversed(list(node.children.values())))

    def path_from_root(self) -> List[TreeNode]:
        """Return the chain of nodes from the root down to this node."""
        chain: List[TreeNode] = []
        node: Optional[TreeNode] = self
        while node is not None:
            chain.append(node)
            node = node.parent
        chain.reverse()
        return chain

    def verify(self) -> None:
        """
        Check the structural invariants of the subtree rooted here.

        Raises:
            ValueError: On a size mismatch, a broken parent link or a key
                        that differs from the child's name.
        """
        for node in self.walk():
            if node.children is None:
                continue
            total = 0
            for key, child in node.children.items():
                if key != child.name:
                    raise ValueError(f"Key '{key}' does not match child name '{child.name}'.")
                if child.parent is not node:
                    raise ValueError(f"Broken parent link at '{child.full_path}'.")
                total += child.size
            if total != node.size:
                raise ValueError(
                    f"Size mismatch at '{node.full_path}': {node.size} != {total}."
                )
