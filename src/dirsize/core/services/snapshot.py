from __future__ import annotations

"""
Tree Snapshot Persistence Service.

Serializes a built tree to a compact binary file and restores it without
re-scanning the filesystem.

Wire format:
    4 bytes   magic (b"DSZS")
    1 byte    format version
    rest      zlib-compressed UTF-8 JSON document

The JSON document holds the nodes in pre-order as
[kind, name, full_path, size, child_count] records. Only forward
(parent -> children) edges are encoded; parent links are rebuilt on load
in a single top-down pass, so encoding never has to follow a
back-reference.
"""

import json
import logging
import zlib
from datetime import datetime, timezone
from typing import Any, Dict, List, Set, Tuple

from dirsize.domain.constants import SNAPSHOT_MAGIC, SNAPSHOT_VERSION
from dirsize.domain.errors import DecodeError, EncodeError, SnapshotIOError
from dirsize.domain.tree_models import EntryKind, TreeNode
from dirsize.infra.fs import ensure_parent_dir

logger = logging.getLogger(__name__)

OP_SAVE = "snapshot.save"
OP_OPEN = "snapshot.open"

_KIND_TO_TAG = {EntryKind.FILE: "f", EntryKind.DIRECTORY: "d"}
_TAG_TO_KIND = {tag: kind for kind, tag in _KIND_TO_TAG.items()}
_HEADER_LEN = len(SNAPSHOT_MAGIC) + 1

# ==============================================================================
# PUBLIC API
# ==============================================================================

def save_snapshot(path: str, root: TreeNode) -> None:
    """
    Write `root` and all its descendants to a snapshot file.

    The tree is not modified. Missing parent directories of `path` are
    created.

    Raises:
        EncodeError: The tree cannot be serialized (e.g. it contains a cycle).
        SnapshotIOError: The destination cannot be created or written.
    """
    blob = encode_tree(root)
    try:
        ensure_parent_dir(path)
        with open(path, "wb") as f:
            f.write(blob)
    except OSError as e:
        raise SnapshotIOError(str(e), operation=OP_SAVE, path=path, cause=e) from e
    logger.info(f"Snapshot saved to {path} ({len(blob)} bytes)")


def open_snapshot(path: str) -> TreeNode:
    """
    Read a snapshot file and rebuild the tree with its parent links.

    Returns:
        TreeNode: Root of the restored tree; its parent is None.

    Raises:
        SnapshotIOError: The file is missing or unreadable.
        DecodeError: The content is not a valid snapshot.
    """
    try:
        with open(path, "rb") as f:
            blob = f.read()
    except OSError as e:
        raise SnapshotIOError(str(e), operation=OP_OPEN, path=path, cause=e) from e

    root = decode_tree(blob, source=path)
    logger.info(f"Snapshot loaded from {path}: {root.full_path} ({root.size} bytes)")
    return root


def encode_tree(root: TreeNode) -> bytes:
    """Serialize a tree into snapshot bytes (header included)."""
    records = _to_records(root)
    payload: Dict[str, Any] = {
        "root_path": root.full_path,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "node_count": len(records),
        "nodes": records,
    }
    try:
        # ASCII escapes keep undecodable names (lone surrogates) intact
        raw = json.dumps(payload, ensure_ascii=True, allow_nan=False).encode("ascii")
        body = zlib.compress(raw)
    except (TypeError, ValueError, zlib.error) as e:
        raise EncodeError(str(e), operation=OP_SAVE, path=root.full_path, cause=e) from e
    return SNAPSHOT_MAGIC + bytes([SNAPSHOT_VERSION]) + body


def decode_tree(blob: bytes, source: str = "") -> TreeNode:
    """Rebuild a tree from snapshot bytes (header included)."""
    if len(blob) < _HEADER_LEN or blob[:len(SNAPSHOT_MAGIC)] != SNAPSHOT_MAGIC:
        raise DecodeError("Not a snapshot file (bad magic)", operation=OP_OPEN, path=source)

    version = blob[len(SNAPSHOT_MAGIC)]
    if version != SNAPSHOT_VERSION:
        raise DecodeError(
            f"Unsupported snapshot version {version} (expected {SNAPSHOT_VERSION})",
            operation=OP_OPEN, path=source,
        )

    try:
        payload = json.loads(zlib.decompress(blob[_HEADER_LEN:]).decode("utf-8"))
    except (zlib.error, ValueError) as e:
        raise DecodeError(f"Corrupted snapshot body: {e}", operation=OP_OPEN, path=source, cause=e) from e

    if not isinstance(payload, dict) or not isinstance(payload.get("nodes"), list):
        raise DecodeError("Snapshot body has no node list", operation=OP_OPEN, path=source)

    records = payload["nodes"]
    if payload.get("node_count") != len(records):
        raise DecodeError("Node count mismatch", operation=OP_OPEN, path=source)

    root = _from_records(records, source)
    try:
        root.verify()
    except ValueError as e:
        raise DecodeError(str(e), operation=OP_OPEN, path=source, cause=e) from e
    return root

# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _to_records(root: TreeNode) -> List[List[Any]]:
    """Flatten the forward structure into pre-order records."""
    records: List[List[Any]] = []
    seen: Set[int] = set()
    for node in root.walk():
        if id(node) in seen:
            raise EncodeError(
                f"Node '{node.full_path}' is reachable twice", operation=OP_SAVE, path=node.full_path
            )
        seen.add(id(node))
        children = node.children or {}
        records.append([_KIND_TO_TAG[node.kind], node.name, node.full_path, node.size, len(children)])
    return records


def _from_records(records: List[Any], source: str) -> TreeNode:
    """Rebuild nodes top-down, linking each child to its parent as it is attached."""
    if not records:
        raise DecodeError("Snapshot holds no nodes", operation=OP_OPEN, path=source)

    root, pending = _parse_record(records[0], 0, source)
    if not root.is_dir:
        raise DecodeError("Snapshot root is not a directory", operation=OP_OPEN, path=source)

    # Each frame is [directory, children still expected]
    stack: List[List[Any]] = [[root, pending]]
    for index in range(1, len(records)):
        while stack and stack[-1][1] == 0:
            stack.pop()
        if not stack:
            raise DecodeError(f"Unexpected record #{index}", operation=OP_OPEN, path=source)

        frame = stack[-1]
        parent: TreeNode = frame[0]
        node, child_count = _parse_record(records[index], index, source)
        if node.name in parent.children:
            raise DecodeError(
                f"Duplicate child '{node.name}' in '{parent.full_path}'", operation=OP_OPEN, path=source
            )
        node.parent = parent
        parent.children[node.name] = node
        frame[1] -= 1
        if node.is_dir:
            stack.append([node, child_count])

    if any(frame[1] for frame in stack):
        raise DecodeError("Snapshot is truncated", operation=OP_OPEN, path=source)
    return root


def _parse_record(record: Any, index: int, source: str) -> Tuple[TreeNode, int]:
    """Validate one record and build its (unlinked) node."""
    def bad(reason: str) -> DecodeError:
        return DecodeError(f"Invalid record #{index}: {reason}", operation=OP_OPEN, path=source)

    if not isinstance(record, list) or len(record) != 5:
        raise bad("expected 5 fields")

    tag, name, full_path, size, child_count = record
    kind = _TAG_TO_KIND.get(tag)
    if kind is None:
        raise bad(f"unknown kind {tag!r}")
    if not isinstance(name, str) or not name:
        raise bad("name must be a non-empty string")
    if not isinstance(full_path, str):
        raise bad("full_path must be a string")
    for label, value in (("size", size), ("child_count", child_count)):
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise bad(f"{label} must be a non-negative integer")
    if kind is EntryKind.FILE and child_count:
        raise bad("file with children")

    if kind is EntryKind.DIRECTORY:
        return TreeNode(EntryKind.DIRECTORY, name, full_path, size, {}), child_count
    return TreeNode(EntryKind.FILE, name, full_path, size), 0
