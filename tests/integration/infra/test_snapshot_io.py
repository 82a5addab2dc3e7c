from __future__ import annotations

"""
Integration tests for Tree Snapshot Persistence.

Verifies that a saved tree can be restored with identical node data and
rebuilt parent links, and that damaged or foreign files are rejected.
"""

import json
import os
import sys
import zlib
from pathlib import Path
from typing import Dict

import pytest

from dirsize.core.services.scanner import scan_tree
from dirsize.core.services.snapshot import (
    decode_tree,
    encode_tree,
    open_snapshot,
    save_snapshot,
)
from dirsize.domain.constants import SNAPSHOT_MAGIC, SNAPSHOT_VERSION
from dirsize.domain.errors import DecodeError, EncodeError, SnapshotIOError
from dirsize.domain.tree_models import TreeNode


def _index(root: TreeNode) -> Dict[str, TreeNode]:
    return {n.full_path: n for n in root.walk()}


def _blob(payload) -> bytes:
    raw = json.dumps(payload).encode("utf-8")
    return SNAPSHOT_MAGIC + bytes([SNAPSHOT_VERSION]) + zlib.compress(raw)


@pytest.mark.parametrize("seed", [3, 11])
def test_round_trip_preserves_nodes_and_parents(random_tree, tmp_path: Path, seed: int) -> None:
    path, _, _, _ = random_tree(seed)
    original = scan_tree(str(path)).root
    target = tmp_path / "out" / "tree.dsz"

    save_snapshot(str(target), original)
    restored = open_snapshot(str(target))

    before, after = _index(original), _index(restored)
    assert before.keys() == after.keys()
    for full_path, node in before.items():
        twin = after[full_path]
        assert (twin.kind, twin.name, twin.size) == (node.kind, node.name, node.size)
        assert set(twin.children or {}) == set(node.children or {})

    assert restored.parent is None
    for node in restored.walk():
        for child in node.iter_children():
            assert child.parent is node
    restored.verify()


def test_save_does_not_touch_parent_links(sample_dir: Path, tmp_path: Path) -> None:
    root = scan_tree(str(sample_dir)).root
    sub = root.children["sub"]

    save_snapshot(str(tmp_path / "s.dsz"), sub)

    assert sub.parent is root
    assert sub.children["b.txt"].parent is sub


def test_snapshot_of_subtree_becomes_root(sample_dir: Path, tmp_path: Path) -> None:
    root = scan_tree(str(sample_dir)).root
    save_snapshot(str(tmp_path / "s.dsz"), root.children["sub"])

    restored = open_snapshot(str(tmp_path / "s.dsz"))
    assert restored.name == "sub"
    assert restored.parent is None
    assert restored.size == 20


def test_round_trip_keeps_undecodable_file_names(sample_dir: Path, tmp_path: Path) -> None:
    odd_name = os.fsdecode(b"bad\xff.txt")
    try:
        (sample_dir / odd_name).write_bytes(b"x" * 10)
    except (OSError, UnicodeError):
        pytest.skip("Filesystem rejects non UTF-8 names.")

    original = scan_tree(str(sample_dir)).root
    assert odd_name in original.children

    save_snapshot(str(tmp_path / "odd.dsz"), original)
    restored = open_snapshot(str(tmp_path / "odd.dsz"))

    node = restored.children[odd_name]
    assert node.full_path == original.children[odd_name].full_path
    assert node.size == 10
    assert restored.size == 40


def test_round_trip_of_very_deep_tree() -> None:
    root = TreeNode.directory("root", "/root")
    parent = root
    for _ in range(sys.getrecursionlimit() + 100):
        child = TreeNode.directory("d", f"{parent.full_path}/d")
        parent.children["d"] = child
        child.parent = parent
        parent = child
    leaf = TreeNode.file("leaf.bin", f"{parent.full_path}/leaf.bin", 7, parent=parent)
    parent.children["leaf.bin"] = leaf
    node = parent
    while node is not None:
        node.size = 7
        node = node.parent

    restored = decode_tree(encode_tree(root))

    assert restored.size == 7
    assert sum(1 for _ in restored.walk()) == sys.getrecursionlimit() + 102


def test_wire_format_has_header_and_no_parent_field(sample_dir: Path) -> None:
    blob = encode_tree(scan_tree(str(sample_dir)).root)

    assert blob[:4] == SNAPSHOT_MAGIC
    assert blob[4] == SNAPSHOT_VERSION
    payload = json.loads(zlib.decompress(blob[5:]))
    assert payload["node_count"] == 4
    assert all(len(rec) == 5 for rec in payload["nodes"])
    assert "parent" not in json.dumps(payload)


def test_encoding_a_cycle_fails(sample_dir: Path) -> None:
    root = scan_tree(str(sample_dir)).root
    root.children["sub"].children["again"] = root

    with pytest.raises(EncodeError):
        encode_tree(root)


def test_open_missing_file_fails_with_io_error(tmp_path: Path) -> None:
    with pytest.raises(SnapshotIOError):
        open_snapshot(str(tmp_path / "missing.dsz"))


def test_save_to_unwritable_destination_fails(sample_dir: Path, tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(SnapshotIOError):
        save_snapshot(str(blocker / "tree.dsz"), scan_tree(str(sample_dir)).root)


@pytest.mark.parametrize("blob", [
    b"",
    b"DSZ",
    b"NOPE\x01" + zlib.compress(b"{}"),
    SNAPSHOT_MAGIC + b"\x01" + b"not zlib at all",
    SNAPSHOT_MAGIC + b"\x01" + zlib.compress(b"{not json"),
    SNAPSHOT_MAGIC + b"\x01" + zlib.compress(b"[]"),
])
def test_garbage_is_rejected(blob: bytes) -> None:
    with pytest.raises(DecodeError):
        decode_tree(blob)


def test_unknown_version_is_rejected(sample_dir: Path) -> None:
    blob = bytearray(encode_tree(scan_tree(str(sample_dir)).root))
    blob[4] = SNAPSHOT_VERSION + 1

    with pytest.raises(DecodeError, match="version"):
        decode_tree(bytes(blob))


def test_truncated_file_is_rejected(sample_dir: Path, tmp_path: Path) -> None:
    target = tmp_path / "t.dsz"
    save_snapshot(str(target), scan_tree(str(sample_dir)).root)
    data = target.read_bytes()
    target.write_bytes(data[: len(data) // 2])

    with pytest.raises(DecodeError):
        open_snapshot(str(target))


@pytest.mark.parametrize("nodes", [
    # declared child missing
    [["d", "r", "/r", 10, 2], ["f", "a", "/r/a", 10, 0]],
    # extra trailing record
    [["d", "r", "/r", 0, 0], ["f", "a", "/r/a", 0, 0]],
    # size invariant broken
    [["d", "r", "/r", 99, 1], ["f", "a", "/r/a", 10, 0]],
    # duplicate child names
    [["d", "r", "/r", 2, 2], ["f", "a", "/r/a", 1, 0], ["f", "a", "/r/a", 1, 0]],
    # bad kind tag
    [["x", "r", "/r", 0, 0]],
    # negative size
    [["d", "r", "/r", 0, 1], ["f", "a", "/r/a", -1, 0]],
    # file root
    [["f", "r", "/r", 1, 0]],
    # wrong arity
    [["d", "r", "/r", 0]],
])
def test_schema_violations_are_rejected(nodes) -> None:
    with pytest.raises(DecodeError):
        decode_tree(_blob({"node_count": len(nodes), "nodes": nodes}))


def test_node_count_mismatch_is_rejected() -> None:
    nodes = [["d", "r", "/r", 0, 0]]
    with pytest.raises(DecodeError):
        decode_tree(_blob({"node_count": 2, "nodes": nodes}))


def test_minimal_valid_document_decodes() -> None:
    nodes = [
        ["d", "r", "/r", 30, 2],
        ["f", "a", "/r/a", 10, 0],
        ["d", "s", "/r/s", 20, 1],
        ["f", "b", "/r/s/b", 20, 0],
    ]
    root = decode_tree(_blob({"node_count": 4, "nodes": nodes}))

    b = root.children["s"].children["b"]
    assert b.parent.parent is root
    assert root.size == 30
