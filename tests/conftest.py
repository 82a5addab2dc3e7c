from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

1. Puts the 'src' directory on sys.path so the package imports uninstalled.
2. Provides on-disk directory fixtures shared by the scanner, query and
   snapshot tests.
"""

import os
import random
import sys
from pathlib import Path
from typing import Tuple

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def build_random_tree(base: Path, rng: random.Random, depth: int) -> Tuple[int, int, int]:
    """
    Create a random nested structure under `base`.

    Returns:
        Tuple[int, int, int]: (total bytes, file count, directory count)
                              for everything below `base`.
    """
    total, files, dirs = 0, 0, 0
    for i in range(rng.randint(1, 4)):
        size = rng.randint(0, 50) * 10
        (base / f"file_{i}.bin").write_bytes(b"x" * size)
        total += size
        files += 1
    if depth > 0:
        for i in range(rng.randint(1, 3)):
            sub = base / f"dir_{i}"
            sub.mkdir()
            t, f, d = build_random_tree(sub, rng, depth - 1)
            total += t
            files += f
            dirs += d + 1
    return total, files, dirs


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def sample_dir(tmp_path: Path) -> Path:
    """
    Small fixed structure:

    /root
      a.txt      (10 bytes)
      /sub
        b.txt    (20 bytes)
    """
    root = tmp_path / "root"
    root.mkdir()
    (root / "a.txt").write_bytes(b"0123456789")
    (root / "sub").mkdir()
    (root / "sub" / "b.txt").write_bytes(b"0123456789" * 2)
    return root


@pytest.fixture
def nested_dir(tmp_path: Path) -> Path:
    """
    Deeper structure with repeated names at several levels:

    /project
      readme.md            (5)
      /src
        readme.md          (7)
        main.py            (100)
        /pkg
          main.py          (50)
          /deep
            data.bin       (1000)
      /docs
        /readme.md         (directory, empty)
    """
    root = tmp_path / "project"
    (root / "src" / "pkg" / "deep").mkdir(parents=True)
    (root / "docs" / "readme.md").mkdir(parents=True)
    (root / "readme.md").write_bytes(b"x" * 5)
    (root / "src" / "readme.md").write_bytes(b"x" * 7)
    (root / "src" / "main.py").write_bytes(b"x" * 100)
    (root / "src" / "pkg" / "main.py").write_bytes(b"x" * 50)
    (root / "src" / "pkg" / "deep" / "data.bin").write_bytes(b"x" * 1000)
    return root


@pytest.fixture
def random_tree(tmp_path: Path):
    """
    Factory building a seeded random tree.

    Returns a callable (seed, depth) -> (root path, total bytes, files, dirs).
    """
    def _make(seed: int, depth: int = 3) -> Tuple[Path, int, int, int]:
        root = tmp_path / f"random_{seed}"
        root.mkdir()
        total, files, dirs = build_random_tree(root, random.Random(seed), depth)
        return root, total, files, dirs
    return _make
