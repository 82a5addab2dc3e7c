from __future__ import annotations

"""
Domain Constants.

Centralised application-wide constants: configuration versioning,
snapshot format identifiers and interactive browser defaults.
"""

from typing import List

CURRENT_CONFIG_VERSION = "1.0.0"

# Snapshot wire format
SNAPSHOT_MAGIC = b"DSZS"
SNAPSHOT_VERSION = 1

# Interactive browser
DEFAULT_PAGE_SIZE = 20

# Binary (1024-based) units, smallest first
SIZE_UNITS: List[str] = ["B", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]
