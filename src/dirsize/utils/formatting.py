from __future__ import annotations

"""
Human-Readable Formatting Helpers.

Renders raw byte counts with binary (1024-based) unit prefixes for the CLI
and interactive browser.
"""

from dirsize.domain.constants import SIZE_UNITS

_STEP = 1024.0


def format_size(num_bytes: float) -> str:
    """
    Render a byte count using the largest unit in which the value is >= 1.

    Examples:
        512 -> "512.00B", 1536 -> "1.50KB", 3 * 1024**3 -> "3.00GB"
    """
    value = float(num_bytes)
    unit = SIZE_UNITS[0]
    for candidate in SIZE_UNITS[1:]:
        if value < _STEP:
            break
        value /= _STEP
        unit = candidate
    return f"{value:.2f}{unit}"
