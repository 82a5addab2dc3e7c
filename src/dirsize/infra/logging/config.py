from __future__ import annotations

"""
Logging Settings.

Level names accepted in the user configuration and the frozen settings
object consumed by `configure_logging`.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

LEVEL_NAMES: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Settings for one logging bootstrap.

    Attributes:
        level: Level name; unknown names fall back to INFO.
        console: Emit records on stderr.
        log_file: Rotating log file, or None for no file output.
        max_bytes: Rotation threshold for the log file.
        backup_count: Rotated files kept next to the active one.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 512 * 1024
    backup_count: int = 2

    console_fmt: str = "%(levelname)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

    @property
    def level_no(self) -> int:
        if not self.level:
            return logging.INFO
        return LEVEL_NAMES.get(str(self.level).strip().upper(), logging.INFO)

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any], log_file: Optional[str] = None) -> LoggingConfig:
        """Build from validated application settings (`log_level`, `log_to_file`)."""
        return cls(
            level=str(settings.get("log_level", "INFO")),
            console=True,
            log_file=log_file if settings.get("log_to_file") else None,
        )
