from __future__ import annotations

"""
Tree Error Taxonomy.

Every failure raised by the core carries a severity. CRITICAL failures
abort the running operation; NORMAL failures are recorded as warnings and
the operation carries on over the remaining siblings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# -----------------------------------------------------------------------------
# SEVERITY
# -----------------------------------------------------------------------------

class Severity(str, Enum):
    CRITICAL = "critical"
    NORMAL = "normal"


# -----------------------------------------------------------------------------
# EXCEPTIONS
# -----------------------------------------------------------------------------

class TreeError(Exception):
    """
    Base class for all directory tree failures.

    Attributes:
        message: Human readable description.
        operation: Public operation that raised the error.
        path: Filesystem path involved, if any.
        severity: CRITICAL or NORMAL.
        cause: Underlying exception, if any.
    """
    default_severity: Severity = Severity.CRITICAL

    def __init__(
            self,
            message: str,
            *,
            operation: str = "",
            path: str = "",
            severity: Optional[Severity] = None,
            cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.path = path
        self.severity = severity or self.default_severity
        self.cause = cause

    @property
    def is_critical(self) -> bool:
        return self.severity is Severity.CRITICAL

    def __str__(self) -> str:
        if self.operation:
            return f"{self.message} at {self.operation}"
        return self.message


class EntryNotFoundError(TreeError):
    pass


class NotDirectoryError(TreeError):
    pass


class AccessDeniedError(TreeError):
    pass


class ScanIOError(TreeError):
    """Unclassified filesystem failure during a scan."""


class WrongKindError(TreeError):
    """Operation invoked on a node of the wrong kind."""
    default_severity = Severity.NORMAL


class SnapshotIOError(TreeError):
    pass


class EncodeError(TreeError):
    pass


class DecodeError(TreeError):
    pass


# -----------------------------------------------------------------------------
# WARNING CHANNEL
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ScanWarning:
    """
    A tolerated (NORMAL severity) failure reported alongside results.

    Attributes:
        path: Path of the subtree or entry that was skipped.
        operation: Operation during which it occurred.
        message: Descriptive error message.
    """
    path: str
    operation: str
    message: str

    @classmethod
    def from_error(cls, err: TreeError) -> ScanWarning:
        return cls(path=err.path, operation=err.operation, message=err.message)
