"""Inspection errors."""

from __future__ import annotations

from pathlib import Path


class InspectionError(Exception):
    """Base exception for inspection and file operations.

    Attributes:
        kind: Machine-readable error identifier.
        path: Path the failing operation was working on, when known.
    """

    kind = "inspection_error"

    def __init__(self, message: str, *, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = str(path) if path is not None else None


class InvalidArgumentError(InspectionError):
    """Raised when a required path argument is missing or empty."""

    kind = "invalid_argument"


class InspectionIOError(InspectionError):
    """Raised when a path cannot be opened, stat'ed, or read."""

    kind = "io_error"


class FormatError(InspectionError):
    """Raised when a recognized file is structurally invalid."""

    kind = "format_error"


__all__ = ["InspectionError", "InvalidArgumentError", "InspectionIOError", "FormatError"]
