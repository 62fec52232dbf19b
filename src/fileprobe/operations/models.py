"""Result models for file operations."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field


class ItemResult(BaseModel):
    """Outcome of a bulk operation on one path.

    Attributes:
        source: Path the operation was applied to.
        destination: Target path for copy and move operations.
        ok: Whether the operation succeeded.
        error: Failure description when ``ok`` is False.
    """

    source: Path
    destination: Optional[Path] = None
    ok: bool = True
    error: Optional[str] = None


class BulkResult(BaseModel):
    """Per-item results for a bulk delete, copy, or move."""

    operation: str
    items: List[ItemResult] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for item in self.items if item.ok)

    @property
    def failed(self) -> List[ItemResult]:
        return [item for item in self.items if not item.ok]


class ComparisonResult(BaseModel):
    """Byte-level comparison of two files.

    Attributes:
        identical: Whether both files have the same size and content.
        size_equal: Whether both files have the same size.
        difference: Absolute size difference when sizes differ, otherwise
            the number of differing bytes.
    """

    identical: bool
    size_equal: bool
    difference: int = 0


class BundleMetadata(BaseModel):
    """Metadata read from an application bundle archive."""

    bundle_identifier: str = ""
    version: str = ""
    minimum_os_version: str = ""
    display_name: str = ""
    has_provisioning: bool = False
    is_signed: bool = False
    executable_count: int = 0


__all__ = ["ItemResult", "BulkResult", "ComparisonResult", "BundleMetadata"]
