"""Bulk file operations, archives, and application bundles."""

from .archive import ArchiveManager
from .bulk import BulkFileOps
from .bundle import BundleInspector
from .models import BulkResult, BundleMetadata, ComparisonResult, ItemResult

__all__ = [
    "ArchiveManager",
    "BulkFileOps",
    "BulkResult",
    "BundleInspector",
    "BundleMetadata",
    "ComparisonResult",
    "ItemResult",
]
