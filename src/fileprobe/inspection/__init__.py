"""File classification, header analysis, hashing, and directory scanning."""

from .binary import BinaryFormatAnalyzer
from .detectors import DigestEngine, TypeClassifier
from .discovery import DirectoryScanner
from .errors import FormatError, InspectionError, InspectionIOError, InvalidArgumentError
from .inventory import FileInventory
from .models import BinaryImageDescriptor, DigestSet, FileRecord, FileType

__all__ = [
    "BinaryFormatAnalyzer",
    "BinaryImageDescriptor",
    "DigestEngine",
    "DigestSet",
    "DirectoryScanner",
    "FileInventory",
    "FileRecord",
    "FileType",
    "FormatError",
    "InspectionError",
    "InspectionIOError",
    "InvalidArgumentError",
    "TypeClassifier",
]
