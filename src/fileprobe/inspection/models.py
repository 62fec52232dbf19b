"""Data models produced by the inspection components."""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class FileType(str, Enum):
    """Closed set of file categories reported by the classifier."""

    UNKNOWN = "unknown"
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    ARCHIVE = "archive"
    APP_ARCHIVE = "app_archive"
    EXECUTABLE_IMAGE = "executable_image"
    PROPERTY_LIST = "property_list"
    JSON = "json"
    XML = "xml"
    PDF = "pdf"
    KEY_STORE = "key_store"
    PROVISIONING_PROFILE = "provisioning_profile"
    DYNAMIC_LIBRARY = "dynamic_library"

    @property
    def display_name(self) -> str:
        """Return a human-readable label for the type."""
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    FileType.UNKNOWN: "Unknown",
    FileType.TEXT: "Text",
    FileType.IMAGE: "Image",
    FileType.VIDEO: "Video",
    FileType.AUDIO: "Audio",
    FileType.ARCHIVE: "Archive",
    FileType.APP_ARCHIVE: "IPA",
    FileType.EXECUTABLE_IMAGE: "Mach-O",
    FileType.PROPERTY_LIST: "Property List",
    FileType.JSON: "JSON",
    FileType.XML: "XML",
    FileType.PDF: "PDF",
    FileType.KEY_STORE: "Certificate",
    FileType.PROVISIONING_PROFILE: "Provisioning Profile",
    FileType.DYNAMIC_LIBRARY: "Dynamic Library",
}


class FrozenModel(BaseModel):
    """Shared configuration for immutable inspection records."""

    model_config = ConfigDict(frozen=True)


class FileRecord(FrozenModel):
    """Descriptive record for a single inspected path.

    Attributes:
        path: Absolute path of the entry.
        name: Base name of the entry.
        file_type: Classification result; always unknown for directories.
        size: Size in bytes as reported by stat.
        signature: Hex preview of up to eight leading bytes, e.g. ``CA FE BA BE``.
        is_directory: Whether the entry is a directory.
        is_executable: Whether the owner execute bit is set.
        is_signed: Reserved; always False.
    """

    path: str
    name: str
    file_type: FileType = FileType.UNKNOWN
    size: int = 0
    signature: str = ""
    is_directory: bool = False
    is_executable: bool = False
    is_signed: bool = False


class DigestSet(FrozenModel):
    """Hex-encoded digests computed from a single read of a file."""

    md5: str
    sha1: str
    sha256: str

    @classmethod
    def empty(cls) -> "DigestSet":
        """Return the zeroed digest set used when hashing fails."""
        return cls(md5="", sha1="", sha256="")


class BinaryImageDescriptor(FrozenModel):
    """Structural facts derived from a Mach-O or fat header.

    Attributes:
        is_valid: Whether a known header magic was recognized.
        is_64bit: Whether the header is a 64-bit variant.
        is_arm64e: Reserved; always False.
        architecture_count: Number of slices; at least one when valid.
        architectures: Architecture label (``arm``, ``arm64`` or ``universal``).
        is_fat: Whether the file is a multi-architecture container.
        byte_order: Byte order implied by the magic, when valid.
        has_encryption: Reserved; always False.
        is_position_independent: Reserved; always False.
        load_command_count: Reserved; always zero.
    """

    is_valid: bool = False
    is_64bit: bool = False
    is_arm64e: bool = False
    architecture_count: int = 0
    architectures: str = ""
    is_fat: bool = False
    byte_order: Optional[Literal["big", "little"]] = None
    has_encryption: bool = False
    is_position_independent: bool = False
    load_command_count: int = 0


__all__ = [
    "FileType",
    "FileRecord",
    "DigestSet",
    "BinaryImageDescriptor",
]
