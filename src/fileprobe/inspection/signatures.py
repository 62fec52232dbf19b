"""Magic byte signatures and the extension fallback table."""

from __future__ import annotations

from dataclasses import dataclass

from .models import FileType


@dataclass(frozen=True, slots=True)
class SignatureEntry:
    """A byte pattern matched at offset zero and the type it identifies."""

    pattern: bytes
    file_type: FileType

    @property
    def length(self) -> int:
        return len(self.pattern)

    def matches(self, data: bytes) -> bool:
        """Return True when ``data`` is long enough and starts with the pattern."""
        return len(data) >= self.length and data[: self.length] == self.pattern


# Order is priority: the first matching entry wins.
SIGNATURES: tuple[SignatureEntry, ...] = (
    # Mach-O thin headers
    SignatureEntry(b"\xfe\xed\xfa\xce", FileType.EXECUTABLE_IMAGE),
    SignatureEntry(b"\xfe\xed\xfa\xcf", FileType.EXECUTABLE_IMAGE),
    SignatureEntry(b"\xce\xfa\xed\xfe", FileType.EXECUTABLE_IMAGE),
    SignatureEntry(b"\xcf\xfa\xed\xfe", FileType.EXECUTABLE_IMAGE),
    # Fat / universal headers
    SignatureEntry(b"\xca\xfe\xba\xbe", FileType.EXECUTABLE_IMAGE),
    SignatureEntry(b"\xbe\xba\xfe\xca", FileType.EXECUTABLE_IMAGE),
    SignatureEntry(b"\xca\xfe\xba\xbf", FileType.EXECUTABLE_IMAGE),
    SignatureEntry(b"\xbf\xba\xfe\xca", FileType.EXECUTABLE_IMAGE),
    # ZIP family
    SignatureEntry(b"PK\x03\x04", FileType.ARCHIVE),
    SignatureEntry(b"PK\x05\x06", FileType.ARCHIVE),
    SignatureEntry(b"PK\x07\x08", FileType.ARCHIVE),
    # Images
    SignatureEntry(b"\xff\xd8\xff", FileType.IMAGE),
    SignatureEntry(b"\x89PNG", FileType.IMAGE),
    SignatureEntry(b"GIF89a", FileType.IMAGE),
    SignatureEntry(b"GIF87a", FileType.IMAGE),
    SignatureEntry(b"ftyp", FileType.VIDEO),
    SignatureEntry(b"%PDF", FileType.PDF),
    SignatureEntry(b"<?xml", FileType.XML),
    SignatureEntry(b"bplist", FileType.PROPERTY_LIST),
)

# ISO base media files carry their marker after the 4-byte box size.
CONTAINER_MARKER = b"ftyp"
CONTAINER_MARKER_OFFSET = 4
CONTAINER_MIN_BYTES = 12

EXTENSION_TYPES: dict[str, FileType] = {
    "json": FileType.JSON,
    "plist": FileType.PROPERTY_LIST,
    "xml": FileType.XML,
    "txt": FileType.TEXT,
    "text": FileType.TEXT,
    "p12": FileType.KEY_STORE,
    "pfx": FileType.KEY_STORE,
    "mobileprovision": FileType.PROVISIONING_PROFILE,
    "dylib": FileType.DYNAMIC_LIBRARY,
    "mp3": FileType.AUDIO,
    "m4a": FileType.AUDIO,
}

ARCHIVE_TYPES = frozenset({FileType.ARCHIVE})


def match_signature(data: bytes) -> SignatureEntry | None:
    """Return the first table entry matching the start of ``data``."""
    for entry in SIGNATURES:
        if entry.matches(data):
            return entry
    return None


__all__ = [
    "SignatureEntry",
    "SIGNATURES",
    "EXTENSION_TYPES",
    "ARCHIVE_TYPES",
    "CONTAINER_MARKER",
    "CONTAINER_MARKER_OFFSET",
    "CONTAINER_MIN_BYTES",
    "match_signature",
]
