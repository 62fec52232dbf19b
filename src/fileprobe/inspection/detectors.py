"""File type detection and hashing utilities."""

from __future__ import annotations

import hashlib
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Sequence

from .errors import InspectionIOError
from .models import DigestSet, FileType
from .signatures import (
    ARCHIVE_TYPES,
    CONTAINER_MARKER,
    CONTAINER_MARKER_OFFSET,
    CONTAINER_MIN_BYTES,
    EXTENSION_TYPES,
    match_signature,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 32
DEFAULT_CHUNK_SIZE = 8 * 1024
_TEXT_CONTROL_BYTES = frozenset(b"\t\n\r")


def extension_of(name: str) -> str:
    """Return the lower-cased extension of a base name, or an empty string."""
    base = Path(name).name
    _, dot, ext = base.rpartition(".")
    if not dot:
        return ""
    return ext.lower()


def looks_like_text(data: bytes) -> bool:
    """Return True when every byte is printable or a tab/newline/carriage return."""
    if not data:
        return False
    return all(byte >= 32 or byte in _TEXT_CONTROL_BYTES for byte in data)


def read_prefix(path: Path, size: int) -> bytes:
    """Read up to ``size`` bytes from the start of ``path``.

    Raises:
        InspectionIOError: If the file cannot be opened or read.
    """
    try:
        with path.open("rb") as fh:
            return fh.read(size)
    except OSError as exc:
        raise InspectionIOError(
            f"Cannot read file: {path}: {exc.strerror or exc}", path=path
        ) from exc


class TypeClassifier:
    """Identify a FileType from magic bytes, extension, and a text heuristic."""

    def __init__(
        self,
        *,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        app_archive_extensions: Iterable[str] = ("ipa",),
    ) -> None:
        self.sample_size = sample_size
        self.app_archive_extensions = frozenset(
            ext.lower().lstrip(".") for ext in app_archive_extensions
        )

    def classify(self, path: Path) -> FileType:
        """Return the FileType for the file at ``path``.

        Args:
            path: File to classify.

        Returns:
            FileType: Detected type, or ``FileType.UNKNOWN``.

        Raises:
            InspectionIOError: If the file cannot be read.
        """
        path = Path(path)
        data = read_prefix(path, self.sample_size)
        return self.classify_bytes(data, path.name)

    def classify_bytes(self, data: bytes, name: str = "") -> FileType:
        """Classify an in-memory prefix, using ``name`` for extension rules."""
        data = data[: self.sample_size]
        extension = extension_of(name) if name else ""

        entry = match_signature(data)
        if entry is not None:
            if entry.file_type in ARCHIVE_TYPES and extension in self.app_archive_extensions:
                return FileType.APP_ARCHIVE
            return entry.file_type

        if (
            len(data) >= CONTAINER_MIN_BYTES
            and data[CONTAINER_MARKER_OFFSET : CONTAINER_MARKER_OFFSET + len(CONTAINER_MARKER)]
            == CONTAINER_MARKER
        ):
            return FileType.VIDEO

        mapped = EXTENSION_TYPES.get(extension)
        if mapped is not None:
            return mapped

        if looks_like_text(data):
            return FileType.TEXT
        return FileType.UNKNOWN


class DigestEngine:
    """Compute MD5, SHA-1, and SHA-256 digests in a single streaming pass."""

    def __init__(self, *, chunk_size: int = DEFAULT_CHUNK_SIZE, max_workers: int = 1) -> None:
        self.chunk_size = max(1, chunk_size)
        self.max_workers = max(1, max_workers)

    def digest(self, path: Path) -> DigestSet:
        """Return the digests of the file at ``path``.

        Raises:
            InspectionIOError: If the file cannot be opened or read.
        """
        path = Path(path)
        md5 = hashlib.md5()
        sha1 = hashlib.sha1()
        sha256 = hashlib.sha256()
        try:
            with path.open("rb") as fh:
                for chunk in iter(lambda: fh.read(self.chunk_size), b""):
                    md5.update(chunk)
                    sha1.update(chunk)
                    sha256.update(chunk)
        except OSError as exc:
            raise InspectionIOError(
                f"Cannot open file for hashing: {path}: {exc.strerror or exc}", path=path
            ) from exc
        return DigestSet(md5=md5.hexdigest(), sha1=sha1.hexdigest(), sha256=sha256.hexdigest())

    def digest_many(self, paths: Sequence[Path]) -> list[DigestSet]:
        """Digest several files, returning results in input order.

        Files are hashed on a pool of at most ``max_workers`` threads. The
        first failure is raised after all submitted work completes.
        """
        if self.max_workers == 1 or len(paths) < 2:
            return [self.digest(path) for path in paths]
        LOGGER.debug("Hashing %d files with %d workers", len(paths), self.max_workers)
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(self.digest, paths))


__all__ = [
    "TypeClassifier",
    "DigestEngine",
    "extension_of",
    "looks_like_text",
    "read_prefix",
]
