"""Per-path inventory records."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from .detectors import TypeClassifier, read_prefix
from .errors import InspectionIOError
from .models import FileRecord, FileType

LOGGER = logging.getLogger(__name__)

PREVIEW_BYTES = 8


def hex_preview(data: bytes, limit: int = PREVIEW_BYTES) -> str:
    """Return space-separated upper-case hex pairs for the first ``limit`` bytes."""
    return " ".join(f"{byte:02X}" for byte in data[:limit])


class FileInventory:
    """Build FileRecord entries by stat'ing and classifying paths."""

    def __init__(self, classifier: TypeClassifier | None = None) -> None:
        self.classifier = classifier or TypeClassifier()

    def inspect(self, path: Path, *, strict: bool = True) -> FileRecord:
        """Return an inventory record for ``path``.

        Args:
            path: File or directory to inspect.
            strict: When False, unreadable files are recorded as unknown and
                dangling symlinks are described from ``lstat`` instead of failing.

        Returns:
            FileRecord: Record describing the path.

        Raises:
            InspectionIOError: If the path cannot be stat'ed, or, in strict
                mode, a file cannot be read for classification.
        """
        path = Path(os.path.abspath(path))
        try:
            info = path.stat()
        except OSError as exc:
            if strict:
                raise InspectionIOError(
                    f"Cannot stat file: {path}: {exc.strerror or exc}", path=path
                ) from exc
            try:
                info = path.lstat()
            except OSError:
                raise InspectionIOError(
                    f"Cannot stat file: {path}: {exc.strerror or exc}", path=path
                ) from exc
            LOGGER.debug("Recording dangling link %s from lstat", path)
            return self._record(path, info, FileType.UNKNOWN, "")

        if not stat.S_ISREG(info.st_mode):
            # Directories, pipes, sockets and devices are never opened.
            return self._record(path, info, FileType.UNKNOWN, "")

        try:
            head = read_prefix(path, max(self.classifier.sample_size, PREVIEW_BYTES))
        except InspectionIOError:
            if strict:
                raise
            LOGGER.debug("Cannot read %s; recording as unknown", path)
            return self._record(path, info, FileType.UNKNOWN, "")

        file_type = self.classifier.classify_bytes(head, path.name)
        return self._record(path, info, file_type, hex_preview(head))

    def _record(
        self, path: Path, info: os.stat_result, file_type: FileType, signature: str
    ) -> FileRecord:
        return FileRecord(
            path=str(path),
            name=path.name,
            file_type=file_type,
            size=info.st_size,
            signature=signature,
            is_directory=stat.S_ISDIR(info.st_mode),
            is_executable=bool(info.st_mode & stat.S_IXUSR),
        )


__all__ = ["FileInventory", "hex_preview", "PREVIEW_BYTES"]
