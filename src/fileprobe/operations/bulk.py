"""Bulk file operations built on the inspection components."""

from __future__ import annotations

import errno
import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Iterable

from fileprobe.inspection.detectors import DEFAULT_CHUNK_SIZE, DigestEngine
from fileprobe.inspection.errors import InspectionIOError

from .models import BulkResult, ComparisonResult, ItemResult

LOGGER = logging.getLogger(__name__)


class BulkFileOps:
    """Best-effort delete, copy, and move plus comparison and integrity checks.

    A failure on one path never aborts the rest of a bulk call; every input
    path gets its own ItemResult.
    """

    def __init__(
        self,
        digest_engine: DigestEngine | None = None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.digest_engine = digest_engine or DigestEngine()
        self.chunk_size = max(1, chunk_size)

    def delete(self, paths: Iterable[Path]) -> BulkResult:
        """Remove each file or empty directory in ``paths``."""
        result = BulkResult(operation="delete")
        for raw in paths:
            path = Path(raw)
            try:
                if path.is_dir() and not path.is_symlink():
                    path.rmdir()
                else:
                    path.unlink()
            except OSError as exc:
                LOGGER.debug("Delete failed for %s: %s", path, exc)
                result.items.append(ItemResult(source=path, ok=False, error=_describe(exc)))
                continue
            result.items.append(ItemResult(source=path))
        return result

    def copy(self, paths: Iterable[Path], destination_dir: Path) -> BulkResult:
        """Copy each path into ``destination_dir`` under its base name."""
        return self._transfer("copy", paths, Path(destination_dir), self._copy_one)

    def move(self, paths: Iterable[Path], destination_dir: Path) -> BulkResult:
        """Move each path into ``destination_dir`` under its base name."""
        return self._transfer("move", paths, Path(destination_dir), self._move_one)

    def compare(self, first: Path, second: Path) -> ComparisonResult:
        """Compare two files byte for byte.

        Raises:
            InspectionIOError: If either file cannot be opened or read.
        """
        first, second = Path(first), Path(second)
        try:
            with first.open("rb") as fa, second.open("rb") as fb:
                size_a = os.fstat(fa.fileno()).st_size
                size_b = os.fstat(fb.fileno()).st_size
                if size_a != size_b:
                    return ComparisonResult(
                        identical=False, size_equal=False, difference=abs(size_a - size_b)
                    )
                differences = 0
                while True:
                    chunk_a = fa.read(self.chunk_size)
                    chunk_b = fb.read(self.chunk_size)
                    if not chunk_a and not chunk_b:
                        break
                    if chunk_a != chunk_b:
                        differences += sum(1 for a, b in zip(chunk_a, chunk_b) if a != b)
                        differences += abs(len(chunk_a) - len(chunk_b))
        except OSError as exc:
            raise InspectionIOError(
                f"Cannot open files for comparison: {exc.filename or first}: {exc.strerror or exc}",
                path=exc.filename or first,
            ) from exc
        return ComparisonResult(
            identical=differences == 0, size_equal=True, difference=differences
        )

    def check_integrity(self, path: Path, expected_sha256: str) -> bool:
        """Return True when the SHA-256 of ``path`` matches ``expected_sha256``.

        The comparison ignores case and surrounding whitespace.

        Raises:
            InspectionIOError: If the file cannot be hashed.
        """
        digests = self.digest_engine.digest(Path(path))
        return digests.sha256 == expected_sha256.strip().lower()

    # Internal helpers -------------------------------------------------

    def _transfer(
        self,
        operation: str,
        paths: Iterable[Path],
        destination_dir: Path,
        action: Callable[[Path, Path], None],
    ) -> BulkResult:
        result = BulkResult(operation=operation)
        for raw in paths:
            source = Path(raw)
            target = destination_dir / source.name
            try:
                action(source, target)
            except (OSError, shutil.Error) as exc:
                LOGGER.debug("%s failed for %s -> %s: %s", operation, source, target, exc)
                result.items.append(
                    ItemResult(source=source, destination=target, ok=False, error=_describe(exc))
                )
                continue
            result.items.append(ItemResult(source=source, destination=target))
        return result

    def _copy_one(self, source: Path, target: Path) -> None:
        if source.is_dir():
            shutil.copytree(source, target)
        else:
            shutil.copy2(source, target)

    def _move_one(self, source: Path, target: Path) -> None:
        try:
            os.rename(source, target)
        except OSError as exc:
            if exc.errno != errno.EXDEV:
                raise
            shutil.move(str(source), str(target))


def _describe(exc: BaseException) -> str:
    if isinstance(exc, OSError) and exc.strerror:
        return f"{exc.strerror}: {exc.filename}" if exc.filename else exc.strerror
    return str(exc)


__all__ = ["BulkFileOps"]
