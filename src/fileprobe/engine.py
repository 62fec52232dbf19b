"""Total inspection facade.

Every method on ``InspectionEngine`` returns an ``Outcome``: the operation's
value on success, or a well-defined empty value paired with the typed error
that caused the failure. Nothing is raised for expected I/O or format
problems, and no error state outlives the call that produced it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Generic, Iterable, Optional, Sequence, TypeVar

from fileprobe.config.models import FileprobeConfig
from fileprobe.inspection import (
    BinaryFormatAnalyzer,
    BinaryImageDescriptor,
    DigestEngine,
    DigestSet,
    DirectoryScanner,
    FileInventory,
    FileRecord,
    FileType,
    InspectionError,
    InvalidArgumentError,
    TypeClassifier,
)
from fileprobe.operations import (
    ArchiveManager,
    BulkFileOps,
    BulkResult,
    BundleInspector,
    BundleMetadata,
    ComparisonResult,
    ItemResult,
)

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """Result of a facade call.

    Attributes:
        value: Operation result, or the documented empty value on failure.
        error: Typed error describing the failure, if any.
    """

    value: T
    error: Optional[InspectionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str:
        return self.error.message if self.error is not None else ""

    def unwrap(self) -> T:
        """Return the value, raising the stored error on failure."""
        if self.error is not None:
            raise self.error
        return self.value


def _require_path(path: str | Path | None, label: str = "path") -> Path:
    if path is None or str(path) == "":
        raise InvalidArgumentError(f"Invalid {label}: a non-empty path is required")
    return Path(path)


class InspectionEngine:
    """Wire the inspection and operation components from configuration."""

    def __init__(self, config: FileprobeConfig | None = None) -> None:
        self.config = config or FileprobeConfig()
        self.classifier = TypeClassifier(
            sample_size=self.config.classification.sample_size,
            app_archive_extensions=self.config.classification.app_archive_extensions,
        )
        self.digests = DigestEngine(
            chunk_size=self.config.digest.chunk_size,
            max_workers=self.config.digest.max_workers,
        )
        self.analyzer = BinaryFormatAnalyzer()
        self.inventory = FileInventory(self.classifier)
        self.bulk = BulkFileOps(self.digests, chunk_size=self.config.digest.chunk_size)
        self.archives = ArchiveManager(self.classifier)
        self.bundles = BundleInspector()

    def scanner(
        self, *, recursive: bool | None = None, max_depth: int | None = None
    ) -> DirectoryScanner:
        """Return a scanner configured from the ``scanning`` settings."""
        settings = self.config.scanning
        return DirectoryScanner(
            recursive=settings.recursive if recursive is None else recursive,
            follow_symlinks=settings.follow_symlinks,
            include_hidden=settings.include_hidden,
            max_depth=settings.max_depth if max_depth is None else max_depth,
            inventory=self.inventory,
        )

    def classify(self, path: str | Path | None) -> Outcome[FileType]:
        return self._run(lambda: self.classifier.classify(_require_path(path)), FileType.UNKNOWN)

    def inspect(self, path: str | Path | None) -> Outcome[FileRecord]:
        empty = FileRecord(path=str(path or ""), name=Path(str(path or "")).name)
        return self._run(lambda: self.inventory.inspect(_require_path(path)), empty)

    def digest(self, path: str | Path | None) -> Outcome[DigestSet]:
        return self._run(lambda: self.digests.digest(_require_path(path)), DigestSet.empty())

    def digest_many(self, paths: Sequence[str | Path]) -> list[Outcome[DigestSet]]:
        """Digest several files; failures are reported per file."""
        if all(path is not None and str(path) != "" for path in paths):
            try:
                digests = self.digests.digest_many([Path(path) for path in paths])
                return [Outcome(value) for value in digests]
            except InspectionError:
                LOGGER.debug("Pooled hashing failed; digesting files individually")
        return [self.digest(path) for path in paths]

    def analyze_binary(self, path: str | Path | None) -> Outcome[BinaryImageDescriptor]:
        return self._run(
            lambda: self.analyzer.analyze(_require_path(path)), BinaryImageDescriptor()
        )

    def scan(
        self,
        path: str | Path | None,
        *,
        recursive: bool | None = None,
        max_depth: int | None = None,
    ) -> Outcome[list[FileRecord]]:
        scanner = self.scanner(recursive=recursive, max_depth=max_depth)
        return self._run(lambda: scanner.scan(_require_path(path, "directory path")), [])

    def bulk_delete(self, paths: Iterable[str | Path]) -> Outcome[BulkResult]:
        return self._bulk("delete", paths, None, lambda items, _: self.bulk.delete(items))

    def bulk_copy(
        self, paths: Iterable[str | Path], destination_dir: str | Path | None
    ) -> Outcome[BulkResult]:
        return self._bulk("copy", paths, destination_dir, self.bulk.copy)

    def bulk_move(
        self, paths: Iterable[str | Path], destination_dir: str | Path | None
    ) -> Outcome[BulkResult]:
        return self._bulk("move", paths, destination_dir, self.bulk.move)

    def compare(
        self, first: str | Path | None, second: str | Path | None
    ) -> Outcome[ComparisonResult]:
        return self._run(
            lambda: self.bulk.compare(_require_path(first), _require_path(second)),
            ComparisonResult(identical=False, size_equal=False),
        )

    def check_integrity(
        self, path: str | Path | None, expected_sha256: str | None
    ) -> Outcome[bool]:
        def _check() -> bool:
            if not expected_sha256:
                raise InvalidArgumentError("Invalid expected hash: a non-empty digest is required")
            return self.bulk.check_integrity(_require_path(path), expected_sha256)

        return self._run(_check, False)

    def create_archive(
        self,
        sources: Iterable[str | Path],
        output: str | Path | None,
        *,
        compression: str = "deflated",
    ) -> Outcome[Optional[Path]]:
        return self._run(
            lambda: self.archives.create(
                [_require_path(source, "source path") for source in sources],
                _require_path(output, "output path"),
                compression=compression,
            ),
            None,
        )

    def extract_archive(
        self, archive: str | Path | None, destination_dir: str | Path | None
    ) -> Outcome[Optional[Path]]:
        return self._run(
            lambda: self.archives.extract(
                _require_path(archive, "archive path"),
                _require_path(destination_dir, "destination directory"),
            ),
            None,
        )

    def validate_archive(self, archive: str | Path | None) -> Outcome[bool]:
        return self._run(
            lambda: self.archives.validate(_require_path(archive, "archive path")), False
        )

    def analyze_bundle(self, archive: str | Path | None) -> Outcome[Optional[BundleMetadata]]:
        return self._run(lambda: self.bundles.inspect(_require_path(archive, "bundle path")), None)

    # Internal helpers -------------------------------------------------

    def _run(self, operation: Callable[[], T], empty: T) -> Outcome[T]:
        try:
            return Outcome(operation())
        except InspectionError as exc:
            LOGGER.debug("%s failed: %s", type(exc).__name__, exc.message)
            return Outcome(empty, exc)

    def _bulk(
        self,
        operation: str,
        paths: Iterable[str | Path],
        destination_dir: str | Path | None,
        action: Callable[[list[Path], Path], BulkResult],
    ) -> Outcome[BulkResult]:
        raw_paths = list(paths)
        try:
            if not raw_paths:
                raise InvalidArgumentError(f"Invalid parameters for bulk {operation}: no paths")
            items = [_require_path(path) for path in raw_paths]
            destination = (
                _require_path(destination_dir, "destination directory")
                if operation != "delete"
                else Path()
            )
        except InvalidArgumentError as exc:
            failed = [
                ItemResult(source=Path(str(path or "")), ok=False, error=exc.message)
                for path in raw_paths
            ]
            return Outcome(BulkResult(operation=operation, items=failed), exc)
        return Outcome(action(items, destination))


__all__ = ["InspectionEngine", "Outcome"]
