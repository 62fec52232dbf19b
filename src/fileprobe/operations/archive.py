"""ZIP archive creation, extraction, and validation."""

from __future__ import annotations

import errno
import logging
import os
import tempfile
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import Iterable

from fileprobe.inspection.detectors import TypeClassifier
from fileprobe.inspection.errors import FormatError, InspectionIOError, InvalidArgumentError
from fileprobe.inspection.models import FileType

LOGGER = logging.getLogger(__name__)

# zipfile raises these for corrupt streams, encrypted members and unknown codecs.
ZIP_READ_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, RuntimeError, NotImplementedError)

COMPRESSION_METHODS = {
    "stored": zipfile.ZIP_STORED,
    "deflated": zipfile.ZIP_DEFLATED,
    "bzip2": zipfile.ZIP_BZIP2,
    "lzma": zipfile.ZIP_LZMA,
}


class ArchiveManager:
    """Create, extract, and validate ZIP-family archives, including app bundles."""

    def __init__(self, classifier: TypeClassifier | None = None) -> None:
        self.classifier = classifier or TypeClassifier()

    def create(
        self,
        sources: Iterable[Path],
        output: Path,
        *,
        compression: str = "deflated",
    ) -> Path:
        """Write ``sources`` into a new archive at ``output``.

        Each source is stored under its base name; directories are added
        recursively beneath that name.

        Raises:
            InvalidArgumentError: If no sources are given or the compression is unknown.
            InspectionIOError: If a source cannot be read or the output written.
        """
        method = COMPRESSION_METHODS.get(compression)
        if method is None:
            raise InvalidArgumentError(f"Unsupported compression method: {compression}")
        source_paths = [Path(source) for source in sources]
        if not source_paths:
            raise InvalidArgumentError("No sources given for archive creation")

        output = Path(output)
        try:
            fd, staging_name = tempfile.mkstemp(
                prefix=f".{output.name}.", suffix=".tmp", dir=output.parent
            )
            os.close(fd)
            staging = Path(staging_name)
            skip = {os.path.abspath(output), os.path.abspath(staging)}
            try:
                with zipfile.ZipFile(
                    staging, "w", compression=method, strict_timestamps=False
                ) as archive:
                    for source in source_paths:
                        self._add(archive, source, skip)
                os.chmod(staging, 0o644)
                os.replace(staging, output)
            finally:
                staging.unlink(missing_ok=True)
        except OSError as exc:
            failed = exc.filename or output
            raise InspectionIOError(
                f"Cannot create archive {output}: {failed}: {exc.strerror or exc}", path=failed
            ) from exc
        LOGGER.info("Created archive %s from %d source(s)", output, len(source_paths))
        return output

    def extract(self, archive_path: Path, destination_dir: Path) -> Path:
        """Extract ``archive_path`` into ``destination_dir``.

        Raises:
            FormatError: If the file is not a ZIP archive or a member would
                escape the destination directory.
            InspectionIOError: If the archive or destination cannot be accessed.
        """
        archive_path = Path(archive_path)
        destination = Path(destination_dir)
        try:
            with zipfile.ZipFile(archive_path) as archive:
                for member in archive.namelist():
                    if not _is_safe_member(member):
                        raise FormatError(
                            f"Archive member escapes destination: {member}", path=archive_path
                        )
                destination.mkdir(parents=True, exist_ok=True)
                archive.extractall(destination)
        except ZIP_READ_ERRORS as exc:
            raise FormatError(f"Unreadable ZIP archive: {exc}", path=archive_path) from exc
        except OSError as exc:
            raise InspectionIOError(
                f"Cannot extract archive {archive_path}: {exc.strerror or exc}", path=archive_path
            ) from exc
        return destination

    def validate(self, archive_path: Path) -> bool:
        """Return True when the file is a readable ZIP-family archive with intact members.

        Raises:
            FormatError: If the file is not an archive or a member fails its CRC check.
            InspectionIOError: If the file cannot be read.
        """
        archive_path = Path(archive_path)
        file_type = self.classifier.classify(archive_path)
        if file_type not in (FileType.ARCHIVE, FileType.APP_ARCHIVE):
            raise FormatError("Not an archive file", path=archive_path)
        try:
            with zipfile.ZipFile(archive_path) as archive:
                bad_member = archive.testzip()
        except ZIP_READ_ERRORS as exc:
            raise FormatError(f"Corrupt archive: {exc}", path=archive_path) from exc
        except OSError as exc:
            raise InspectionIOError(
                f"Cannot open archive {archive_path}: {exc.strerror or exc}", path=archive_path
            ) from exc
        if bad_member is not None:
            raise FormatError(f"Checksum mismatch in member {bad_member}", path=archive_path)
        return True

    def _add(self, archive: zipfile.ZipFile, source: Path, skip: set[str]) -> None:
        if not source.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(source))
        if not source.is_dir():
            archive.write(source, source.name)
            return
        base = source.parent
        archive.write(source, source.name)
        for current, dirnames, filenames in os.walk(source):
            dirnames.sort()
            current_path = Path(current)
            for dirname in dirnames:
                path = current_path / dirname
                archive.write(path, path.relative_to(base).as_posix())
            for filename in sorted(filenames):
                path = current_path / filename
                if os.path.abspath(path) in skip:
                    continue
                archive.write(path, path.relative_to(base).as_posix())


def _is_safe_member(name: str) -> bool:
    member = PurePosixPath(name.replace("\\", "/"))
    if member.is_absolute() or (member.parts and member.parts[0].endswith(":")):
        return False
    return ".." not in member.parts


__all__ = ["ArchiveManager", "COMPRESSION_METHODS", "ZIP_READ_ERRORS"]
