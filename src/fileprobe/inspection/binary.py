"""Mach-O and fat (universal) header analysis.

Only the header magic and, for fat containers, the architecture count are
decoded. The magic is read as a big-endian integer so that the byte-swapped
("CIGAM") variants appear as distinct constants. The fat header's
``nfat_arch`` field is big-endian on disk whatever the magic's byte order.
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path

from .errors import FormatError, InspectionIOError
from .models import BinaryImageDescriptor

LOGGER = logging.getLogger(__name__)

MH_MAGIC = 0xFEEDFACE
MH_CIGAM = 0xCEFAEDFE
MH_MAGIC_64 = 0xFEEDFACF
MH_CIGAM_64 = 0xCFFAEDFE

FAT_MAGIC = 0xCAFEBABE
FAT_CIGAM = 0xBEBAFECA
FAT_MAGIC_64 = 0xCAFEBABF
FAT_CIGAM_64 = 0xBFBAFECA

THIN_32_MAGICS = frozenset({MH_MAGIC, MH_CIGAM})
THIN_64_MAGICS = frozenset({MH_MAGIC_64, MH_CIGAM_64})
FAT_MAGICS = frozenset({FAT_MAGIC, FAT_CIGAM, FAT_MAGIC_64, FAT_CIGAM_64})
ALL_MAGICS = THIN_32_MAGICS | THIN_64_MAGICS | FAT_MAGICS

# Magics whose on-disk bytes read in file order spell the native constant.
_BIG_ENDIAN_MAGICS = frozenset({MH_MAGIC, MH_MAGIC_64, FAT_MAGIC, FAT_MAGIC_64})

_MAGIC = struct.Struct(">I")
_FAT_HEADER = struct.Struct(">II")


def is_macho_magic(data: bytes) -> bool:
    """Return True when ``data`` starts with any thin or fat Mach-O magic."""
    if len(data) < _MAGIC.size:
        return False
    return _MAGIC.unpack_from(data)[0] in ALL_MAGICS


class BinaryFormatAnalyzer:
    """Read executable headers and report bitness and architecture count."""

    def analyze(self, path: Path) -> BinaryImageDescriptor:
        """Analyze the header of the binary at ``path``.

        Args:
            path: Binary to analyze.

        Returns:
            BinaryImageDescriptor: Valid descriptor for a recognized magic.

        Raises:
            InspectionIOError: If the file cannot be opened or the magic cannot be read.
            FormatError: If the magic is unknown or the fat header is malformed.
        """
        path = Path(path)
        try:
            with path.open("rb") as fh:
                head = fh.read(_MAGIC.size)
                if len(head) != _MAGIC.size:
                    raise InspectionIOError(f"Cannot read magic number: {path}", path=path)
                magic = _MAGIC.unpack(head)[0]
                if magic in FAT_MAGICS:
                    fh.seek(0)
                    return self._analyze_fat(magic, fh.read(_FAT_HEADER.size), path)
        except OSError as exc:
            raise InspectionIOError(
                f"Cannot open Mach-O file: {path}: {exc.strerror or exc}", path=path
            ) from exc
        return self.analyze_magic(magic, path=path)

    def analyze_magic(self, magic: int, *, path: Path | None = None) -> BinaryImageDescriptor:
        """Build a descriptor for a thin header magic."""
        byte_order = "big" if magic in _BIG_ENDIAN_MAGICS else "little"
        if magic in THIN_32_MAGICS:
            return BinaryImageDescriptor(
                is_valid=True,
                is_64bit=False,
                architecture_count=1,
                architectures="arm",
                byte_order=byte_order,
            )
        if magic in THIN_64_MAGICS:
            return BinaryImageDescriptor(
                is_valid=True,
                is_64bit=True,
                architecture_count=1,
                architectures="arm64",
                byte_order=byte_order,
            )
        LOGGER.debug("Unrecognized header magic 0x%08x in %s", magic, path)
        raise FormatError("invalid header magic", path=path)

    def _analyze_fat(self, magic: int, header: bytes, path: Path) -> BinaryImageDescriptor:
        if len(header) != _FAT_HEADER.size:
            raise FormatError("truncated fat header", path=path)
        _, count = _FAT_HEADER.unpack(header)
        if count < 1:
            raise FormatError("fat header declares no architectures", path=path)
        return BinaryImageDescriptor(
            is_valid=True,
            is_64bit=magic in (FAT_MAGIC_64, FAT_CIGAM_64),
            architecture_count=count,
            architectures="universal",
            is_fat=True,
            byte_order="big" if magic in _BIG_ENDIAN_MAGICS else "little",
        )


__all__ = [
    "BinaryFormatAnalyzer",
    "is_macho_magic",
    "MH_MAGIC",
    "MH_CIGAM",
    "MH_MAGIC_64",
    "MH_CIGAM_64",
    "FAT_MAGIC",
    "FAT_CIGAM",
    "FAT_MAGIC_64",
    "FAT_CIGAM_64",
]
