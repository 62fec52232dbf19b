"""Application bundle (``.ipa``) metadata extraction."""

from __future__ import annotations

import logging
import plistlib
import re
import zipfile
from pathlib import Path
from xml.parsers.expat import ExpatError

from fileprobe.inspection.binary import is_macho_magic
from fileprobe.inspection.errors import FormatError, InspectionIOError

from .archive import ZIP_READ_ERRORS
from .models import BundleMetadata

LOGGER = logging.getLogger(__name__)

_APP_DIR = re.compile(r"^Payload/([^/]+\.app)/")
PROVISIONING_NAME = "embedded.mobileprovision"
SIGNATURE_NAME = "_CodeSignature/CodeResources"


class BundleInspector:
    """Read bundle metadata from the ``Payload/<Name>.app`` directory of an archive."""

    def inspect(self, archive_path: Path) -> BundleMetadata:
        """Return metadata for the application bundle inside ``archive_path``.

        Args:
            archive_path: Path to an ``.ipa`` (ZIP) archive.

        Returns:
            BundleMetadata: Identifier, versions, names, and structural flags.

        Raises:
            FormatError: If the archive is not a ZIP file, lacks an app
                directory or Info.plist, or the manifest cannot be parsed.
            InspectionIOError: If the archive cannot be opened.
        """
        archive_path = Path(archive_path)
        try:
            with zipfile.ZipFile(archive_path) as archive:
                return self._read(archive, archive_path)
        except ZIP_READ_ERRORS as exc:
            raise FormatError(f"Unreadable ZIP archive: {exc}", path=archive_path) from exc
        except OSError as exc:
            raise InspectionIOError(
                f"Cannot open bundle {archive_path}: {exc.strerror or exc}", path=archive_path
            ) from exc

    def _read(self, archive: zipfile.ZipFile, archive_path: Path) -> BundleMetadata:
        names = archive.namelist()
        app_dir = self._find_app_dir(names)
        if app_dir is None:
            raise FormatError("No Payload/*.app directory in archive", path=archive_path)

        manifest_name = f"{app_dir}Info.plist"
        if manifest_name not in names:
            raise FormatError("No application bundle manifest (Info.plist)", path=archive_path)
        try:
            manifest = plistlib.loads(archive.read(manifest_name))
        except (plistlib.InvalidFileException, ValueError, ExpatError) as exc:
            raise FormatError(f"Unreadable Info.plist: {exc}", path=archive_path) from exc
        if not isinstance(manifest, dict):
            raise FormatError("Info.plist does not contain a dictionary", path=archive_path)

        executables = 0
        for info in archive.infolist():
            if info.is_dir() or not info.filename.startswith(app_dir) or info.file_size < 4:
                continue
            with archive.open(info) as member:
                if is_macho_magic(member.read(4)):
                    executables += 1

        LOGGER.debug("Bundle %s: %s with %d executable(s)", archive_path, app_dir, executables)
        return BundleMetadata(
            bundle_identifier=_text(manifest, "CFBundleIdentifier"),
            version=_text(manifest, "CFBundleShortVersionString", "CFBundleVersion"),
            minimum_os_version=_text(manifest, "MinimumOSVersion"),
            display_name=_text(manifest, "CFBundleDisplayName", "CFBundleName"),
            has_provisioning=f"{app_dir}{PROVISIONING_NAME}" in names,
            is_signed=f"{app_dir}{SIGNATURE_NAME}" in names,
            executable_count=executables,
        )

    def _find_app_dir(self, names: list[str]) -> str | None:
        # Nested bundles (plugins, watch apps) live deeper than Payload/<Name>.app/.
        for name in names:
            match = _APP_DIR.match(name)
            if match:
                return f"Payload/{match.group(1)}/"
        return None


def _text(manifest: dict, *keys: str) -> str:
    for key in keys:
        value = manifest.get(key)
        if value:
            return str(value)
    return ""


__all__ = ["BundleInspector", "BundleMetadata"]
