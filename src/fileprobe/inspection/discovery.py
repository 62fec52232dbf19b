"""Directory discovery utilities."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

from .errors import InspectionIOError
from .inventory import FileInventory
from .models import FileRecord

LOGGER = logging.getLogger(__name__)


class DirectoryScanner:
    """Walk a directory tree and produce inventory records in pre-order.

    Entries are reported in the order the operating system lists them. When
    recursing, a directory's subtree immediately follows the directory's own
    record. Directories are tracked by ``(st_dev, st_ino)`` so a tree that
    loops back on itself through symbolic links is entered only once.
    """

    def __init__(
        self,
        *,
        recursive: bool,
        follow_symlinks: bool = True,
        include_hidden: bool = True,
        max_depth: int | None = None,
        inventory: FileInventory | None = None,
    ) -> None:
        self.recursive = recursive
        self.follow_symlinks = follow_symlinks
        self.include_hidden = include_hidden
        self.max_depth = max_depth
        self.inventory = inventory or FileInventory()

    def scan(self, root: Path) -> list[FileRecord]:
        """Return every record under ``root``.

        Raises:
            InspectionIOError: If ``root`` cannot be opened as a directory.
        """
        return list(self.iter_records(root))

    def iter_records(self, root: Path) -> Iterator[FileRecord]:
        """Yield records under ``root`` lazily.

        The root listing is read on the first iteration, so an unreadable
        root raises ``InspectionIOError`` from the first ``next()`` call.
        """
        root = Path(os.path.abspath(Path(root).expanduser()))
        try:
            root_stat = root.stat()
            entries = self._list(root)
        except OSError as exc:
            raise InspectionIOError(
                f"Cannot open directory: {root}: {exc.strerror or exc}", path=root
            ) from exc

        visited = {(root_stat.st_dev, root_stat.st_ino)}
        stack: list[tuple[Iterator[os.DirEntry[str]], int]] = [(iter(entries), 0)]

        while stack:
            pending, depth = stack[-1]
            entry = next(pending, None)
            if entry is None:
                stack.pop()
                continue
            if not self.include_hidden and entry.name.startswith("."):
                continue

            try:
                record = self.inventory.inspect(Path(entry.path), strict=False)
            except InspectionIOError as exc:
                LOGGER.warning("Skipping %s: %s", entry.path, exc)
                continue
            yield record

            if not (self.recursive and record.is_directory):
                continue
            if not self.follow_symlinks and entry.is_symlink():
                continue
            if self.max_depth is not None and depth + 1 > self.max_depth:
                continue

            children = self._descend(Path(entry.path), visited)
            if children is not None:
                stack.append((iter(children), depth + 1))

    def _descend(
        self, directory: Path, visited: set[tuple[int, int]]
    ) -> list[os.DirEntry[str]] | None:
        try:
            info = directory.stat()
        except OSError as exc:
            LOGGER.warning("Cannot stat directory %s: %s", directory, exc)
            return None
        key = (info.st_dev, info.st_ino)
        if key in visited:
            LOGGER.warning("Directory %s already visited; not descending again", directory)
            return None
        visited.add(key)
        try:
            return self._list(directory)
        except OSError as exc:
            LOGGER.warning("Cannot open directory %s: %s", directory, exc)
            return None

    def _list(self, directory: Path) -> list[os.DirEntry[str]]:
        with os.scandir(directory) as it:
            return list(it)


__all__ = ["DirectoryScanner"]
