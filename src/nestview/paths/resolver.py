"""
Locate templates and assets by base name below the document root.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Protocol

from ..util import LocalFileSystem, is_absolute_url, is_relative_to

logger = logging.getLogger(__name__)

_SEPARATORS = "/\\"


class FileSystem(Protocol):
    def list_entries(self, path: Path) -> List[str]:
        ...

    def exists(self, path: Path | str) -> bool:
        ...

    def is_dir(self, path: Path | str) -> bool:
        ...


class PathResolver:
    """
    Maps a bare filename to the first file with that base name under a search root.

    Search order is shallowest first; files at the same depth are visited in
    lexicographic order of their path below the search root. For an unchanged
    tree the same filename therefore always resolves to the same file, even when
    several files share the base name.

    Every search root is re-anchored under the document root, so results never
    point outside of it.
    """

    def __init__(self, document_root: Path | str, filesystem: Optional[FileSystem] = None):
        given = Path(os.fspath(document_root).strip()).expanduser()
        self._given_root = str(given).rstrip(_SEPARATORS) or os.sep
        self._document_root = given.resolve()
        self.filesystem = filesystem or LocalFileSystem()

    @property
    def document_root(self) -> Path:
        return self._document_root

    def search_root(self, directory: Path | str | None = None) -> Optional[Path]:
        """
        Normalize a search directory to an absolute path under the document root.

        ``"css"``, ``"/css/"`` and ``"<document_root>/css"`` all name the same
        directory. Returns None when the result would escape the document root.
        """
        if not directory:
            return self._document_root

        text = os.fspath(directory)
        for prefix in (str(self._document_root), self._given_root):
            if prefix == os.sep or not text.startswith(prefix):
                continue
            rest = text[len(prefix):]
            if not rest or rest[0] in _SEPARATORS:
                text = rest
                break
        text = text.strip(_SEPARATORS)

        candidate = (self._document_root / text).resolve()
        if not is_relative_to(candidate, self._document_root):
            logger.warning("Ignoring search root %s (outside %s)", directory, self._document_root)
            return None
        return candidate

    def iter_files(self, directory: Path, recursive: bool = True) -> Iterator[Path]:
        """
        Yield files below directory, level by level, skipping dot entries.

        Entries whose real location is outside the document root (symlinks
        pointing elsewhere) are neither yielded nor descended into.
        """
        pending = [directory]
        seen = set()
        while pending:
            next_level: List[Path] = []
            for current in pending:
                real = os.path.realpath(current)
                if real in seen:
                    continue
                seen.add(real)
                for name in sorted(self.filesystem.list_entries(current)):
                    if name.startswith("."):
                        continue
                    path = current / name
                    if not is_relative_to(Path(os.path.realpath(path)), self._document_root):
                        logger.warning("Ignoring %s (links outside %s)", path, self._document_root)
                        continue
                    if self.filesystem.is_dir(path):
                        if recursive:
                            next_level.append(path)
                        continue
                    yield path
            pending = next_level

    def list_files(self, directory: Path | str | None = None, recursive: bool = True) -> List[Path]:
        """
        Return every file below directory (document root when empty).
        """
        root = self.search_root(directory)
        if root is None:
            return []
        return list(self.iter_files(root, recursive=recursive))

    def to_root_relative(self, path: Path) -> str:
        return "/" + path.relative_to(self._document_root).as_posix()

    def resolve(
        self,
        filename: str,
        directory: Path | str | None = None,
        root_relative: bool = False,
        recursive: bool = True,
    ) -> Optional[str]:
        """
        Find filename under directory.

        Args:
            filename: Base name to look for. http(s) URLs are returned untouched.
            directory: Search root, relative to the document root or absolute
                under it. Defaults to the document root.
            root_relative: Return ``/path/from/document/root`` instead of an
                absolute filesystem path.
            recursive: Descend into subdirectories.

        Returns:
            The resolved path, or None when nothing matches.
        """
        if not isinstance(filename, (str, os.PathLike)) or not os.fspath(filename):
            logger.debug("Empty or invalid filename %r", filename)
            return None
        filename = os.fspath(filename)

        if is_absolute_url(filename):
            return filename

        root = self.search_root(directory)
        if root is None:
            return None

        for candidate in self.iter_files(root, recursive=recursive):
            if candidate.name == filename:
                if root_relative:
                    return self.to_root_relative(candidate)
                return str(candidate)

        logger.debug("No file named %s under %s", filename, root)
        return None
