"""
Filesystem helpers shared by the resolver, the engine and the CLI.
"""

from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import List

from filelock import FileLock

logger = logging.getLogger(__name__)


class LocalFileSystem:
    """
    The three filesystem capabilities the engine consumes.

    Directory listings that fail (missing, not a directory, no permission)
    come back empty instead of raising, so a bad search root simply yields
    no candidates.
    """

    def list_entries(self, path: Path) -> List[str]:
        try:
            return os.listdir(path)
        except (FileNotFoundError, NotADirectoryError, PermissionError) as exc:
            logger.debug("Cannot list %s (%s)", path, exc)
            return []

    def exists(self, path: Path | str) -> bool:
        return Path(path).exists()

    def is_dir(self, path: Path | str) -> bool:
        return Path(path).is_dir()


def is_relative_to(path: Path, base: Path) -> bool:
    """Return True if path is under base."""
    try:
        path.relative_to(base)
    except ValueError:
        return False
    return True


def _ensure_parent(target: Path) -> None:
    """Ensure the parent directory for target exists."""
    if target.parent and not target.parent.exists():
        target.parent.mkdir(parents=True, exist_ok=True)


@contextmanager
def file_lock(path: Path | str):
    """Context manager for a filesystem lock file alongside the target."""
    target = Path(path).expanduser().resolve()
    lock_path = target.with_suffix(f"{target.suffix}.lock")
    _ensure_parent(lock_path)
    with FileLock(str(lock_path)):
        yield


def _atomic_write_text(target: Path, content: str, encoding: str) -> None:
    """Write text atomically by staging a temp file and renaming."""
    _ensure_parent(target)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding=encoding) as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, target)
    finally:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass


def write_text_file(path: Path | str, content: str, encoding: str = "utf-8", *, lock: bool = True) -> Path:
    """
    Write rendered output to a file, creating parent directories as needed.
    """
    target = Path(path).expanduser().resolve()
    if lock:
        with file_lock(target):
            _atomic_write_text(target, content, encoding=encoding)
    else:
        _atomic_write_text(target, content, encoding=encoding)
    logger.debug("Wrote %d characters to %s", len(content), target)
    return target
