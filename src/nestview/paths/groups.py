"""
Named search roots for groups of files (html, css, js, ...).
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict


class GroupPaths:
    """
    Maps a group name to the directory its files are searched in.

    Unregistered (or empty) groups fall back to the document root. Paths are
    stored as given and only checked when a lookup walks them.
    """

    def __init__(self, document_root: Path):
        self._document_root = document_root
        self._paths: Dict[str, Path | str] = {}

    def set(self, name: str, path: Path | str) -> None:
        self._paths[name] = path

    def get(self, name: str) -> Path | str:
        value = self._paths.get(name)
        if value:
            return value
        return self._document_root

    def __contains__(self, name: object) -> bool:
        return name in self._paths
