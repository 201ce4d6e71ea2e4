"""
Shared utility helpers for filesystem access and text handling.
"""

from .filesystem import LocalFileSystem, is_relative_to, write_text_file
from .text import is_absolute_url, parse_assignments

__all__ = [
    "LocalFileSystem",
    "is_relative_to",
    "write_text_file",
    "is_absolute_url",
    "parse_assignments",
]
