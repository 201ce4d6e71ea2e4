"""
Template and asset lookup below the document root.
"""

from .groups import GroupPaths
from .resolver import FileSystem, PathResolver

__all__ = ["FileSystem", "GroupPaths", "PathResolver"]
