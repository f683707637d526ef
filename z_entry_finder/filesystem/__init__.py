"""File-system abstraction."""

from z_entry_finder.filesystem.base import FileSystem
from z_entry_finder.filesystem.local import LocalFileSystem

__all__ = ["FileSystem", "LocalFileSystem"]
