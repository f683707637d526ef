"""File-system abstract interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class FileSystem(ABC):
    """File-system abstraction used by every finder.

    Paths are absolute, ``/``-separated strings. v1 uses the local disk;
    tests can swap in an in-memory tree (see ``z_entry_finder.testing``).
    """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """True if anything (file, directory or symlink target) lives at *path*."""
        ...

    @abstractmethod
    def is_file(self, path: str) -> bool:
        """True if *path* is a regular file (symlinks are followed)."""
        ...

    @abstractmethod
    def is_directory(self, path: str) -> bool:
        """True if *path* is a directory (symlinks are followed)."""
        ...

    @abstractmethod
    def is_symlink(self, path: str) -> bool:
        """True if *path* itself is a symbolic link (lstat semantics)."""
        ...

    @abstractmethod
    def readdir(self, path: str) -> list[str]:
        """Names of the entries in directory *path*, sorted."""
        ...

    @abstractmethod
    def read_file(self, path: str) -> str:
        ...

    @abstractmethod
    def write_file(self, path: str, content: str) -> None:
        ...

    @abstractmethod
    def remove_file(self, path: str) -> None:
        ...

    @abstractmethod
    def resolve(self, *segments: str) -> str:
        """Resolve *segments* into a normalized absolute path."""
        ...

    @abstractmethod
    def join(self, base: str, *segments: str) -> str:
        ...

    @abstractmethod
    def relative(self, start: str, path: str) -> str:
        ...

    @abstractmethod
    def dirname(self, path: str) -> str:
        ...

    @abstractmethod
    def basename(self, path: str) -> str:
        ...

    def is_root(self, path: str) -> bool:
        return self.dirname(path) == path
