"""Test doubles for z_entry_finder.

Usage::

    from z_entry_finder.testing import InMemoryFileSystem

    fs = InMemoryFileSystem()
    fs.add_file("/proj/node_modules/a/package.json", '{"typings": "./a.d.ts"}')
    fs.add_symlink("/proj/node_modules/b", "/elsewhere/b")
    fs.deny_read("/proj/node_modules/private")
"""

from __future__ import annotations

import posixpath

from z_entry_finder.filesystem.base import FileSystem

_MAX_SYMLINK_DEPTH = 40


class InMemoryFileSystem(FileSystem):
    """A file-system held in dictionaries, with symlinks and unreadable directories.

    Parent directories are created implicitly. The working directory used
    by :meth:`resolve` for relative paths is ``/``.
    """

    def __init__(self) -> None:
        self._files: dict[str, str] = {}
        self._directories: set[str] = {"/"}
        self._symlinks: dict[str, str] = {}
        self._unreadable: set[str] = set()

    # ── Setup helpers ──

    def add_file(self, path: str, content: str = "") -> None:
        path = self.resolve(path)
        self._add_parents(path)
        self._files[path] = content

    def add_directory(self, path: str) -> None:
        path = self.resolve(path)
        self._add_parents(path)
        self._directories.add(path)

    def add_symlink(self, path: str, target: str) -> None:
        path = self.resolve(path)
        self._add_parents(path)
        self._symlinks[path] = self.resolve(self.dirname(path), target)

    def deny_read(self, path: str) -> None:
        """Make listing the directory at *path* raise ``PermissionError``."""
        self._unreadable.add(self.resolve(path))

    def _add_parents(self, path: str) -> None:
        parent = self.dirname(path)
        while parent not in self._directories:
            self._directories.add(parent)
            parent = self.dirname(parent)

    def _follow(self, path: str, depth: int = 0) -> str:
        """*path* with every symlinked prefix replaced by its target."""
        if depth > _MAX_SYMLINK_DEPTH:
            return path
        current = "/"
        for segment in path.split("/"):
            if not segment:
                continue
            current = posixpath.join(current, segment)
            if current in self._symlinks:
                current = self._follow(self._symlinks[current], depth + 1)
        return current

    # ── FileSystem ──

    def exists(self, path: str) -> bool:
        path = self._follow(self.resolve(path))
        return path in self._files or path in self._directories

    def is_file(self, path: str) -> bool:
        return self._follow(self.resolve(path)) in self._files

    def is_directory(self, path: str) -> bool:
        return self._follow(self.resolve(path)) in self._directories

    def is_symlink(self, path: str) -> bool:
        path = self.resolve(path)
        return self.join(self._follow(self.dirname(path)), self.basename(path)) in self._symlinks

    def readdir(self, path: str) -> list[str]:
        path = self._follow(self.resolve(path))
        if path not in self._directories:
            if path in self._files:
                raise NotADirectoryError(path)
            raise FileNotFoundError(path)
        if path in self._unreadable:
            raise PermissionError(path)
        return sorted({
            self.basename(entry)
            for entries in (self._files, self._directories, self._symlinks)
            for entry in entries
            if entry != path and self.dirname(entry) == path
        })

    def read_file(self, path: str) -> str:
        path = self._follow(self.resolve(path))
        if path not in self._files:
            raise FileNotFoundError(path)
        return self._files[path]

    def write_file(self, path: str, content: str) -> None:
        self.add_file(path, content)

    def remove_file(self, path: str) -> None:
        path = self.resolve(path)
        if path not in self._files:
            raise FileNotFoundError(path)
        del self._files[path]

    def resolve(self, *segments: str) -> str:
        return posixpath.normpath(posixpath.join("/", *segments))

    def join(self, base: str, *segments: str) -> str:
        return posixpath.normpath(posixpath.join(base, *segments))

    def relative(self, start: str, path: str) -> str:
        return posixpath.relpath(path, start)

    def dirname(self, path: str) -> str:
        return posixpath.dirname(path)

    def basename(self, path: str) -> str:
        return posixpath.basename(path)
