"""Local disk file-system implementation."""

from __future__ import annotations

import os
from pathlib import Path

from z_entry_finder.filesystem.base import FileSystem


class LocalFileSystem(FileSystem):
    """File-system backed by the real disk (v1 default)."""

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def is_directory(self, path: str) -> bool:
        return os.path.isdir(path)

    def is_symlink(self, path: str) -> bool:
        return os.path.islink(path)

    def readdir(self, path: str) -> list[str]:
        return sorted(os.listdir(path))

    def read_file(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_file(self, path: str, content: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        Path(path).write_text(content, encoding="utf-8")

    def remove_file(self, path: str) -> None:
        os.remove(path)

    def resolve(self, *segments: str) -> str:
        return os.path.abspath(os.path.join(*segments))

    def join(self, base: str, *segments: str) -> str:
        return os.path.normpath(os.path.join(base, *segments))

    def relative(self, start: str, path: str) -> str:
        return os.path.relpath(path, start)

    def dirname(self, path: str) -> str:
        return os.path.dirname(path)

    def basename(self, path: str) -> str:
        return os.path.basename(path)
