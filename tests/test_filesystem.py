"""Tests for the file-system implementations."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from z_entry_finder.filesystem import LocalFileSystem
from z_entry_finder.testing import InMemoryFileSystem


class TestLocalFileSystem:
    def test_readdir_sorted(self, tmp_path: Path, fs: LocalFileSystem):
        for name in ["b", "a", "c.js"]:
            (tmp_path / name).write_text("")
        assert fs.readdir(str(tmp_path)) == ["a", "b", "c.js"]

    def test_file_and_directory(self, tmp_path: Path, fs: LocalFileSystem):
        (tmp_path / "f.txt").write_text("hello")
        (tmp_path / "d").mkdir()
        assert fs.is_file(str(tmp_path / "f.txt"))
        assert not fs.is_directory(str(tmp_path / "f.txt"))
        assert fs.is_directory(str(tmp_path / "d"))
        assert fs.read_file(str(tmp_path / "f.txt")) == "hello"

    def test_symlink(self, tmp_path: Path, fs: LocalFileSystem):
        (tmp_path / "real").mkdir()
        os.symlink(tmp_path / "real", tmp_path / "link")
        assert fs.is_symlink(str(tmp_path / "link"))
        assert fs.is_directory(str(tmp_path / "link"))
        assert not fs.is_symlink(str(tmp_path / "real"))

    def test_write_creates_parents(self, tmp_path: Path, fs: LocalFileSystem):
        target = tmp_path / "x" / "y" / "z.json"
        fs.write_file(str(target), "{}")
        assert target.read_text() == "{}"
        fs.remove_file(str(target))
        assert not fs.exists(str(target))

    def test_path_helpers(self, fs: LocalFileSystem):
        assert fs.resolve("/a/b", "../c") == "/a/c"
        assert fs.join("/a", "b", "c") == "/a/b/c"
        assert fs.relative("/a/b", "/a/b/c/d") == "c/d"
        assert fs.dirname("/a/b") == "/a"
        assert fs.basename("/a/b") == "b"
        assert fs.is_root("/")
        assert not fs.is_root("/a")

    def test_readdir_missing_raises(self, tmp_path: Path, fs: LocalFileSystem):
        with pytest.raises(FileNotFoundError):
            fs.readdir(str(tmp_path / "missing"))


class TestInMemoryFileSystem:
    @pytest.fixture
    def memfs(self) -> InMemoryFileSystem:
        fs = InMemoryFileSystem()
        fs.add_file("/proj/a/package.json", "{}")
        fs.add_file("/proj/a/index.js", "export {};")
        fs.add_directory("/proj/empty")
        fs.add_symlink("/proj/link", "/proj/a")
        return fs

    def test_parents_created(self, memfs: InMemoryFileSystem):
        assert memfs.is_directory("/proj")
        assert memfs.readdir("/proj") == ["a", "empty", "link"]

    def test_symlink_followed(self, memfs: InMemoryFileSystem):
        assert memfs.is_symlink("/proj/link")
        assert memfs.is_directory("/proj/link")
        assert memfs.exists("/proj/link/package.json")
        assert memfs.readdir("/proj/link") == ["index.js", "package.json"]

    def test_paths_below_symlinked_directory(self, memfs: InMemoryFileSystem):
        assert memfs.is_file("/proj/link/index.js")
        assert memfs.read_file("/proj/link/package.json") == "{}"
        assert not memfs.is_symlink("/proj/link/index.js")

    def test_symlink_inside_symlinked_directory(self, memfs: InMemoryFileSystem):
        memfs.add_symlink("/proj/a/inner", "/proj/empty")
        assert memfs.is_symlink("/proj/link/inner")
        assert memfs.is_directory("/proj/link/inner")

    def test_symlink_loop_terminates(self, memfs: InMemoryFileSystem):
        memfs.add_symlink("/proj/loop", "/proj/loop")
        assert not memfs.exists("/proj/loop")

    def test_dangling_symlink(self, memfs: InMemoryFileSystem):
        memfs.add_symlink("/proj/dangling", "/nowhere")
        assert memfs.is_symlink("/proj/dangling")
        assert not memfs.exists("/proj/dangling")

    def test_deny_read(self, memfs: InMemoryFileSystem):
        memfs.deny_read("/proj/a")
        with pytest.raises(PermissionError):
            memfs.readdir("/proj/a")
        # Files inside stay readable
        assert memfs.read_file("/proj/a/package.json") == "{}"

    def test_readdir_errors(self, memfs: InMemoryFileSystem):
        with pytest.raises(FileNotFoundError):
            memfs.readdir("/proj/missing")
        with pytest.raises(NotADirectoryError):
            memfs.readdir("/proj/a/index.js")

    def test_write_and_remove(self, memfs: InMemoryFileSystem):
        memfs.write_file("/proj/new/file.txt", "x")
        assert memfs.read_file("/proj/new/file.txt") == "x"
        memfs.remove_file("/proj/new/file.txt")
        assert not memfs.exists("/proj/new/file.txt")
        with pytest.raises(FileNotFoundError):
            memfs.read_file("/proj/new/file.txt")
