"""Tests for EntryPointCollector: full directory walks."""

from __future__ import annotations

import json
import os

import pytest

from z_entry_finder.config import FinderConfiguration
from z_entry_finder.dependencies import DependencyResolver, ModuleResolver, SourceDependencyHost
from z_entry_finder.finders.collector import EntryPointCollector, is_ignorable_path
from z_entry_finder.finders.context import FinderContext
from z_entry_finder.testing import InMemoryFileSystem


def _collector(project) -> EntryPointCollector:
    config = project.config()
    return EntryPointCollector(project.fs, config, project.resolver(config))


def _walk(project, root: str | None = None) -> list[str]:
    results = _collector(project).walk_directory_for_packages(root or str(project.node_modules))
    return [ep.entry_point.path for ep in results]


class TestWalk:
    def test_packages_and_secondary_entry_points(self, project):
        project.add_entry_point("a", name="a")
        project.add_entry_point("a/testing")
        project.add_entry_point("@scope/b", name="@scope/b")
        assert _walk(project) == [project.path("@scope/b"), project.path("a"), project.path("a/testing")]

    def test_dependencies_resolved(self, project):
        project.add_entry_point("a", imports=("b",))
        b = project.add_entry_point("b")
        results = _collector(project).walk_directory_for_packages(str(project.node_modules))
        by_path = {ep.entry_point.path: ep for ep in results}
        assert by_path[project.path("a")].dep_info.dependencies == {b}

    def test_incompatible_root(self, project):
        project.write_file("package.json", "{broken")
        project.add_entry_point("a")
        assert _walk(project) == []

    def test_incompatible_package_not_descended(self, project):
        project.write_file("bad/package.json", json.dumps({"name": "bad"}))
        project.add_entry_point("bad/inner")
        assert _walk(project) == []

    def test_undecodable_package_skipped(self, project):
        (project.node_modules / "bad").mkdir()
        (project.node_modules / "bad" / "package.json").write_bytes(b'{"name": "bad\xff"}')
        good = project.add_entry_point("good")
        assert _walk(project) == [good]

    def test_undecodable_source_does_not_stop_walk(self, project):
        a = project.add_entry_point("a")
        (project.node_modules / "a" / "index.js").write_bytes(b"import 'b';\n// \xff\n")
        b = project.add_entry_point("b")
        results = _collector(project).walk_directory_for_packages(str(project.node_modules))
        assert [ep.entry_point.path for ep in results] == [a, b]
        assert results[0].dep_info.dependencies == set()

    def test_ignorable_directories(self, project):
        project.add_entry_point(".hidden")
        project.add_entry_point("__zef__/copy")
        project.add_entry_point("a")
        project.add_entry_point("a/.cache")
        project.add_entry_point("a/__zef__")
        assert _walk(project) == [project.path("a")]

    def test_symlinked_package_skipped(self, project, tmp_path):
        project.add_entry_point("real", base=tmp_path)
        os.symlink(tmp_path / "real", project.node_modules / "linked")
        assert _walk(project) == []

    def test_symlinked_secondary_skipped(self, project, tmp_path):
        project.add_entry_point("a")
        project.add_entry_point("other", base=tmp_path)
        os.symlink(tmp_path / "other", project.node_modules / "a" / "linked")
        assert _walk(project) == [project.path("a")]

    def test_file_and_directory_counted_once(self, project):
        project.add_entry_point("a")
        project.add_entry_point("a/foo")
        project.write_file("a/foo.js", "export {};\n")
        assert _walk(project) == [project.path("a"), project.path("a/foo")]

    def test_source_directory_not_descended(self, project):
        project.add_entry_point("a")
        project.write_file("a/src/x.js")
        project.add_entry_point("a/src/inner")
        assert _walk(project) == [project.path("a")]

    def test_directory_without_js_descended(self, project):
        project.add_entry_point("a")
        project.add_entry_point("a/lib/inner")
        assert _walk(project) == [project.path("a"), project.path("a/lib/inner")]

    def test_ignored_secondary_recorded_but_ignored(self, project):
        project.add_entry_point("a", name="a")
        project.add_entry_point("a/testing")
        project.write_config({"packages": {"a": {"entryPoints": {"./testing": {"ignore": True}}}}})
        results = _collector(project).walk_directory_for_packages(str(project.node_modules))
        flags = {ep.entry_point.path: ep.entry_point.ignored for ep in results}
        assert flags == {project.path("a"): False, project.path("a/testing"): True}

    def test_ignored_primary_not_recorded(self, project):
        project.add_entry_point("a", name="a")
        project.add_entry_point("a/testing")
        project.write_config({"packages": {"a": {"entryPoints": {".": {"ignore": True}}}}})
        assert _walk(project) == [project.path("a/testing")]

    def test_deterministic(self, project):
        for name in ["c", "a", "b/x", "b", "@s/z"]:
            project.add_entry_point(name)
        assert _walk(project) == _walk(project)


class TestNestedDependencyCache:
    def test_processed_package_walks_nested_cache(self, project):
        project.add_entry_point("p", processed=("module",))
        project.add_entry_point("p/node_modules/q")
        assert _walk(project) == [project.path("p"), project.path("p/node_modules/q")]

    def test_caches_nested_two_levels(self, project):
        project.add_entry_point("p", processed=("module",))
        project.add_entry_point("p/node_modules/q", processed=("module",))
        project.add_entry_point("p/node_modules/q/node_modules/r")
        assert _walk(project) == [
            project.path("p"),
            project.path("p/node_modules/q"),
            project.path("p/node_modules/q/node_modules/r"),
        ]

    def test_ignored_processed_package_walks_nested_cache(self, project):
        project.add_entry_point("p", name="p", processed=("module",))
        project.add_entry_point("p/node_modules/q")
        project.write_config({"packages": {"p": {"entryPoints": {".": {"ignore": True}}}}})
        assert _walk(project) == [project.path("p/node_modules/q")]

    def test_unprocessed_package_skips_nested_cache(self, project):
        project.add_entry_point("p")
        project.add_entry_point("p/node_modules/q")
        assert _walk(project) == [project.path("p")]

    def test_processed_secondary_counts(self, project):
        project.add_entry_point("p")
        project.add_entry_point("p/sub", processed=("module",))
        project.add_entry_point("p/node_modules/q")
        assert project.path("p/node_modules/q") in _walk(project)


class TestUnreadableDirectories:
    @pytest.fixture
    def memfs(self) -> InMemoryFileSystem:
        fs = InMemoryFileSystem()
        for name in ["a", "private/b", "z"]:
            fs.add_file(f"/proj/node_modules/{name}/package.json", json.dumps({"typings": "./index.d.ts"}))
            fs.add_file(f"/proj/node_modules/{name}/index.d.ts")
        return fs

    def _collector(self, fs: InMemoryFileSystem) -> EntryPointCollector:
        config = FinderConfiguration(fs, "/proj")
        resolver = DependencyResolver(fs, config, SourceDependencyHost(fs, ModuleResolver(fs)))
        return EntryPointCollector(fs, config, resolver)

    def test_unreadable_subdirectory_skipped(self, memfs: InMemoryFileSystem):
        memfs.deny_read("/proj/node_modules/private")
        results = self._collector(memfs).walk_directory_for_packages("/proj/node_modules")
        assert [ep.entry_point.path for ep in results] == ["/proj/node_modules/a", "/proj/node_modules/z"]

    def test_unreadable_package_still_recorded(self, memfs: InMemoryFileSystem):
        memfs.deny_read("/proj/node_modules/a")
        results = self._collector(memfs).walk_directory_for_packages("/proj/node_modules")
        assert [ep.entry_point.path for ep in results] == [
            "/proj/node_modules/a",
            "/proj/node_modules/private/b",
            "/proj/node_modules/z",
        ]

    def test_unreadable_root_raises(self, memfs: InMemoryFileSystem):
        memfs.deny_read("/proj/node_modules")
        with pytest.raises(PermissionError):
            self._collector(memfs).walk_directory_for_packages("/proj/node_modules")

    def test_missing_root_raises(self, memfs: InMemoryFileSystem):
        with pytest.raises(FileNotFoundError):
            self._collector(memfs).walk_directory_for_packages("/proj/missing")


class TestContext:
    def test_shared_context_records_once(self, project):
        project.add_entry_point("a")
        collector = _collector(project)
        context = FinderContext()
        first = collector.walk_directory_for_packages(str(project.node_modules), context)
        second = collector.walk_directory_for_packages(str(project.node_modules), context)
        assert len(first) == 1
        assert second == []
        assert context.recorded == {project.path("a")}

    def test_fresh_context_per_walk(self, project):
        project.add_entry_point("a")
        collector = _collector(project)
        assert len(collector.walk_directory_for_packages(str(project.node_modules))) == 1
        assert len(collector.walk_directory_for_packages(str(project.node_modules))) == 1


@pytest.mark.parametrize(
    "name, expected",
    [(".git", True), ("node_modules", True), ("__zef__", True), ("lib", False), ("a.js", False)],
)
def test_is_ignorable_path(name: str, expected: bool):
    assert is_ignorable_path(name) is expected
