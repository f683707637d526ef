"""Tests for path helpers: pure functions, no file-system access."""

from __future__ import annotations

import pytest

from z_entry_finder.paths import (
    dedupe_paths,
    extract_path_prefix,
    is_path_contained_by,
    split_path,
    track_duration,
)


class TestSplitPath:
    def test_relative(self):
        assert split_path("a/node_modules/b") == ["a", "node_modules", "b"]

    def test_absolute(self):
        assert split_path("/a/b") == ["a", "b"]

    def test_single_segment(self):
        assert split_path("pkg") == ["pkg"]

    @pytest.mark.parametrize("path", ["", "."])
    def test_empty(self, path: str):
        assert split_path(path) == []


class TestIsPathContainedBy:
    def test_same_path(self):
        assert is_path_contained_by("/a/b/c", "/a/b/c")

    def test_descendant(self):
        assert is_path_contained_by("/a/b/c", "/a/b/c/d/e")

    def test_sibling_with_shared_prefix(self):
        assert not is_path_contained_by("/a/b/c", "/a/b/c-x")

    def test_ancestor(self):
        assert not is_path_contained_by("/a/b/c", "/a/b")

    def test_unrelated(self):
        assert not is_path_contained_by("/a/b", "/x/y")


class TestDedupePaths:
    def test_drops_descendants(self):
        paths = ["/a/b/c", "/a/b/x", "/a/b", "/d/e", "/d/f"]
        assert dedupe_paths(paths) == ["/a/b", "/d/e", "/d/f"]

    def test_ancestor_first(self):
        assert dedupe_paths(["/a", "/a/b", "/a/b/c"]) == ["/a"]

    def test_shared_prefix_is_not_nesting(self):
        assert sorted(dedupe_paths(["/a/b", "/a/bc"])) == ["/a/b", "/a/bc"]

    def test_duplicates(self):
        assert dedupe_paths(["/a/b", "/a/b"]) == ["/a/b"]

    def test_root_covers_everything(self):
        assert dedupe_paths(["/x/y", "/", "/a"]) == ["/"]

    def test_empty(self):
        assert dedupe_paths([]) == []

    def test_never_nested_and_only_drops_covered_paths(self):
        paths = [
            "/p/node_modules",
            "/p/dist/lib",
            "/p/dist",
            "/p/dist-extra",
            "/p/node_modules/@scope/x",
            "/q",
            "/q/r/s",
            "/p/src/app",
        ]
        result = dedupe_paths(paths)
        for a in result:
            for b in result:
                if a != b:
                    assert not is_path_contained_by(a, b)
        for path in paths:
            if path not in result:
                assert any(is_path_contained_by(kept, path) for kept in result)
        assert sorted(result) == ["/p/dist", "/p/dist-extra", "/p/node_modules", "/p/src/app", "/q"]


class TestExtractPathPrefix:
    def test_wildcard(self):
        assert extract_path_prefix("lib/*") == ("lib/", True)

    def test_no_wildcard(self):
        assert extract_path_prefix("lib/foo") == ("lib/foo", False)

    def test_first_wildcard_only(self):
        assert extract_path_prefix("a/*/b/*") == ("a/", True)

    def test_bare_wildcard(self):
        assert extract_path_prefix("*") == ("", True)


class TestTrackDuration:
    def test_returns_result_and_logs_duration(self):
        durations: list[float] = []
        result = track_duration(lambda: 42, durations.append)
        assert result == 42
        assert len(durations) == 1
        assert durations[0] >= 0
        assert durations[0] == round(durations[0], 1)

    def test_exception_propagates(self):
        durations: list[float] = []

        def boom():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            track_duration(boom, durations.append)
        assert durations == []
