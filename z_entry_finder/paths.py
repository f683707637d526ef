"""Path helpers shared by the finders: splitting, containment, de-duplication."""

from __future__ import annotations

import posixpath
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

T = TypeVar("T")


def split_path(path: str) -> list[str]:
    """Split *path* into its segments using only dirname/basename.

    Works for absolute and relative paths alike::

        split_path("a/node_modules/b") == ["a", "node_modules", "b"]
    """
    if path in ("", "."):
        return []
    segments: list[str] = []
    container = posixpath.dirname(path)
    while path != container:
        segments.append(posixpath.basename(path))
        path = container
        container = posixpath.dirname(container)
    segments.reverse()
    return segments


def is_path_contained_by(base: str, test: str) -> bool:
    """Whether *test* is *base* or lives somewhere below it.

    A bare ``startswith`` would report ``a/b/c-x`` as inside ``a/b/c``, so the
    relative path is checked too, but only once the cheap check passes.
    """
    return test == base or (
        test.startswith(base) and not posixpath.relpath(test, base).startswith("..")
    )


def extract_path_prefix(path: str) -> tuple[str, bool]:
    """Return everything before the first ``*`` and whether a ``*`` was present."""
    prefix, star, _ = path.partition("*")
    return prefix, bool(star)


def track_duration(task: Callable[[], T], log: Callable[[float], None]) -> T:
    """Run *task*, report its duration in seconds (0.1s precision) to *log*."""
    start = time.monotonic()
    result = task()
    log(round(time.monotonic() - start, 1))
    return result


# ── Path de-duplication ──────────────────────────────────────────────────


@dataclass
class _Node:
    children: dict[str, _Node] = field(default_factory=dict)
    path: str | None = None

    @property
    def is_leaf(self) -> bool:
        return self.path is not None


def dedupe_paths(paths: list[str]) -> list[str]:
    """Remove paths that are contained by other paths in the list.

    Given ``['/a/b/c', '/a/b/x', '/a/b', '/d/e', '/d/f']`` the result is
    ``['/a/b', '/d/e', '/d/f']``. ``/d`` is not produced since it was never
    one of the inputs.
    """
    root = _Node()
    for path in paths:
        _add_path(root, path)
    return _flatten(root)


def _add_path(root: _Node, path: str) -> None:
    node = root
    if posixpath.dirname(path) != path:
        for segment in path.split("/"):
            if node.is_leaf:
                # An ancestor is already present
                return
            node = node.children.setdefault(segment, _Node())
    node.path = path
    # Descendants inserted earlier are now covered by this leaf
    node.children.clear()


def _flatten(root: _Node) -> list[str]:
    paths: list[str] = []
    nodes = [root]
    for node in nodes:
        if node.is_leaf:
            paths.append(node.path)  # type: ignore[arg-type]
        else:
            nodes.extend(node.children.values())
    return paths
