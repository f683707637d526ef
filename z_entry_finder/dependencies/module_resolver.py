"""Cut-down module resolution for computing dependencies between units.

Relative imports resolve to implementation files; bare imports resolve to
the directory holding the imported unit's descriptor. Nested
``node_modules`` directories and ``baseUrl``/``paths`` mappings are
supported.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from z_entry_finder.config import PathMappings
from z_entry_finder.filesystem.base import FileSystem
from z_entry_finder.packages.entry_point import DEPENDENCY_CACHE_DIR, DESCRIPTOR_FILE

RELATIVE_EXTENSIONS: tuple[str, ...] = ("", ".js", "/index.js")

_RELATIVE_PATH_RE = re.compile(r"^/|^\.\.?($|/)")


@dataclass(frozen=True)
class ResolvedExternalModule:
    """An import of another unit; the path is the unit's directory."""

    entry_point_path: str


@dataclass(frozen=True)
class ResolvedRelativeModule:
    """An import of a file inside the importing unit's own package."""

    module_path: str


@dataclass(frozen=True)
class ResolvedDeepImport:
    """An import reaching into another package below its entry-points."""

    import_path: str


ResolvedModule = Union[ResolvedExternalModule, ResolvedRelativeModule, ResolvedDeepImport]


@dataclass(frozen=True)
class _PathPattern:
    prefix: str
    postfix: str
    has_wildcard: bool


@dataclass(frozen=True)
class _PathMapping:
    matcher: _PathPattern
    templates: tuple[_PathPattern, ...]
    base_url: str


def is_relative_path(path: str) -> bool:
    return bool(_RELATIVE_PATH_RE.match(path))


def resolve_file_with_postfixes(
    fs: FileSystem, path: str, postfixes: tuple[str, ...]
) -> str | None:
    """First existing regular file among ``path + postfix``, or None."""
    for postfix in postfixes:
        test_path = path + postfix
        if fs.exists(test_path) and fs.is_file(test_path):
            return test_path
    return None


class ModuleResolver:
    """Resolve import specifiers found in implementation files."""

    def __init__(
        self,
        fs: FileSystem,
        path_mappings: PathMappings | None = None,
        relative_extensions: tuple[str, ...] = RELATIVE_EXTENSIONS,
    ) -> None:
        self.fs = fs
        self.relative_extensions = relative_extensions
        self.path_mappings = self._process_path_mappings(path_mappings) if path_mappings else []

    def resolve_module_import(self, module_name: str, from_path: str) -> ResolvedModule | None:
        """Resolve *module_name* imported by the file at *from_path*.

        Returns None when nothing on disk matches.
        """
        if is_relative_path(module_name):
            return self._resolve_as_relative_path(module_name, from_path)
        return (
            self.path_mappings and self._resolve_by_path_mappings(module_name, from_path)
        ) or self._resolve_as_entry_point(module_name, from_path)

    def _process_path_mappings(self, path_mappings: PathMappings) -> list[_PathMapping]:
        base_url = self.fs.resolve(path_mappings.base_url)
        return [
            _PathMapping(
                matcher=_split_on_star(pattern),
                templates=tuple(_split_on_star(t) for t in templates),
                base_url=base_url,
            )
            for pattern, templates in path_mappings.paths.items()
        ]

    def _resolve_as_relative_path(self, module_name: str, from_path: str) -> ResolvedModule | None:
        resolved = resolve_file_with_postfixes(
            self.fs,
            self.fs.resolve(self.fs.dirname(from_path), module_name),
            self.relative_extensions,
        )
        return ResolvedRelativeModule(resolved) if resolved else None

    def _resolve_by_path_mappings(self, module_name: str, from_path: str) -> ResolvedModule | None:
        """Apply the best path mapping, then resolve the mapped paths.

        A mapped path that is not an entry-point but does resolve to a file
        counts as relative when it lies inside the importing package and
        outside any ``node_modules``; otherwise it is a deep import.
        """
        mapped_paths = self._find_mapped_paths(module_name)
        if not mapped_paths:
            return None
        package_path = self._find_package_path(from_path)
        if package_path is None:
            return None
        for mapped_path in mapped_paths:
            if self._is_entry_point(mapped_path):
                return ResolvedExternalModule(mapped_path)
            non_entry_point_import = self._resolve_as_relative_path(mapped_path, from_path)
            if non_entry_point_import is not None:
                if mapped_path.startswith(package_path) and DEPENDENCY_CACHE_DIR not in mapped_path:
                    return non_entry_point_import
                return ResolvedDeepImport(mapped_path)
        return None

    def _resolve_as_entry_point(self, module_name: str, from_path: str) -> ResolvedModule | None:
        """Search ``node_modules`` directories up the tree for *module_name*."""
        folder = from_path
        while not self.fs.is_root(folder):
            folder = self.fs.dirname(folder)
            if folder.endswith(DEPENDENCY_CACHE_DIR):
                folder = self.fs.dirname(folder)
            module_path = self.fs.resolve(folder, DEPENDENCY_CACHE_DIR, module_name)
            if self._is_entry_point(module_path):
                return ResolvedExternalModule(module_path)
            if self._resolve_as_relative_path(module_path, from_path):
                return ResolvedDeepImport(module_path)
        return None

    def _is_entry_point(self, module_path: str) -> bool:
        return self.fs.exists(self.fs.join(module_path, DESCRIPTOR_FILE))

    def _find_mapped_paths(self, module_name: str) -> list[str]:
        """Mapped candidates from the best mapping.

        An exact (wildcard-free) match wins outright; otherwise the wildcard
        mapping with the longest prefix.
        """
        best_mapping: _PathMapping | None = None
        best_match: str | None = None
        for mapping in self.path_mappings:
            match = _match_mapping(module_name, mapping.matcher)
            if match is None:
                continue
            if not mapping.matcher.has_wildcard:
                best_mapping, best_match = mapping, match
                break
            if best_mapping is None or len(mapping.matcher.prefix) > len(best_mapping.matcher.prefix):
                best_mapping, best_match = mapping, match
        if best_mapping is None or best_match is None:
            return []
        return [
            self.fs.resolve(best_mapping.base_url, t.prefix + best_match + t.postfix)
            for t in best_mapping.templates
        ]

    def _find_package_path(self, path: str) -> str | None:
        folder = path
        while not self.fs.is_root(folder):
            folder = self.fs.dirname(folder)
            if self.fs.exists(self.fs.join(folder, DESCRIPTOR_FILE)):
                return folder
        return None


def _split_on_star(value: str) -> _PathPattern:
    prefix, star, postfix = value.partition("*")
    return _PathPattern(prefix=prefix, postfix=postfix, has_wildcard=bool(star))


def _match_mapping(path: str, matcher: _PathPattern) -> str | None:
    """The wildcard part of *path* if it matches *matcher*, else None."""
    if matcher.has_wildcard:
        if (
            path.startswith(matcher.prefix)
            and path.endswith(matcher.postfix)
            and len(path) >= len(matcher.prefix) + len(matcher.postfix)
        ):
            return path[len(matcher.prefix) : len(path) - len(matcher.postfix)]
        return None
    return "" if path == matcher.prefix else None
