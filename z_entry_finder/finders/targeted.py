"""Targeted finder: only the entry-points a single target depends on."""

from __future__ import annotations

import logging
from typing import Iterable

from z_entry_finder.config import FinderConfiguration, PathMappings
from z_entry_finder.dependencies.models import EntryPointWithDependencies, SortedEntryPoints
from z_entry_finder.dependencies.resolver import DependencyResolver
from z_entry_finder.exceptions import MissingTargetDependenciesError
from z_entry_finder.filesystem.base import FileSystem
from z_entry_finder.finders.context import FinderContext
from z_entry_finder.finders.tracing import TracingEntryPointFinder
from z_entry_finder.finders.utils import get_base_paths
from z_entry_finder.packages.entry_point import (
    DEPENDENCY_CACHE_DIR,
    DESCRIPTOR_FILE,
    EntryPoint,
    get_entry_point_info,
)
from z_entry_finder.paths import is_path_contained_by, split_path

logger = logging.getLogger(__name__)


class TargetedEntryPointFinder:
    """Finds the target entry-point and everything it transitively depends on.

    Usage::

        finder = TargetedEntryPointFinder(fs, config, resolver, base_path, target_path)
        result = finder.find_entry_points()
        for ep in result.entry_points:
            ...
    """

    def __init__(
        self,
        fs: FileSystem,
        config: FinderConfiguration,
        resolver: DependencyResolver,
        base_path: str,
        target_path: str,
        path_mappings: PathMappings | None = None,
    ) -> None:
        self.fs = fs
        self.config = config
        self.resolver = resolver
        self.base_path = base_path
        self.target_path = fs.resolve(target_path)
        self.path_mappings = path_mappings
        self._base_paths: list[str] | None = None
        self._context = FinderContext()

    def find_entry_points(self) -> SortedEntryPoints:
        """Trace from the target and sort the result.

        Raises:
            MissingTargetDependenciesError: the target itself has missing dependencies.
        """
        self._context = FinderContext()
        result = TracingEntryPointFinder(self, self.resolver).find_entry_points()
        for invalid in result.invalid_entry_points:
            if invalid.entry_point.path == self.target_path:
                raise MissingTargetDependenciesError(invalid.entry_point.name, invalid.missing_dependencies)
        return result

    def target_needs_processing_or_cleaning(
        self, properties: Iterable[str], compile_all_formats: bool
    ) -> bool:
        """Whether the target still has formats to process.

        Only properties declared in the target's descriptor count. Without
        *compile_all_formats* the first declared property decides.
        """
        self._context = FinderContext()
        ep = self.get_entry_point_with_deps(self.target_path)
        if ep is None:
            return False
        for prop in properties:
            if ep.entry_point.descriptor.get(prop):
                if not ep.entry_point.has_been_processed(prop):
                    return True
                if not compile_all_formats:
                    return False
        return False

    # ── Tracing strategy ──

    def get_initial_entry_point_paths(self) -> list[str]:
        return [self.target_path]

    def get_entry_point_with_deps(self, entry_point_path: str) -> EntryPointWithDependencies | None:
        """Dependency info for a compiled entry-point at *entry_point_path*, else None."""
        cached = self._context.with_dependencies.get(entry_point_path)
        if cached is not None:
            return cached
        info = self._context.entry_point_infos.get(entry_point_path)
        if info is None:
            package_path = self.compute_package_path(entry_point_path)
            info = get_entry_point_info(self.fs, self.config, package_path, entry_point_path)
            self._context.entry_point_infos[entry_point_path] = info
        if not isinstance(info, EntryPoint) or not info.compiled:
            return None
        ep = self.resolver.get_entry_point_with_dependencies(info)
        self._context.with_dependencies[entry_point_path] = ep
        return ep

    # ── Package paths ──

    def get_base_paths(self) -> list[str]:
        if self._base_paths is None:
            self._base_paths = get_base_paths(self.fs, self.base_path, self.path_mappings)
        return self._base_paths

    def compute_package_path(self, entry_point_path: str) -> str:
        """Root of the package containing *entry_point_path*.

        Tried in order: the primary base path, the first other base path that
        contains the entry-point, then the nearest ``node_modules`` ancestor.
        """
        if is_path_contained_by(self.base_path, entry_point_path):
            package_path = self._compute_package_path_from_containing_path(entry_point_path, self.base_path)
            if package_path is not None:
                return package_path

        for base_path in self.get_base_paths():
            if is_path_contained_by(base_path, entry_point_path):
                package_path = self._compute_package_path_from_containing_path(entry_point_path, base_path)
                if package_path is not None:
                    return package_path
                break

        return self._compute_package_path_from_nearest_node_modules(entry_point_path)

    def _compute_package_path_from_containing_path(
        self, entry_point_path: str, containing_path: str
    ) -> str | None:
        """Search downward from *containing_path* for the first directory with a descriptor.

        Segments up to the deepest ``node_modules`` are skipped, so the search
        starts inside that dependency cache.
        """
        package_path = containing_path
        segments = split_path(self.fs.relative(containing_path, entry_point_path))
        if DEPENDENCY_CACHE_DIR in segments:
            node_modules_index = len(segments) - 1 - segments[::-1].index(DEPENDENCY_CACHE_DIR)
            package_path = self.fs.join(package_path, *segments[: node_modules_index + 1])
            segments = segments[node_modules_index + 1 :]
        elif self.fs.exists(self.fs.join(package_path, DESCRIPTOR_FILE)):
            return package_path

        for segment in segments:
            package_path = self.fs.join(package_path, segment)
            if self.fs.exists(self.fs.join(package_path, DESCRIPTOR_FILE)):
                return package_path
        return None

    def _compute_package_path_from_nearest_node_modules(self, entry_point_path: str) -> str:
        package_path = entry_point_path
        scoped_package_path = package_path
        container_path = self.fs.dirname(package_path)
        while not self.fs.is_root(container_path) and not container_path.endswith(DEPENDENCY_CACHE_DIR):
            scoped_package_path = package_path
            package_path = container_path
            container_path = self.fs.dirname(container_path)

        if self.fs.exists(self.fs.join(package_path, DESCRIPTOR_FILE)):
            return package_path
        if self.fs.basename(package_path).startswith("@") and self.fs.exists(
            self.fs.join(scoped_package_path, DESCRIPTOR_FILE)
        ):
            return scoped_package_path
        return entry_point_path
