"""Directory-walker finder: every entry-point below every search root."""

from __future__ import annotations

import logging

from z_entry_finder.config import FinderConfiguration, PathMappings
from z_entry_finder.dependencies.models import EntryPointWithDependencies, SortedEntryPoints
from z_entry_finder.dependencies.resolver import DependencyResolver
from z_entry_finder.filesystem.base import FileSystem
from z_entry_finder.finders.collector import EntryPointCollector
from z_entry_finder.finders.context import FinderContext
from z_entry_finder.finders.utils import get_base_paths
from z_entry_finder.packages.manifest import EntryPointManifest
from z_entry_finder.paths import track_duration

logger = logging.getLogger(__name__)


class DirectoryWalkerEntryPointFinder:
    """Uses each search root's manifest when it is current, otherwise walks the root."""

    def __init__(
        self,
        fs: FileSystem,
        config: FinderConfiguration,
        resolver: DependencyResolver,
        manifest: EntryPointManifest,
        base_path: str,
        path_mappings: PathMappings | None = None,
    ) -> None:
        self.fs = fs
        self.config = config
        self.resolver = resolver
        self.manifest = manifest
        self.base_path = base_path
        self.path_mappings = path_mappings
        self.collector = EntryPointCollector(fs, config, resolver)

    def find_entry_points(self) -> SortedEntryPoints:
        context = FinderContext()
        unsorted: list[EntryPointWithDependencies] = []
        for base_path in get_base_paths(self.fs, self.base_path, self.path_mappings):
            entry_points = self.manifest.read_entry_points_using_manifest(base_path)
            if entry_points is None:
                entry_points = self._walk_base_path_for_packages(base_path, context)
            unsorted.extend(entry_points)
        return self.resolver.sort_entry_points_by_dependency(unsorted)

    def _walk_base_path_for_packages(
        self, base_path: str, context: FinderContext
    ) -> list[EntryPointWithDependencies]:
        logger.debug("No manifest found for %s so walking the directories for entry-points.", base_path)
        entry_points = track_duration(
            lambda: self.collector.walk_directory_for_packages(base_path, context),
            lambda duration: logger.debug("Walking %s for entry-points took %ss.", base_path, duration),
        )
        self.manifest.write_entry_point_manifest(base_path, entry_points)
        return entry_points
