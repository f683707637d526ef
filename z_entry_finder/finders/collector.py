"""Full walk of a directory tree for entry-points."""

from __future__ import annotations

import logging
from typing import Iterator

from z_entry_finder.config import FinderConfiguration
from z_entry_finder.dependencies.models import EntryPointWithDependencies
from z_entry_finder.dependencies.resolver import DependencyResolver
from z_entry_finder.filesystem.base import FileSystem
from z_entry_finder.finders.context import FinderContext
from z_entry_finder.packages.entry_point import (
    DEPENDENCY_CACHE_DIR,
    IMPLEMENTATION_SUFFIX,
    TOOL_DIRECTORY,
    EntryPoint,
    EntryPointInfo,
    EntryPointStatus,
    IgnoredEntryPoint,
    entry_point_of,
    get_entry_point_info,
)

logger = logging.getLogger(__name__)


def is_ignorable_path(name: str) -> bool:
    """Hidden entries, dependency caches and the tool's own output are never searched."""
    return name.startswith(".") or name in (DEPENDENCY_CACHE_DIR, TOOL_DIRECTORY)


class EntryPointCollector:
    """Walks package directories, recording every entry-point found.

    A directory that is a package is searched for secondary entry-points and,
    once it holds processed units, its own ``node_modules``. A directory that
    is not a package is searched for packages.
    """

    def __init__(
        self,
        fs: FileSystem,
        config: FinderConfiguration,
        resolver: DependencyResolver,
    ) -> None:
        self.fs = fs
        self.config = config
        self.resolver = resolver

    def walk_directory_for_packages(
        self, source_directory: str, context: FinderContext | None = None
    ) -> list[EntryPointWithDependencies]:
        """All entry-points under *source_directory*, parents before children.

        Raises:
            OSError: *source_directory* cannot be listed.
        """
        context = context if context is not None else FinderContext()
        results: list[EntryPointWithDependencies] = []
        directories = [source_directory]
        while directories:
            directory = directories.pop()
            is_root = directory == source_directory
            info = self._classify(context, directory, directory)

            if info is EntryPointStatus.INCOMPATIBLE:
                continue

            if info is EntryPointStatus.NO_ENTRY_POINT:
                children = self._readdir(directory, is_root)
                if children is None:
                    continue
                subdirectories = [
                    self.fs.join(directory, name)
                    for name in children
                    if not is_ignorable_path(name) and self._is_real_directory(self.fs.join(directory, name))
                ]
                directories.extend(reversed(subdirectories))
                continue

            start = len(results)
            if isinstance(info, EntryPoint):
                self._record(context, results, info)
            children = self._readdir(directory, is_root)
            if children is not None:
                self.collect_secondary_entry_points(results, directory, directory, children, context)

            discovered = [ep.entry_point for ep in results[start:]]
            if isinstance(info, IgnoredEntryPoint):
                discovered.append(info.entry_point)
            nested = self.fs.join(directory, DEPENDENCY_CACHE_DIR)
            if any(ep.is_processed for ep in discovered) and self.fs.exists(nested):
                logger.debug("Walking nested dependency cache %s", nested)
                directories.append(nested)
        return results

    def collect_secondary_entry_points(
        self,
        results: list[EntryPointWithDependencies],
        package_path: str,
        directory: str,
        children: list[str],
        context: FinderContext | None = None,
    ) -> None:
        """Record the entry-points below *directory* inside the package at *package_path*.

        ``foo.js`` is a candidate ``foo`` entry-point. A directory that is not
        an entry-point but directly holds ``.js`` files is taken to be plain
        source and is not searched any further.
        """
        context = context if context is not None else FinderContext()
        stack: list[tuple[str, Iterator[str]]] = [(directory, iter(children))]
        while stack:
            current, names = stack[-1]
            name = next(names, None)
            if name is None:
                stack.pop()
                continue
            if is_ignorable_path(name):
                continue
            absolute_path = self.fs.resolve(current, name)
            if self.fs.is_symlink(absolute_path):
                continue
            is_directory = self.fs.is_directory(absolute_path)
            if not is_directory and not name.endswith(IMPLEMENTATION_SUFFIX):
                continue

            candidate = absolute_path if is_directory else absolute_path[: -len(IMPLEMENTATION_SUFFIX)]
            info = self._classify(context, package_path, candidate)
            entry_point = entry_point_of(info)
            if entry_point is not None:
                self._record(context, results, entry_point)

            if not is_directory:
                continue
            grandchildren = self._readdir(absolute_path, is_root=False)
            if grandchildren is None:
                continue
            can_contain_entry_points = entry_point is None
            if can_contain_entry_points and any(
                child.endswith(IMPLEMENTATION_SUFFIX) and self.fs.is_file(self.fs.resolve(absolute_path, child))
                for child in grandchildren
            ):
                continue
            stack.append((absolute_path, iter(grandchildren)))

    def _classify(self, context: FinderContext, package_path: str, entry_point_path: str) -> EntryPointInfo:
        info = context.entry_point_infos.get(entry_point_path)
        if info is None:
            info = get_entry_point_info(self.fs, self.config, package_path, entry_point_path)
            context.entry_point_infos[entry_point_path] = info
        return info

    def _record(
        self,
        context: FinderContext,
        results: list[EntryPointWithDependencies],
        entry_point: EntryPoint,
    ) -> None:
        if entry_point.path in context.recorded:
            return
        context.recorded.add(entry_point.path)
        ep_with_deps = context.with_dependencies.get(entry_point.path)
        if ep_with_deps is None:
            ep_with_deps = self.resolver.get_entry_point_with_dependencies(entry_point)
            context.with_dependencies[entry_point.path] = ep_with_deps
        results.append(ep_with_deps)

    def _readdir(self, directory: str, is_root: bool) -> list[str] | None:
        """Directory listing; an unreadable subdirectory yields None."""
        try:
            return self.fs.readdir(directory)
        except PermissionError:
            if is_root:
                raise
            logger.debug("Skipping unreadable directory %s", directory)
            return None

    def _is_real_directory(self, path: str) -> bool:
        return not self.fs.is_symlink(path) and self.fs.is_directory(path)
