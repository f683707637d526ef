"""Per-unit dependency resolution and the global dependency-first sort."""

from __future__ import annotations

import logging
from typing import Iterable

from z_entry_finder.config import FinderConfiguration
from z_entry_finder.dependencies.graph import DependencyGraph
from z_entry_finder.dependencies.host import SourceDependencyHost
from z_entry_finder.dependencies.models import (
    DependencyInfo,
    EntryPointWithDependencies,
    IgnoredDependency,
    InvalidEntryPoint,
    SortedEntryPoints,
)
from z_entry_finder.exceptions import UnsupportedEntryPointError
from z_entry_finder.filesystem.base import FileSystem
from z_entry_finder.packages.entry_point import SUPPORTED_FORMAT_PROPERTIES, EntryPoint

logger = logging.getLogger(__name__)

# Imports of these never count as missing
NODE_BUILTIN_MODULES: frozenset[str] = frozenset(
    {
        "assert", "async_hooks", "buffer", "child_process", "cluster", "console",
        "constants", "crypto", "dgram", "diagnostics_channel", "dns", "domain",
        "events", "fs", "fs/promises", "http", "http2", "https", "inspector",
        "module", "net", "os", "path", "path/posix", "path/win32", "perf_hooks",
        "process", "punycode", "querystring", "readline", "repl", "stream",
        "stream/promises", "string_decoder", "sys", "timers", "tls", "trace_events",
        "tty", "url", "util", "v8", "vm", "wasi", "worker_threads", "zlib",
    }
)


class DependencyResolver:
    """Resolve unit dependencies and order units for processing."""

    def __init__(
        self,
        fs: FileSystem,
        config: FinderConfiguration,
        host: SourceDependencyHost,
    ) -> None:
        self.fs = fs
        self.config = config
        self.host = host

    def get_entry_point_with_dependencies(self, entry_point: EntryPoint) -> EntryPointWithDependencies:
        """Collect *entry_point*'s dependencies from its preferred format file.

        Units that need no compilation get empty dependency info.

        Raises:
            UnsupportedEntryPointError: compiled unit declaring no format.
        """
        dep_info = DependencyInfo()
        if entry_point.compiled:
            format_path = self._get_format_path(entry_point)
            self.host.collect_dependencies(format_path, dep_info)
        return EntryPointWithDependencies(entry_point, dep_info)

    def sort_entry_points_by_dependency(
        self,
        entry_points: Iterable[EntryPointWithDependencies],
        target: EntryPoint | None = None,
    ) -> SortedEntryPoints:
        """Order *entry_points* so dependencies come before their dependants.

        With a *target*, only the target and its transitive dependencies are
        returned.
        """
        graph, invalid, ignored = self._compute_dependency_graph(list(entry_points))

        if target is not None:
            if target.compiled and graph.has_node(target.path):
                nodes = graph.dependencies_of(target.path) + [target.path]
            else:
                nodes = []
        else:
            nodes = graph.overall_order()

        cycles = graph.find_cycles()
        for cycle in cycles:
            logger.warning(
                "Circular dependency between entry-points: %s",
                " -> ".join([*cycle, cycle[0]]),
            )

        return SortedEntryPoints(
            entry_points=[graph.get_node_data(node) for node in nodes],
            invalid_entry_points=invalid,
            ignored_dependencies=ignored,
            graph=graph,
            cycles=cycles,
        )

    def _get_format_path(self, entry_point: EntryPoint) -> str:
        for prop in SUPPORTED_FORMAT_PROPERTIES:
            format_path = entry_point.format_path(prop)
            if format_path is not None:
                return format_path
        raise UnsupportedEntryPointError(
            f"There is no appropriate source code format in '{entry_point.path}' entry-point."
        )

    def _compute_dependency_graph(
        self, entry_points: list[EntryPointWithDependencies]
    ) -> tuple[DependencyGraph[EntryPointWithDependencies], list[InvalidEntryPoint], list[IgnoredDependency]]:
        graph: DependencyGraph[EntryPointWithDependencies] = DependencyGraph()
        invalid: list[InvalidEntryPoint] = []
        ignored: list[IgnoredDependency] = []

        def remove_nodes(entry_point: EntryPoint, missing: list[str]) -> None:
            for node in [entry_point.path, *graph.dependants_of(entry_point.path)]:
                invalid.append(InvalidEntryPoint(graph.get_node_data(node).entry_point, missing))
                graph.remove_node(node)

        processable = [
            ep for ep in entry_points if ep.entry_point.compiled and not ep.entry_point.ignored
        ]
        for ep in processable:
            graph.add_node(ep.entry_point.path, ep)

        for ep in processable:
            entry_point, dep_info = ep.entry_point, ep.dep_info
            missing = sorted(dep for dep in dep_info.missing if dep not in NODE_BUILTIN_MODULES)
            if not graph.has_node(entry_point.path):
                # Already invalidated as a dependant of an earlier unit
                pass
            elif missing and not entry_point.ignore_missing_dependencies:
                remove_nodes(entry_point, missing)
            else:
                for dependency_path in sorted(dep_info.dependencies):
                    if not graph.has_node(entry_point.path):
                        break
                    if graph.has_node(dependency_path):
                        graph.add_dependency(entry_point.path, dependency_path)
                    elif any(i.entry_point.path == dependency_path for i in invalid):
                        remove_nodes(entry_point, [dependency_path])
                    else:
                        ignored.append(IgnoredDependency(entry_point, dependency_path))

            if dep_info.deep_imports:
                notable = self._filter_ignorable_deep_imports(entry_point, dep_info.deep_imports)
                if notable:
                    logger.warning(
                        "Entry point '%s' contains deep imports into %s. This is probably not a "
                        "problem, but may cause the compilation of entry points to be out of order.",
                        entry_point.name,
                        ", ".join(f"'{i}'" for i in notable),
                    )

        return graph, invalid, ignored

    def _filter_ignorable_deep_imports(self, entry_point: EntryPoint, deep_imports: set[str]) -> list[str]:
        matchers = self.config.get_package_config(
            entry_point.package_name, entry_point.package_path
        ).ignorable_deep_import_matchers
        return [
            deep_import
            for deep_import in sorted(deep_imports)
            if not any(matcher.search(deep_import) for matcher in matchers)
        ]
