"""Tracing engine: discover entry-points by following dependencies from seeds."""

from __future__ import annotations

import logging
from collections import deque
from typing import Protocol

from z_entry_finder.dependencies.models import EntryPointWithDependencies, SortedEntryPoints
from z_entry_finder.dependencies.resolver import DependencyResolver

logger = logging.getLogger(__name__)


class TracingStrategy(Protocol):
    """Where tracing starts and how one path becomes an entry-point."""

    def get_initial_entry_point_paths(self) -> list[str]: ...

    def get_entry_point_with_deps(self, entry_point_path: str) -> EntryPointWithDependencies | None: ...


class TracingEntryPointFinder:
    def __init__(self, strategy: TracingStrategy, resolver: DependencyResolver) -> None:
        self.strategy = strategy
        self.resolver = resolver

    def find_entry_points(self) -> SortedEntryPoints:
        """Follow dependencies breadth-first until no new paths turn up, then sort."""
        found: dict[str, EntryPointWithDependencies] = {}
        queued = set(self.strategy.get_initial_entry_point_paths())
        pending = deque(self.strategy.get_initial_entry_point_paths())
        while pending:
            path = pending.popleft()
            ep = self.strategy.get_entry_point_with_deps(path)
            if ep is None:
                logger.debug("No entry-point to trace at %s", path)
                continue
            found[ep.entry_point.path] = ep
            for dependency in sorted(ep.dep_info.dependencies):
                if dependency not in found and dependency not in queued:
                    queued.add(dependency)
                    pending.append(dependency)
        return self.resolver.sort_entry_points_by_dependency(found.values())
