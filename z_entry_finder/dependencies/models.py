"""Data models for dependency resolution and sorting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from z_entry_finder.packages.entry_point import EntryPoint

if TYPE_CHECKING:
    from z_entry_finder.dependencies.graph import DependencyGraph


@dataclass
class DependencyInfo:
    """Dependencies collected from a unit's sources."""

    dependencies: set[str] = field(default_factory=set)  # absolute unit paths
    missing: set[str] = field(default_factory=set)  # import specifiers that did not resolve
    deep_imports: set[str] = field(default_factory=set)  # paths inside other packages


@dataclass
class EntryPointWithDependencies:
    entry_point: EntryPoint
    dep_info: DependencyInfo = field(default_factory=DependencyInfo)


@dataclass
class InvalidEntryPoint:
    """A unit excluded from processing because dependencies are missing."""

    entry_point: EntryPoint
    missing_dependencies: list[str]


@dataclass
class IgnoredDependency:
    """A dependency edge pointing at something that is not processed."""

    entry_point: EntryPoint
    dependency_path: str


@dataclass
class SortedEntryPoints:
    """Result of sorting units by dependency."""

    entry_points: list[EntryPointWithDependencies]
    invalid_entry_points: list[InvalidEntryPoint]
    ignored_dependencies: list[IgnoredDependency]
    graph: DependencyGraph
    cycles: list[list[str]] = field(default_factory=list)
