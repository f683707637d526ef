"""Dependency resolution between entry-points."""

from z_entry_finder.dependencies.graph import DependencyGraph
from z_entry_finder.dependencies.host import SourceDependencyHost
from z_entry_finder.dependencies.models import (
    DependencyInfo,
    EntryPointWithDependencies,
    IgnoredDependency,
    InvalidEntryPoint,
    SortedEntryPoints,
)
from z_entry_finder.dependencies.module_resolver import ModuleResolver
from z_entry_finder.dependencies.resolver import DependencyResolver

__all__ = [
    "DependencyGraph",
    "DependencyInfo",
    "DependencyResolver",
    "EntryPointWithDependencies",
    "IgnoredDependency",
    "InvalidEntryPoint",
    "ModuleResolver",
    "SortedEntryPoints",
    "SourceDependencyHost",
]
