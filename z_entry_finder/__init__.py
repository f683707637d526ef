"""Z-Entry-Finder: entry-point discovery and dependency ordering for installed packages."""

__version__ = "0.1.0"

from z_entry_finder.config import FinderConfiguration, PathMappings, load_path_mappings
from z_entry_finder.dependencies import (
    DependencyResolver,
    EntryPointWithDependencies,
    ModuleResolver,
    SortedEntryPoints,
    SourceDependencyHost,
)
from z_entry_finder.exceptions import (
    ConfigurationError,
    FinderError,
    InvalidManifestError,
    MissingTargetDependenciesError,
    UnsupportedEntryPointError,
)
from z_entry_finder.filesystem import FileSystem, LocalFileSystem
from z_entry_finder.finders import (
    DirectoryWalkerEntryPointFinder,
    EntryPointCollector,
    TargetedEntryPointFinder,
)
from z_entry_finder.packages import EntryPoint
from z_entry_finder.packages.manifest import EntryPointManifest, InvalidatingEntryPointManifest

__all__ = [
    "ConfigurationError",
    "DependencyResolver",
    "DirectoryWalkerEntryPointFinder",
    "EntryPoint",
    "EntryPointCollector",
    "EntryPointManifest",
    "EntryPointWithDependencies",
    "FileSystem",
    "FinderConfiguration",
    "FinderError",
    "InvalidManifestError",
    "InvalidatingEntryPointManifest",
    "LocalFileSystem",
    "MissingTargetDependenciesError",
    "ModuleResolver",
    "PathMappings",
    "SortedEntryPoints",
    "SourceDependencyHost",
    "TargetedEntryPointFinder",
    "UnsupportedEntryPointError",
    "load_path_mappings",
]
