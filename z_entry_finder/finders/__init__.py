"""Entry-point finders."""

from z_entry_finder.finders.collector import EntryPointCollector
from z_entry_finder.finders.context import FinderContext
from z_entry_finder.finders.directory_walker import DirectoryWalkerEntryPointFinder
from z_entry_finder.finders.targeted import TargetedEntryPointFinder
from z_entry_finder.finders.tracing import TracingEntryPointFinder, TracingStrategy
from z_entry_finder.finders.utils import get_base_paths

__all__ = [
    "DirectoryWalkerEntryPointFinder",
    "EntryPointCollector",
    "FinderContext",
    "TargetedEntryPointFinder",
    "TracingEntryPointFinder",
    "TracingStrategy",
    "get_base_paths",
]
