"""Package descriptors, build markers and the entry-point manifest."""

from z_entry_finder.packages.entry_point import (
    EntryPoint,
    EntryPointInfo,
    EntryPointStatus,
    IgnoredEntryPoint,
    entry_point_of,
    get_entry_point_info,
    is_entry_point,
)

__all__ = [
    "EntryPoint",
    "EntryPointInfo",
    "EntryPointStatus",
    "IgnoredEntryPoint",
    "entry_point_of",
    "get_entry_point_info",
    "is_entry_point",
]
