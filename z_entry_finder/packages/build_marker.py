"""Per-format "processed" markers stored inside package descriptors."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from z_entry_finder import __version__
from z_entry_finder.filesystem.base import FileSystem

PROCESSED_MARKER_KEY = "__processed_by_zef__"
TOOL_VERSION = __version__


def has_been_processed(descriptor: Mapping[str, Any], format_property: str) -> bool:
    """True if *format_property* was processed by this version of the tool."""
    marker = descriptor.get(PROCESSED_MARKER_KEY)
    if not isinstance(marker, Mapping):
        return False
    return marker.get(format_property) == TOOL_VERSION


def mark_as_processed(
    fs: FileSystem,
    descriptor: Mapping[str, Any],
    descriptor_path: str,
    properties: Iterable[str],
) -> dict[str, Any]:
    """Record *properties* as processed and write the descriptor back.

    Returns the updated descriptor; the input mapping is not modified.
    """
    updated = dict(descriptor)
    marker = dict(updated.get(PROCESSED_MARKER_KEY) or {})
    for prop in properties:
        marker[prop] = TOOL_VERSION
    updated[PROCESSED_MARKER_KEY] = marker
    fs.write_file(descriptor_path, json.dumps(updated, indent=2) + "\n")
    return updated


def clean_processing_markers(fs: FileSystem, descriptor_path: str) -> bool:
    """Strip the marker from the descriptor at *descriptor_path*.

    Returns True if the file was rewritten.
    """
    descriptor = json.loads(fs.read_file(descriptor_path))
    if not isinstance(descriptor, dict) or PROCESSED_MARKER_KEY not in descriptor:
        return False
    del descriptor[PROCESSED_MARKER_KEY]
    fs.write_file(descriptor_path, json.dumps(descriptor, indent=2) + "\n")
    return True
