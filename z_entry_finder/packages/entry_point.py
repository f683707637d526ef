"""Descriptor reader: classify a directory (or stripped file path) as an entry-point."""

from __future__ import annotations

import json
import logging
import posixpath
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Union

from z_entry_finder.config import EntryPointConfig, FinderConfiguration
from z_entry_finder.filesystem.base import FileSystem
from z_entry_finder.packages.build_marker import PROCESSED_MARKER_KEY, has_been_processed

logger = logging.getLogger(__name__)

DESCRIPTOR_FILE = "package.json"
DEPENDENCY_CACHE_DIR = "node_modules"
IMPLEMENTATION_SUFFIX = ".js"
TOOL_DIRECTORY = "__zef__"

# Output-format properties a descriptor may declare, in preference order
SUPPORTED_FORMAT_PROPERTIES: tuple[str, ...] = (
    "fesm2015",
    "fesm5",
    "es2015",
    "esm2015",
    "esm5",
    "main",
    "module",
    "browser",
)


class EntryPointStatus(Enum):
    """Classifications that carry no entry-point data."""

    NO_ENTRY_POINT = "no_entry_point"  # not a package / no descriptor
    INCOMPATIBLE = "incompatible"  # descriptor unreadable or without typings


@dataclass(frozen=True)
class EntryPoint:
    """A compilable unit and the package that owns it."""

    name: str
    path: str
    package_name: str
    package_path: str
    descriptor: Mapping[str, Any] = field(compare=False, repr=False)
    typings: str
    compiled: bool
    ignored: bool = False
    ignore_missing_dependencies: bool = False

    def format_path(self, format_property: str) -> str | None:
        """Absolute path of the file declared for *format_property*, if any."""
        value = self.descriptor.get(format_property)
        if not isinstance(value, str):
            return None
        return posixpath.normpath(posixpath.join(self.path, value))

    def has_been_processed(self, format_property: str) -> bool:
        return has_been_processed(self.descriptor, format_property)

    @property
    def is_processed(self) -> bool:
        """True if any format (or the typings) was already processed."""
        marker = self.descriptor.get(PROCESSED_MARKER_KEY)
        return isinstance(marker, Mapping) and any(
            has_been_processed(self.descriptor, prop) for prop in marker
        )


@dataclass(frozen=True)
class IgnoredEntryPoint:
    """An entry-point that configuration asks to leave alone."""

    entry_point: EntryPoint


EntryPointInfo = Union[EntryPoint, IgnoredEntryPoint, EntryPointStatus]


def is_entry_point(info: EntryPointInfo) -> bool:
    return isinstance(info, EntryPoint)


def entry_point_of(info: EntryPointInfo) -> EntryPoint | None:
    """The wrapped entry-point for valid and ignored classifications."""
    if isinstance(info, EntryPoint):
        return info
    if isinstance(info, IgnoredEntryPoint):
        return info.entry_point
    return None


def get_entry_point_info(
    fs: FileSystem,
    config: FinderConfiguration,
    package_path: str,
    entry_point_path: str,
) -> EntryPointInfo:
    """Classify *entry_point_path*, a candidate unit inside *package_path*.

    Returns:
        ``NO_ENTRY_POINT`` when there is neither a descriptor nor config for it,
        ``INCOMPATIBLE`` when the descriptor cannot be parsed or declares no typings,
        :class:`IgnoredEntryPoint` when configuration ignores it,
        otherwise an :class:`EntryPoint`.
    """
    descriptor_path = fs.resolve(entry_point_path, DESCRIPTOR_FILE)
    package_name = get_package_name(fs, package_path)
    package_config = config.get_package_config(package_name, package_path)
    ep_config = package_config.entry_points.get(entry_point_path)
    has_config = ep_config is not None

    if not has_config and not fs.exists(descriptor_path):
        return EntryPointStatus.NO_ENTRY_POINT

    loaded = _load_descriptor(fs, descriptor_path, warn=not has_config)
    if ep_config is not None:
        descriptor = _merge_config(
            fs, loaded, ep_config, package_name, package_path, entry_point_path
        )
    else:
        descriptor = loaded

    if descriptor is None:
        return EntryPointStatus.INCOMPATIBLE

    if ep_config is not None and ep_config.ignore:
        return IgnoredEntryPoint(
            _build_entry_point(
                fs, descriptor, package_name, package_path, entry_point_path,
                typings="", compiled=False, ep_config=ep_config, ignored=True,
            )
        )

    typings = (
        descriptor.get("typings")
        or descriptor.get("types")
        or _guess_typings(fs, entry_point_path, descriptor)
    )
    if not isinstance(typings, str):
        return EntryPointStatus.INCOMPATIBLE

    metadata_path = fs.resolve(entry_point_path, re.sub(r"\.d\.ts$", "", typings) + ".metadata.json")
    compiled = has_config or fs.exists(metadata_path)

    return _build_entry_point(
        fs, descriptor, package_name, package_path, entry_point_path,
        typings=fs.resolve(entry_point_path, typings), compiled=compiled, ep_config=ep_config,
    )


def get_package_name(fs: FileSystem, package_path: str) -> str:
    """Name from the package descriptor, else derived from the directory name.

    Scoped packages (``node_modules/@scope/pkg``) get ``@scope/pkg``.
    """
    descriptor_path = fs.join(package_path, DESCRIPTOR_FILE)
    if fs.exists(descriptor_path):
        descriptor = _load_descriptor(fs, descriptor_path, warn=False)
        if descriptor is not None and isinstance(descriptor.get("name"), str):
            return descriptor["name"]
    parent = fs.basename(fs.dirname(package_path))
    name = fs.basename(package_path)
    return f"{parent}/{name}" if parent.startswith("@") else name


def _build_entry_point(
    fs: FileSystem,
    descriptor: Mapping[str, Any],
    package_name: str,
    package_path: str,
    entry_point_path: str,
    *,
    typings: str,
    compiled: bool,
    ep_config: EntryPointConfig | None,
    ignored: bool = False,
) -> EntryPoint:
    name = descriptor.get("name")
    if not isinstance(name, str):
        name = _default_name(fs, package_name, package_path, entry_point_path)
    return EntryPoint(
        name=name,
        path=entry_point_path,
        package_name=package_name,
        package_path=package_path,
        descriptor=descriptor,
        typings=typings,
        compiled=compiled,
        ignored=ignored,
        ignore_missing_dependencies=bool(ep_config and ep_config.ignore_missing_dependencies),
    )


def _default_name(
    fs: FileSystem, package_name: str, package_path: str, entry_point_path: str
) -> str:
    if entry_point_path == package_path:
        return package_name
    return f"{package_name}/{fs.relative(package_path, entry_point_path)}"


def _load_descriptor(fs: FileSystem, descriptor_path: str, *, warn: bool) -> dict[str, Any] | None:
    """Parse a descriptor, or None if it is missing or malformed."""
    try:
        data = json.loads(fs.read_file(descriptor_path))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        if warn:
            logger.warning("Failed to read entry point info from %s with error %s.", descriptor_path, e)
        return None
    if not isinstance(data, dict):
        if warn:
            logger.warning("Entry point descriptor %s is not a JSON object.", descriptor_path)
        return None
    return data


def _merge_config(
    fs: FileSystem,
    loaded: dict[str, Any] | None,
    ep_config: EntryPointConfig,
    package_name: str,
    package_path: str,
    entry_point_path: str,
) -> dict[str, Any]:
    if loaded is not None:
        return {**loaded, **ep_config.override}
    name = _default_name(fs, package_name, package_path, entry_point_path)
    return {"name": name, **ep_config.override}


def _guess_typings(fs: FileSystem, entry_point_path: str, descriptor: Mapping[str, Any]) -> str | None:
    """Look for a ``.d.ts`` file next to one of the declared format files."""
    for prop in SUPPORTED_FORMAT_PROPERTIES:
        value = descriptor.get(prop)
        if not isinstance(value, str):
            continue
        typings_path = fs.resolve(entry_point_path, re.sub(r"\.js$", "", value) + ".d.ts")
        if fs.exists(typings_path):
            return fs.relative(entry_point_path, typings_path)
    return None
