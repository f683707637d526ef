"""Entry-point manifest: a cached listing of the units found below a base path.

The manifest lets a later run skip the directory walk. It is only trusted
while the tool version, the project configuration and the package lock file
are unchanged.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from typing import Any, Iterable

from z_entry_finder.config import FinderConfiguration
from z_entry_finder.dependencies.models import DependencyInfo, EntryPointWithDependencies
from z_entry_finder.exceptions import InvalidManifestError
from z_entry_finder.filesystem.base import FileSystem
from z_entry_finder.packages.build_marker import TOOL_VERSION
from z_entry_finder.packages.entry_point import (
    DEPENDENCY_CACHE_DIR,
    entry_point_of,
    get_entry_point_info,
)

logger = logging.getLogger(__name__)

MANIFEST_FILE = "__zef_entry_points__.json"
LOCK_FILE_NAMES: tuple[str, ...] = ("yarn.lock", "package-lock.json")


class EntryPointManifest:
    """Read and write the manifest stored inside a ``node_modules`` base path."""

    def __init__(self, fs: FileSystem, config: FinderConfiguration) -> None:
        self.fs = fs
        self.config = config

    def read_entry_points_using_manifest(self, base_path: str) -> list[EntryPointWithDependencies] | None:
        """Units listed in the manifest under *base_path*, or None when it is unusable.

        The manifest is unusable when it is missing or out of date, or when
        one of its entries is no longer an entry-point.
        """
        try:
            return self._read(base_path)
        except Exception as e:
            logger.warning("Unable to read the entry-point manifest for %s: %s", base_path, e)
            return None

    def _read(self, base_path: str) -> list[EntryPointWithDependencies] | None:
        if self.fs.basename(base_path) != DEPENDENCY_CACHE_DIR:
            return None
        manifest_path = self.get_entry_point_manifest_path(base_path)
        if not self.fs.exists(manifest_path):
            return None
        lock_file_hash = self.compute_lock_file_hash(base_path)
        if lock_file_hash is None:
            return None

        manifest = json.loads(self.fs.read_file(manifest_path))
        if (
            manifest.get("toolVersion") != TOOL_VERSION
            or manifest.get("configFileHash") != self.config.hash
            or manifest.get("lockFileHash") != lock_file_hash
        ):
            logger.debug("Entry-point manifest for %s is out of date", base_path)
            return None

        logger.debug(
            "Entry-point manifest found for %s so loading entry-point information directly.",
            base_path,
        )
        start = time.monotonic()
        entry_points = [
            self._load_row(base_path, manifest_path, row) for row in manifest["entryPointPaths"]
        ]
        logger.debug(
            "Reading entry-points using the manifest entries took %ss.",
            round(time.monotonic() - start, 1),
        )
        return entry_points

    def _load_row(self, base_path: str, manifest_path: str, row: list[Any]) -> EntryPointWithDependencies:
        package_path, entry_point_path = row[0], row[1]
        dependencies, missing, deep_imports = (list(row[2:5]) + [[], [], []])[:3]
        info = get_entry_point_info(
            self.fs,
            self.config,
            self.fs.resolve(base_path, package_path),
            self.fs.resolve(base_path, entry_point_path),
        )
        entry_point = entry_point_of(info)
        if entry_point is None:
            raise InvalidManifestError(
                f"The entry-point manifest at {manifest_path} contained an invalid pair of "
                f"package paths: [{package_path}, {entry_point_path}]"
            )
        return EntryPointWithDependencies(
            entry_point,
            DependencyInfo(
                dependencies=set(dependencies),
                missing=set(missing),
                deep_imports=set(deep_imports),
            ),
        )

    def write_entry_point_manifest(
        self, base_path: str, entry_points: Iterable[EntryPointWithDependencies]
    ) -> None:
        """Write the manifest for *base_path*.

        Does nothing unless *base_path* is a ``node_modules`` directory with
        a lock file next to it. Trailing empty arrays are left out of each row.
        """
        if self.fs.basename(base_path) != DEPENDENCY_CACHE_DIR:
            return
        lock_file_hash = self.compute_lock_file_hash(base_path)
        if lock_file_hash is None:
            return
        manifest = {
            "toolVersion": TOOL_VERSION,
            "configFileHash": self.config.hash,
            "lockFileHash": lock_file_hash,
            "entryPointPaths": [self._to_row(base_path, ep) for ep in entry_points],
        }
        self.fs.write_file(self.get_entry_point_manifest_path(base_path), json.dumps(manifest))

    def _to_row(self, base_path: str, ep: EntryPointWithDependencies) -> list[Any]:
        row: list[Any] = [
            self.fs.relative(base_path, ep.entry_point.package_path),
            self.fs.relative(base_path, ep.entry_point.path),
            sorted(ep.dep_info.dependencies),
            sorted(ep.dep_info.missing),
            sorted(ep.dep_info.deep_imports),
        ]
        while len(row) > 2 and not row[-1]:
            row.pop()
        return row

    def get_entry_point_manifest_path(self, base_path: str) -> str:
        return self.fs.resolve(base_path, MANIFEST_FILE)

    def compute_lock_file_hash(self, base_path: str) -> str | None:
        """Hash of the first lock file found next to *base_path*."""
        directory = self.fs.dirname(base_path)
        for name in LOCK_FILE_NAMES:
            lock_file_path = self.fs.resolve(directory, name)
            if self.fs.exists(lock_file_path):
                contents = self.fs.read_file(lock_file_path)
                return hashlib.new(self.config.hash_algorithm, contents.encode("utf-8")).hexdigest()
        return None


class InvalidatingEntryPointManifest(EntryPointManifest):
    """A manifest that is never read, so the next write replaces it."""

    def read_entry_points_using_manifest(self, base_path: str) -> list[EntryPointWithDependencies] | None:
        return None
