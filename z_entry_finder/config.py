"""Project configuration and path mappings.

Two JSON documents feed the finders:

* ``zef.config.json``: per-project (and optionally per-package) overrides
  for how entry-points are classified::

      {
        "packages": {
          "some-lib": {
            "entryPoints": {
              "./testing": {"ignore": true},
              ".": {"ignoreMissingDependencies": true, "override": {"typings": "x.d.ts"}}
            },
            "ignorableDeepImportMatchers": ["/lib/internal/"]
          }
        }
      }

  A package may ship its own ``zef.config.json`` holding the inner
  ``{"entryPoints": ..., "ignorableDeepImportMatchers": ...}`` object; the
  project-level entry for that package wins over it.

* a tsconfig-style file whose ``compilerOptions.baseUrl``/``paths`` become
  :class:`PathMappings`.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from z_entry_finder.exceptions import ConfigurationError
from z_entry_finder.filesystem.base import FileSystem

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "zef.config.json"
DEFAULT_HASH_ALGORITHM = "sha256"


class EntryPointConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ignore: bool = False
    ignore_missing_dependencies: bool = Field(False, alias="ignoreMissingDependencies")
    override: dict[str, Any] = Field(default_factory=dict)


class PackageConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    entry_points: dict[str, EntryPointConfig] = Field(default_factory=dict, alias="entryPoints")
    ignorable_deep_import_matchers: list[str] = Field(
        default_factory=list, alias="ignorableDeepImportMatchers"
    )


class ProjectConfig(BaseModel):
    packages: dict[str, PackageConfig] = Field(default_factory=dict)


class PathMappings(BaseModel):
    """``baseUrl`` plus alias patterns, each mapped to target templates."""

    model_config = ConfigDict(populate_by_name=True)

    base_url: str = Field(alias="baseUrl")
    paths: dict[str, list[str]] = Field(default_factory=dict)


@dataclass
class ResolvedPackageConfig:
    """Package config with entry-point keys resolved to absolute paths."""

    package_path: str
    entry_points: dict[str, EntryPointConfig] = field(default_factory=dict)
    ignorable_deep_import_matchers: list[re.Pattern[str]] = field(default_factory=list)


def load_path_mappings(fs: FileSystem, tsconfig_path: str) -> PathMappings | None:
    """Read ``compilerOptions.baseUrl``/``paths`` from a tsconfig-style file.

    Returns None when the file declares no ``baseUrl``. The ``baseUrl`` is
    resolved relative to the directory holding the file.
    """
    data = _read_json(fs, tsconfig_path)
    options = data.get("compilerOptions") or {}
    base_url = options.get("baseUrl")
    if base_url is None:
        logger.debug("No baseUrl in %s, path mappings disabled", tsconfig_path)
        return None
    try:
        return PathMappings(
            base_url=fs.resolve(fs.dirname(tsconfig_path), base_url),
            paths=options.get("paths") or {},
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid path mappings in {tsconfig_path}: {e}") from e


class FinderConfiguration:
    """Configuration for one project directory.

    Package configs are looked up lazily and cached per package path; the
    cache only ever holds parsed config files, never entry-point state.
    """

    def __init__(
        self,
        fs: FileSystem,
        project_path: str,
        hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
    ) -> None:
        self.fs = fs
        self.project_path = project_path
        self.hash_algorithm = hash_algorithm
        config_path = fs.join(project_path, CONFIG_FILE_NAME)
        if fs.exists(config_path):
            raw = _read_text(fs, config_path)
            self.project_config = _parse(ProjectConfig, raw, config_path)
        else:
            raw = ""
            self.project_config = ProjectConfig()
        self.hash = hashlib.new(hash_algorithm, raw.encode("utf-8")).hexdigest()
        self._cache: dict[str, ResolvedPackageConfig] = {}

    def get_package_config(self, package_name: str, package_path: str) -> ResolvedPackageConfig:
        cached = self._cache.get(package_path)
        if cached is not None:
            return cached

        raw_config = self.project_config.packages.get(package_name)
        if raw_config is None:
            raw_config = self._load_package_level_config(package_path)
        resolved = self._resolve(package_path, raw_config or PackageConfig())
        self._cache[package_path] = resolved
        return resolved

    def _load_package_level_config(self, package_path: str) -> PackageConfig | None:
        config_path = self.fs.join(package_path, CONFIG_FILE_NAME)
        if not self.fs.exists(config_path):
            return None
        logger.debug("Loading package config from %s", config_path)
        return _parse(PackageConfig, _read_text(self.fs, config_path), config_path)

    def _resolve(self, package_path: str, config: PackageConfig) -> ResolvedPackageConfig:
        return ResolvedPackageConfig(
            package_path=package_path,
            entry_points={
                self.fs.resolve(package_path, relative): ep_config
                for relative, ep_config in config.entry_points.items()
            },
            ignorable_deep_import_matchers=[
                re.compile(pattern) for pattern in config.ignorable_deep_import_matchers
            ],
        )


def _read_text(fs: FileSystem, path: str) -> str:
    try:
        return fs.read_file(path)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Unable to read {path}: {e}") from e


def _read_json(fs: FileSystem, path: str) -> dict[str, Any]:
    try:
        data = json.loads(_read_text(fs, path))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Unable to read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Expected a JSON object in {path}")
    return data


def _parse(model: type[BaseModel], raw: str, path: str) -> Any:
    try:
        return model.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e
