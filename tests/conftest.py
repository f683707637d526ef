"""Shared pytest fixtures for z-entry-finder tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from z_entry_finder.config import FinderConfiguration, PathMappings
from z_entry_finder.dependencies import DependencyResolver, ModuleResolver, SourceDependencyHost
from z_entry_finder.filesystem import LocalFileSystem
from z_entry_finder.packages.build_marker import PROCESSED_MARKER_KEY, TOOL_VERSION


class ProjectTree:
    """Builds an npm-style project below ``tmp_path/proj``.

    Entry-point paths passed to the helpers are relative to ``node_modules``
    unless stated otherwise.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self.node_modules = root / "node_modules"
        self.node_modules.mkdir(parents=True)
        self.fs = LocalFileSystem()

    def path(self, relative: str) -> str:
        return str(self.node_modules / relative)

    def add_entry_point(
        self,
        relative: str,
        *,
        name: str | None = None,
        imports: tuple[str, ...] = (),
        compiled: bool = True,
        processed: tuple[str, ...] = (),
        descriptor: dict[str, Any] | None = None,
        base: Path | None = None,
    ) -> str:
        """Write a unit with ``index.js``, ``index.d.ts`` and (if compiled) metadata."""
        directory = (base or self.node_modules) / relative
        directory.mkdir(parents=True, exist_ok=True)
        data: dict[str, Any] = {"typings": "./index.d.ts", "module": "./index.js"}
        if name is not None:
            data["name"] = name
        if processed:
            data[PROCESSED_MARKER_KEY] = {prop: TOOL_VERSION for prop in processed}
        data.update(descriptor or {})
        (directory / "package.json").write_text(json.dumps(data))
        (directory / "index.d.ts").write_text("export declare const x: number;\n")
        (directory / "index.js").write_text(
            "".join(f"import * as m{i} from '{specifier}';\n" for i, specifier in enumerate(imports))
            + "export const x = 1;\n"
        )
        if compiled:
            (directory / "index.metadata.json").write_text("{}")
        return str(directory)

    def write_file(self, relative: str, content: str = "") -> str:
        path = self.node_modules / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return str(path)

    def write_config(self, data: dict[str, Any]) -> None:
        (self.root / "zef.config.json").write_text(json.dumps(data))

    def write_lock_file(self, content: str = "lock-v1") -> None:
        (self.root / "package-lock.json").write_text(content)

    def config(self) -> FinderConfiguration:
        return FinderConfiguration(self.fs, str(self.root))

    def resolver(
        self,
        config: FinderConfiguration | None = None,
        path_mappings: PathMappings | None = None,
    ) -> DependencyResolver:
        config = config or self.config()
        host = SourceDependencyHost(self.fs, ModuleResolver(self.fs, path_mappings))
        return DependencyResolver(self.fs, config, host)


@pytest.fixture
def project(tmp_path: Path) -> ProjectTree:
    return ProjectTree(tmp_path / "proj")


@pytest.fixture
def fs() -> LocalFileSystem:
    return LocalFileSystem()
