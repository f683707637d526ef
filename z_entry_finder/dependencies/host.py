"""Collect a unit's dependencies by scanning its implementation sources."""

from __future__ import annotations

import logging
import re

from z_entry_finder.dependencies.models import DependencyInfo
from z_entry_finder.dependencies.module_resolver import (
    RELATIVE_EXTENSIONS,
    ModuleResolver,
    ResolvedExternalModule,
    ResolvedRelativeModule,
    resolve_file_with_postfixes,
)
from z_entry_finder.filesystem.base import FileSystem

logger = logging.getLogger(__name__)

# Cheap test run before the full extraction
_MAY_HAVE_IMPORTS_RE = re.compile(r"\b(?:import|export)\b|\brequire\s*\(")

_IMPORT_PATTERNS: tuple[re.Pattern[str], ...] = (
    # import x from 'a'; import {x} from 'a'; export * from 'a'; export {x} from 'a'
    re.compile(r"""\b(?:import|export)\s[^'";]*?\bfrom\s*(['"])([^'"\n]+)\1"""),
    # import 'a'
    re.compile(r"""\bimport\s*(['"])([^'"\n]+)\1"""),
    # import('a')
    re.compile(r"""\bimport\s*\(\s*(['"])([^'"\n]+)\1\s*\)"""),
    # require('a')
    re.compile(r"""\brequire\s*\(\s*(['"])([^'"\n]+)\1\s*\)"""),
)


def extract_imports(contents: str) -> list[str]:
    """Import specifiers found in *contents*, in order of first appearance."""
    if not _MAY_HAVE_IMPORTS_RE.search(contents):
        return []
    found: list[tuple[int, str]] = []
    for pattern in _IMPORT_PATTERNS:
        found.extend((m.start(), m.group(2)) for m in pattern.finditer(contents))
    found.sort()
    return list(dict.fromkeys(specifier for _, specifier in found))


class SourceDependencyHost:
    """Follows ESM and CommonJS imports from a unit's format file.

    Relative imports are followed into the unit's own files; every other
    import is classified as a dependency, a deep import or missing.
    """

    def __init__(self, fs: FileSystem, module_resolver: ModuleResolver) -> None:
        self.fs = fs
        self.module_resolver = module_resolver

    def collect_dependencies(self, entry_point_path: str, dep_info: DependencyInfo) -> None:
        """Add the dependencies of the file at *entry_point_path* to *dep_info*.

        *entry_point_path* may omit the ``.js`` suffix or name a directory
        with an ``index.js``.
        """
        resolved_file = resolve_file_with_postfixes(self.fs, entry_point_path, RELATIVE_EXTENSIONS)
        if resolved_file is None:
            logger.debug("No source file found for %s", entry_point_path)
            return

        already_seen = {resolved_file}
        pending = [resolved_file]
        while pending:
            file_path = pending.pop()
            try:
                contents = self.fs.read_file(file_path)
            except UnicodeDecodeError as e:
                logger.debug("Skipping undecodable source file %s: %s", file_path, e)
                continue
            for specifier in extract_imports(contents):
                resolved = self.module_resolver.resolve_module_import(specifier, file_path)
                if resolved is None:
                    dep_info.missing.add(specifier)
                elif isinstance(resolved, ResolvedRelativeModule):
                    if resolved.module_path not in already_seen:
                        already_seen.add(resolved.module_path)
                        pending.append(resolved.module_path)
                elif isinstance(resolved, ResolvedExternalModule):
                    dep_info.dependencies.add(resolved.entry_point_path)
                else:
                    dep_info.deep_imports.add(resolved.import_path)
