"""Search roots: the primary source directory plus path-mapped directories."""

from __future__ import annotations

import logging

from z_entry_finder.config import PathMappings
from z_entry_finder.filesystem.base import FileSystem
from z_entry_finder.paths import dedupe_paths, extract_path_prefix

logger = logging.getLogger(__name__)


def get_base_paths(
    fs: FileSystem, source_directory: str, path_mappings: PathMappings | None
) -> list[str]:
    """Directories to search for entry-points.

    Each path-mapping template contributes the directory its prefix points
    at; a wildcard template also contributes every sibling directory whose
    name starts with the prefix's last segment. Nested roots are removed and
    *source_directory* always comes first.
    """
    base_paths = [source_directory]
    if path_mappings is not None:
        base_url = fs.resolve(path_mappings.base_url)
        if fs.is_root(base_url):
            logger.warning(
                "The provided pathMappings baseUrl is the root path %s.\n"
                "This is likely to mess up how entry-points are found.\n"
                "You should set baseUrl to a deeper directory.",
                base_url,
            )
        for templates in path_mappings.paths.values():
            for template in templates:
                prefix, has_wildcard = extract_path_prefix(template)
                candidate = fs.resolve(base_url, prefix)
                if fs.exists(candidate) and fs.is_file(candidate):
                    candidate = fs.dirname(candidate)

                found = False
                if _is_existing_directory(fs, candidate):
                    base_paths.append(candidate)
                    found = True
                if has_wildcard:
                    siblings = _find_prefixed_siblings(fs, candidate)
                    base_paths.extend(siblings)
                    found = found or bool(siblings)
                if not found:
                    logger.debug(
                        "Path mapping %s does not match any existing directory, skipping",
                        template,
                    )

    deduped = dedupe_paths(base_paths)
    return [source_directory, *(path for path in deduped if path != source_directory)]


def _is_existing_directory(fs: FileSystem, path: str) -> bool:
    return fs.exists(path) and fs.is_directory(path)


def _find_prefixed_siblings(fs: FileSystem, path: str) -> list[str]:
    """Directories next to *path* whose names start with *path*'s basename."""
    parent = fs.dirname(path)
    if path == parent or not _is_existing_directory(fs, parent):
        return []
    prefix = fs.basename(path)
    siblings = []
    for name in fs.readdir(parent):
        if not name.startswith(prefix):
            continue
        sibling = fs.join(parent, name)
        if sibling != path and _is_existing_directory(fs, sibling):
            siblings.append(sibling)
    return siblings
