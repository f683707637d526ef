"""CLI entry point: z-entry-finder.

Subcommands:
    z-entry-finder find /proj/node_modules                  # All entry-points, processing order
    z-entry-finder find /proj/node_modules --target PATH    # Only what PATH depends on
    z-entry-finder needs-processing /proj/node_modules PATH # true / false
    z-entry-finder mark-processed PATH -p module            # Write the processing marker
"""

from __future__ import annotations

import json
import sys

import click

from z_entry_finder.config import FinderConfiguration, PathMappings, load_path_mappings
from z_entry_finder.dependencies import (
    DependencyResolver,
    ModuleResolver,
    SortedEntryPoints,
    SourceDependencyHost,
)
from z_entry_finder.exceptions import FinderError
from z_entry_finder.filesystem import FileSystem, LocalFileSystem
from z_entry_finder.finders import DirectoryWalkerEntryPointFinder, TargetedEntryPointFinder
from z_entry_finder.logging_config import setup_logging
from z_entry_finder.packages.build_marker import clean_processing_markers, mark_as_processed
from z_entry_finder.packages.entry_point import (
    DEPENDENCY_CACHE_DIR,
    DESCRIPTOR_FILE,
    SUPPORTED_FORMAT_PROPERTIES,
)
from z_entry_finder.packages.manifest import EntryPointManifest, InvalidatingEntryPointManifest


def _project_path(fs: FileSystem, base_path: str) -> str:
    """The project owning *base_path*: the parent of a ``node_modules`` base path."""
    if fs.basename(base_path) == DEPENDENCY_CACHE_DIR:
        return fs.dirname(base_path)
    return base_path


def _build_resolver(
    fs: FileSystem, base_path: str, tsconfig: str | None
) -> tuple[FinderConfiguration, PathMappings | None, DependencyResolver]:
    config = FinderConfiguration(fs, _project_path(fs, base_path))
    path_mappings = load_path_mappings(fs, tsconfig) if tsconfig else None
    host = SourceDependencyHost(fs, ModuleResolver(fs, path_mappings))
    return config, path_mappings, DependencyResolver(fs, config, host)


def _result_to_dict(result: SortedEntryPoints) -> dict:
    return {
        "entry_points": [
            {
                "name": ep.entry_point.name,
                "path": ep.entry_point.path,
                "package_path": ep.entry_point.package_path,
                "dependencies": sorted(ep.dep_info.dependencies),
            }
            for ep in result.entry_points
        ],
        "invalid_entry_points": [
            {
                "name": invalid.entry_point.name,
                "path": invalid.entry_point.path,
                "missing_dependencies": invalid.missing_dependencies,
            }
            for invalid in result.invalid_entry_points
        ],
        "ignored_dependencies": [
            {"name": ignored.entry_point.name, "dependency_path": ignored.dependency_path}
            for ignored in result.ignored_dependencies
        ],
        "cycles": result.cycles,
    }


def _echo_result(result: SortedEntryPoints) -> None:
    click.echo(f"Processing order ({len(result.entry_points)}):")
    for i, ep in enumerate(result.entry_points, 1):
        click.echo(f"  {i}. {ep.entry_point.name}  ({ep.entry_point.path})")
    if result.invalid_entry_points:
        click.echo(f"\nInvalid entry-points ({len(result.invalid_entry_points)}):")
        for invalid in result.invalid_entry_points:
            missing = ", ".join(invalid.missing_dependencies)
            click.echo(f"  - {invalid.entry_point.name}: missing {missing}")
    if result.ignored_dependencies:
        click.echo(f"\nIgnored dependencies ({len(result.ignored_dependencies)}):")
        for ignored in result.ignored_dependencies:
            click.echo(f"  - {ignored.entry_point.name} -> {ignored.dependency_path}")
    if result.cycles:
        click.echo(f"\nCycles ({len(result.cycles)}):")
        for cycle in result.cycles:
            click.echo("  - " + " -> ".join([*cycle, cycle[0]]))


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """Z-Entry-Finder: find entry-points and order them by dependency."""
    try:
        setup_logging(verbose)
    except FinderError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command("find")
@click.argument("base_path", type=click.Path(exists=True, file_okay=False, resolve_path=True))
@click.option("--target", type=click.Path(resolve_path=True), help="Only the target and its dependencies")
@click.option(
    "--tsconfig",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    help="tsconfig-style file providing baseUrl/paths mappings",
)
@click.option("--invalidate-manifest", is_flag=True, help="Ignore and rewrite entry-point manifests")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def find(
    base_path: str,
    target: str | None,
    tsconfig: str | None,
    invalidate_manifest: bool,
    as_json: bool,
) -> None:
    """Find entry-points below BASE_PATH and print them in processing order."""
    fs = LocalFileSystem()
    try:
        config, path_mappings, resolver = _build_resolver(fs, base_path, tsconfig)
        if target:
            finder = TargetedEntryPointFinder(fs, config, resolver, base_path, target, path_mappings)
        else:
            manifest_cls = InvalidatingEntryPointManifest if invalidate_manifest else EntryPointManifest
            finder = DirectoryWalkerEntryPointFinder(
                fs, config, resolver, manifest_cls(fs, config), base_path, path_mappings
            )
        result = finder.find_entry_points()
    except FinderError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(_result_to_dict(result), indent=2))
    else:
        _echo_result(result)


@main.command("needs-processing")
@click.argument("base_path", type=click.Path(exists=True, file_okay=False, resolve_path=True))
@click.argument("target", type=click.Path(resolve_path=True))
@click.option(
    "-p", "--property", "properties", multiple=True,
    help="Format property to consider (repeatable, default: all supported)",
)
@click.option("--all-formats", is_flag=True, help="Every listed format must be processed")
@click.option(
    "--tsconfig",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    help="tsconfig-style file providing baseUrl/paths mappings",
)
def needs_processing(
    base_path: str,
    target: str,
    properties: tuple[str, ...],
    all_formats: bool,
    tsconfig: str | None,
) -> None:
    """Print whether TARGET still has formats to process."""
    fs = LocalFileSystem()
    try:
        config, path_mappings, resolver = _build_resolver(fs, base_path, tsconfig)
        finder = TargetedEntryPointFinder(fs, config, resolver, base_path, target, path_mappings)
        needed = finder.target_needs_processing_or_cleaning(
            properties or SUPPORTED_FORMAT_PROPERTIES, all_formats
        )
    except FinderError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo("true" if needed else "false")


@main.command("mark-processed")
@click.argument("entry_point_path", type=click.Path(exists=True, file_okay=False, resolve_path=True))
@click.option("-p", "--property", "properties", multiple=True, help="Format property to mark (repeatable)")
@click.option("--clean", is_flag=True, help="Remove the processing marker instead")
def mark_processed(entry_point_path: str, properties: tuple[str, ...], clean: bool) -> None:
    """Record formats of the entry-point at ENTRY_POINT_PATH as processed."""
    fs = LocalFileSystem()
    descriptor_path = fs.join(entry_point_path, DESCRIPTOR_FILE)
    if not fs.exists(descriptor_path):
        click.echo(f"Error: No {DESCRIPTOR_FILE} in {entry_point_path}", err=True)
        sys.exit(1)

    if clean:
        removed = clean_processing_markers(fs, descriptor_path)
        click.echo("Marker removed" if removed else "No marker found")
        return

    if not properties:
        click.echo("Error: at least one --property is required", err=True)
        sys.exit(1)
    descriptor = json.loads(fs.read_file(descriptor_path))
    mark_as_processed(fs, descriptor, descriptor_path, properties)
    click.echo(f"Marked {', '.join(properties)} as processed in {descriptor_path}")


if __name__ == "__main__":
    main()
