"""Per-run memo shared by the finders of one run."""

from __future__ import annotations

from dataclasses import dataclass, field

from z_entry_finder.dependencies.models import EntryPointWithDependencies
from z_entry_finder.packages.entry_point import EntryPointInfo


@dataclass
class FinderContext:
    """Classification and dependency results keyed by absolute unit path.

    Create one per run; never share between runs.
    """

    entry_point_infos: dict[str, EntryPointInfo] = field(default_factory=dict)
    with_dependencies: dict[str, EntryPointWithDependencies] = field(default_factory=dict)
    recorded: set[str] = field(default_factory=set)
