"""Custom exceptions for z-entry-finder."""


class FinderError(Exception):
    """Base exception for all entry-point finder errors."""


class MissingTargetDependenciesError(FinderError):
    """Raised when an explicitly requested target has unresolved dependencies."""

    def __init__(self, target: str, missing_dependencies: list[str]):
        self.target = target
        self.missing_dependencies = missing_dependencies
        super().__init__(
            f'The target entry-point "{target}" has missing dependencies:\n'
            + "".join(f" - {dep}\n" for dep in missing_dependencies)
        )


class UnsupportedEntryPointError(FinderError):
    """Raised when no format is available to compute a unit's dependencies."""


class InvalidManifestError(FinderError):
    """Raised when an entry-point manifest no longer matches the file-system."""


class ConfigurationError(FinderError):
    """Raised when a configuration or path-mapping file cannot be loaded."""
