"""Errors raised while loading or exporting tables."""

from duckload.errors import DuckloadError


class LoadError(DuckloadError):
    """Base exception for DuckDB loading operations."""


class ExtensionError(LoadError):
    """Raised when a DuckDB extension cannot be installed or loaded."""


class TableCreationError(LoadError):
    """Raised when the table-creation statement fails."""


class PreviewError(LoadError):
    """Raised when a loaded table cannot be described or sampled."""


class ExportError(LoadError):
    """Raised when copying a table into PostgreSQL fails."""
