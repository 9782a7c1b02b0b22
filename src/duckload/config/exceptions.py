"""Custom exceptions for configuration management."""

from duckload.errors import DuckloadError


class ConfigError(DuckloadError):
    """Raised when configuration data cannot be processed."""
