"""Base exception shared by every duckload error."""


class DuckloadError(Exception):
    """Root of the duckload exception hierarchy."""
