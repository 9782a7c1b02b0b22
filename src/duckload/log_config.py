"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from duckload.config.models import LoggingSettings

_HANDLER_NAME = "duckload-rich"


def configure_logging(settings: LoggingSettings, *, verbose: int = 0) -> int:
    """Attach a rich stderr handler to the root logger and set its level.

    Each `verbose` step lowers the configured level by one (WARNING -> INFO -> DEBUG).
    Repeated calls replace the handler rather than stacking it.

    Returns:
        int: The effective numeric logging level.
    """
    level = logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    level = max(logging.DEBUG, level - 10 * verbose)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root.removeHandler(handler)

    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(level)
    return level


__all__ = ["configure_logging"]
