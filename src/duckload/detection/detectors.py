"""File-level format detection."""

from __future__ import annotations

import logging
from pathlib import Path

from .classifier import classify
from .models import Classification

LOGGER = logging.getLogger(__name__)


class TypeDetector:
    """Classify files on disk by reading their full contents."""

    def detect(self, path: Path) -> Classification:
        """Return the classification for the file at path.

        Raises:
            OSError: If the file cannot be read.
        """
        data = path.read_bytes()
        result = classify(data)
        LOGGER.debug("Classified %s (%d bytes) as %s", path, len(data), result.label)
        return result
