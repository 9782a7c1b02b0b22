"""File discovery and load orchestration."""

from .discovery import DirectoryScanner
from .models import LoadOutcome, PendingFile, PipelineResult, RejectedFile
from .pipeline import LoadPipeline

__all__ = [
    "DirectoryScanner",
    "LoadOutcome",
    "LoadPipeline",
    "PendingFile",
    "PipelineResult",
    "RejectedFile",
]
