"""Data models shared by the ingestion pipeline."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from duckload.detection import ClassificationError, FileType
from duckload.loading import TablePreview


class PendingFile(BaseModel):
    """A file discovered on disk that has not been classified yet."""

    path: Path
    size_bytes: int
    modified_at: Optional[datetime] = None
    oversized: bool = False


class LoadOutcome(BaseModel):
    """A file that was classified and loaded successfully."""

    path: Path
    file_type: FileType
    table: str
    row_count: int
    preview: Optional[TablePreview] = None
    exported_to: Optional[str] = None


class RejectedFile(BaseModel):
    """A file whose contents did not match any supported format."""

    path: Path
    error: ClassificationError
    detail: Optional[str] = None


class PipelineResult(BaseModel):
    """Aggregated outcome of a pipeline run."""

    loaded: List[LoadOutcome] = Field(default_factory=list)
    rejected: List[RejectedFile] = Field(default_factory=list)
    skipped: List[Path] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected and not self.errors


__all__ = ["PendingFile", "LoadOutcome", "RejectedFile", "PipelineResult"]
