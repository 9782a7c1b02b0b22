"""Classification result types."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from duckload.errors import DuckloadError


class FileType(str, Enum):
    """Formats the loader knows how to read."""

    GEOPACKAGE = "geopackage"
    SHAPEFILE = "shapefile"
    GEOJSON = "geojson"
    EXCEL = "excel"
    CSV = "csv"
    PARQUET = "parquet"

    @property
    def is_spatial(self) -> bool:
        """Return True for formats read through the generic geometry reader."""
        return self in _SPATIAL_TYPES


_SPATIAL_TYPES = frozenset({FileType.GEOPACKAGE, FileType.SHAPEFILE, FileType.GEOJSON})


class ClassificationError(str, Enum):
    """Reasons a buffer could not be classified."""

    INVALID_GEOJSON = "invalid_geojson"
    UNKNOWN_FORMAT = "unknown_format"


class DetectionError(DuckloadError):
    """Raised by `Classification.unwrap` when classification failed."""

    def __init__(self, error: ClassificationError, detail: str | None = None) -> None:
        self.error = error
        self.detail = detail
        message = error.value.replace("_", " ")
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class Classification(BaseModel):
    """Outcome of classifying a byte buffer.

    Exactly one of `file_type` or `error` is set.

    Attributes:
        file_type: Detected format when classification succeeded.
        error: Failure reason when classification failed.
        detail: Optional explanation of which check decided the outcome.
    """

    model_config = ConfigDict(frozen=True)

    file_type: Optional[FileType] = None
    error: Optional[ClassificationError] = None
    detail: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> "Classification":
        if (self.file_type is None) == (self.error is None):
            raise ValueError("Classification requires exactly one of file_type or error.")
        return self

    @classmethod
    def success(cls, file_type: FileType, detail: str | None = None) -> "Classification":
        return cls(file_type=file_type, detail=detail)

    @classmethod
    def failure(cls, error: ClassificationError, detail: str | None = None) -> "Classification":
        return cls(error=error, detail=detail)

    @property
    def ok(self) -> bool:
        return self.file_type is not None

    def unwrap(self) -> FileType:
        """Return the detected file type or raise `DetectionError`."""
        if self.file_type is not None:
            return self.file_type
        if self.error is None:
            raise RuntimeError("Classification has neither a file type nor an error.")
        raise DetectionError(self.error, self.detail)

    @property
    def label(self) -> str:
        """Return the format or error name for display."""
        if self.file_type is not None:
            return self.file_type.value
        if self.error is not None:
            return self.error.value
        raise RuntimeError("Classification has neither a file type nor an error.")


__all__ = [
    "FileType",
    "ClassificationError",
    "Classification",
    "DetectionError",
]
