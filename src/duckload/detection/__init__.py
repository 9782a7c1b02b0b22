"""Format detection for tabular and geospatial files."""

from .classifier import SIGNATURES, classify, decode_or_empty, split_lines
from .detectors import TypeDetector
from .models import Classification, ClassificationError, DetectionError, FileType

__all__ = [
    "Classification",
    "ClassificationError",
    "DetectionError",
    "FileType",
    "SIGNATURES",
    "TypeDetector",
    "classify",
    "decode_or_empty",
    "split_lines",
]
