"""Byte-signature and content-heuristic format classification.

Binary signatures are checked first, in table order, against a header window
of at most 16 bytes. Only when none of them match are the text heuristics
applied to the decoded buffer, so a binary file that happens to be valid
UTF-8 is never read as CSV or GeoJSON.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List

from .models import Classification, ClassificationError, FileType

HEADER_SIZE = 16


@dataclass(frozen=True)
class Signature:
    """Magic-number prefix identifying a binary container format."""

    file_type: FileType
    magic: bytes
    description: str

    def matches(self, header: bytes) -> bool:
        return header[: len(self.magic)] == self.magic


SIGNATURES: tuple[Signature, ...] = (
    # Any ZIP container matches; xlsx is the only zipped format we load.
    Signature(FileType.EXCEL, b"PK\x03\x04", "ZIP local file header"),
    Signature(FileType.GEOPACKAGE, b"SQLite format 3\x00", "SQLite database header"),
    Signature(FileType.SHAPEFILE, b"\x00\x00\x27\x0a", "shapefile file code 9994"),
    # Footer magic is not verified.
    Signature(FileType.PARQUET, b"PAR1", "Parquet header magic"),
)


def decode_or_empty(data: bytes) -> str:
    """Decode data as strict UTF-8, returning an empty string on failure."""
    try:
        return bytes(data).decode("utf-8")
    except UnicodeDecodeError:
        return ""


def split_lines(text: str) -> List[str]:
    """Split on newlines, dropping a trailing carriage return from each line.

    A trailing newline does not produce an empty final line.
    """
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _looks_like_json(data: bytes) -> bool:
    return data[:1] == b"{"


def _classify_geojson(data: bytes) -> Classification:
    text = decode_or_empty(data)
    if not text and data:
        return Classification.failure(
            ClassificationError.INVALID_GEOJSON, "content is not valid UTF-8"
        )
    if '"type":' in text and ('"FeatureCollection"' in text or '"Feature"' in text):
        return Classification.success(FileType.GEOJSON, "GeoJSON type markers")
    return Classification.failure(
        ClassificationError.INVALID_GEOJSON, "missing Feature/FeatureCollection type markers"
    )


def _classify_delimited(data: bytes) -> Classification:
    text = decode_or_empty(data)
    if not text and data:
        return Classification.failure(
            ClassificationError.UNKNOWN_FORMAT, "content is not valid UTF-8"
        )
    lines = split_lines(text)
    if len(lines) < 2:
        return Classification.failure(
            ClassificationError.UNKNOWN_FORMAT, "fewer than two lines of text"
        )
    header_fields = len(lines[0].split(","))
    if header_fields < 2:
        return Classification.failure(
            ClassificationError.UNKNOWN_FORMAT, "first line has a single field"
        )
    if len(lines[1].split(",")) != header_fields:
        return Classification.failure(
            ClassificationError.UNKNOWN_FORMAT, "field count mismatch between first two lines"
        )
    if not text.isascii():
        return Classification.failure(
            ClassificationError.UNKNOWN_FORMAT, "text contains non-ASCII characters"
        )
    return Classification.success(FileType.CSV, f"{header_fields} comma-separated fields")


def _always(data: bytes) -> bool:
    return True


# Each heuristic owns its outcome once its predicate accepts the buffer.
HEURISTICS: tuple[tuple[Callable[[bytes], bool], Callable[[bytes], Classification]], ...] = (
    (_looks_like_json, _classify_geojson),
    (_always, _classify_delimited),
)


def classify(data: bytes) -> Classification:
    """Classify a byte buffer into one of the supported file types.

    Args:
        data: File contents. Signature checks only need the first 16 bytes;
            the text heuristics inspect the whole buffer.

    Returns:
        Classification: The detected `FileType`, or an `InvalidGeojson` /
        `UnknownFormat` failure. Never raises for any input.
    """
    header = bytes(data[:HEADER_SIZE])
    for signature in SIGNATURES:
        if signature.matches(header):
            return Classification.success(signature.file_type, signature.description)

    for applies, resolve in HEURISTICS:
        if applies(header):
            return resolve(data)

    return Classification.failure(ClassificationError.UNKNOWN_FORMAT)


__all__ = [
    "HEADER_SIZE",
    "Signature",
    "SIGNATURES",
    "HEURISTICS",
    "classify",
    "decode_or_empty",
    "split_lines",
]
