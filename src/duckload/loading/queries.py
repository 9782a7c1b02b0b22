"""SQL templates for reading each supported format into DuckDB."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Tuple

from duckload.detection import FileType

from .errors import LoadError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_READERS = {
    FileType.GEOPACKAGE: "ST_Read",
    FileType.SHAPEFILE: "ST_Read",
    FileType.GEOJSON: "ST_Read",
    FileType.EXCEL: "read_xlsx",
    FileType.CSV: "read_csv_auto",
    FileType.PARQUET: "parquet_scan",
}


def safe_identifier(name: str) -> str:
    """Return name unchanged if it is a plain SQL identifier.

    Raises:
        LoadError: If name could inject SQL when interpolated.
    """
    if not _IDENTIFIER.match(name):
        raise LoadError(f"Unsafe SQL identifier: {name!r}")
    return name


def table_name_for(path: Path) -> str:
    """Derive a table name from a file name, e.g. `2024 parcels.gpkg` -> `t_2024_parcels`."""
    stem = re.sub(r"[^A-Za-z0-9_]+", "_", path.stem).strip("_").lower()
    if not stem:
        return "data"
    if stem[0].isdigit():
        stem = f"t_{stem}"
    return stem


def quote_literal(value: str) -> str:
    """Render value as a single-quoted SQL string literal."""
    return "'" + value.replace("'", "''") + "'"


def quote_path(path: Path | str) -> str:
    """Render a file path as a SQL literal using POSIX separators."""
    return quote_literal(Path(path).as_posix())


def reader_function(file_type: FileType) -> str:
    return _READERS[file_type]


def required_extensions(file_type: FileType) -> Tuple[str, ...]:
    """Return the DuckDB extensions needed to read file_type."""
    if file_type.is_spatial:
        return ("spatial",)
    if file_type is FileType.EXCEL:
        return ("excel",)
    return ()


def build_create_table_query(file_type: FileType, path: Path | str, table: str) -> str:
    """Return the `CREATE TABLE ... AS SELECT` statement loading path into table."""
    reader = reader_function(file_type)
    return (
        f"CREATE TABLE {safe_identifier(table)} AS "
        f"SELECT * FROM {reader}({quote_path(path)});"
    )


__all__ = [
    "build_create_table_query",
    "quote_literal",
    "quote_path",
    "reader_function",
    "required_extensions",
    "safe_identifier",
    "table_name_for",
]
