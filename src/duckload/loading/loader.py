"""Load classified files into DuckDB tables."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import duckdb
from pydantic import BaseModel, Field

from duckload.config.models import DuckDBSettings
from duckload.detection import FileType

from .errors import ExtensionError, LoadError, PreviewError, TableCreationError
from .queries import (
    build_create_table_query,
    quote_literal,
    required_extensions,
    safe_identifier,
)

LOGGER = logging.getLogger(__name__)


class ColumnInfo(BaseModel):
    """Name and DuckDB type of a loaded column."""

    name: str
    type: str


class TablePreview(BaseModel):
    """Schema and leading rows of a loaded table.

    Attributes:
        table: Table the preview was taken from.
        columns: Column names and types in table order.
        rows: First rows of the table with values rendered for display.
        total_rows: Number of rows in the whole table.
    """

    table: str
    columns: List[ColumnInfo] = Field(default_factory=list)
    rows: List[List[Any]] = Field(default_factory=list)
    total_rows: int = 0


@dataclass
class LoadedTable:
    """A table created in an open DuckDB connection."""

    connection: duckdb.DuckDBPyConnection
    table: str
    file_type: FileType
    source: Path
    row_count: int

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> "LoadedTable":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _display_value(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<{len(value)} bytes>"
    return str(value)


class DuckDBLoader:
    """Create DuckDB tables from files using format-specific readers."""

    def __init__(self, settings: DuckDBSettings, *, extensions: Iterable[str] = ()) -> None:
        self.settings = settings
        self.extensions = tuple(extensions)

    def connect(self) -> duckdb.DuckDBPyConnection:
        """Open a connection to the configured database and apply settings."""
        try:
            connection = duckdb.connect(self.settings.database)
        except duckdb.Error as exc:
            raise LoadError(f"Could not open DuckDB database {self.settings.database}: {exc}") from exc

        try:
            if self.settings.threads:
                connection.execute(f"SET threads TO {int(self.settings.threads)}")
            if self.settings.memory_limit:
                connection.execute(f"SET memory_limit = {quote_literal(self.settings.memory_limit)}")
        except duckdb.Error as exc:
            connection.close()
            raise LoadError(f"Invalid DuckDB setting: {exc}") from exc
        return connection

    def ensure_extensions(
        self, connection: duckdb.DuckDBPyConnection, names: Sequence[str]
    ) -> None:
        """Install (when enabled) and load each named extension.

        Raises:
            ExtensionError: If an extension cannot be installed or loaded.
        """
        for name in names:
            extension = safe_identifier(name)
            try:
                if self.settings.auto_install_extensions:
                    connection.execute(f"INSTALL {extension};")
                connection.execute(f"LOAD {extension};")
            except duckdb.Error as exc:
                raise ExtensionError(f"Could not load DuckDB extension '{extension}': {exc}") from exc
            LOGGER.debug("Loaded DuckDB extension %s", extension)

    def load(
        self,
        path: Path,
        file_type: FileType,
        *,
        table: Optional[str] = None,
        connection: Optional[duckdb.DuckDBPyConnection] = None,
    ) -> LoadedTable:
        """Create a table from path and return a handle to it.

        When no connection is given a new one is opened; it is closed again if
        loading fails, otherwise the returned `LoadedTable` owns it.

        Raises:
            LoadError: If the table cannot be created.
        """
        table_name = safe_identifier(table or self.settings.table_name)
        owns_connection = connection is None
        conn = connection if connection is not None else self.connect()
        try:
            needed = dict.fromkeys([*self.extensions, *required_extensions(file_type)])
            self.ensure_extensions(conn, list(needed))

            query = build_create_table_query(file_type, path, table_name)
            LOGGER.info("Loading %s as %s into table %s", path, file_type.value, table_name)
            try:
                conn.execute(query)
            except duckdb.Error as exc:
                raise TableCreationError(
                    f"Could not load {path} as {file_type.value}: {exc}"
                ) from exc
            row_count = self._count_rows(conn, table_name)
        except LoadError:
            if owns_connection:
                conn.close()
            raise

        LOGGER.info("Loaded %d rows into %s", row_count, table_name)
        return LoadedTable(
            connection=conn,
            table=table_name,
            file_type=file_type,
            source=path,
            row_count=row_count,
        )

    def preview(self, loaded: LoadedTable, limit: Optional[int] = None) -> TablePreview:
        """Return the schema and first rows of a loaded table.

        Raises:
            PreviewError: If the table cannot be described or sampled.
        """
        row_limit = self.settings.preview_rows if limit is None else limit
        conn = loaded.connection
        try:
            described = conn.execute(f"DESCRIBE {loaded.table}").fetchall()
            rows = conn.execute(f"SELECT * FROM {loaded.table} LIMIT {int(row_limit)}").fetchall()
        except duckdb.Error as exc:
            raise PreviewError(f"Could not preview table {loaded.table}: {exc}") from exc

        return TablePreview(
            table=loaded.table,
            columns=[ColumnInfo(name=str(row[0]), type=str(row[1])) for row in described],
            rows=[[_display_value(value) for value in row] for row in rows],
            total_rows=loaded.row_count,
        )

    def _count_rows(self, conn: duckdb.DuckDBPyConnection, table: str) -> int:
        try:
            result: Optional[Tuple[Any, ...]] = conn.execute(
                f"SELECT COUNT(*) FROM {table}"
            ).fetchone()
        except duckdb.Error as exc:
            raise PreviewError(f"Could not count rows in {table}: {exc}") from exc
        return int(result[0]) if result else 0


__all__ = ["ColumnInfo", "DuckDBLoader", "LoadedTable", "TablePreview"]
