"""Tests for loading files into DuckDB."""

from pathlib import Path

import pytest

from duckload.config.models import DuckDBSettings
from duckload.detection import FileType
from duckload.loading import DuckDBLoader, ExtensionError, LoadError, TableCreationError


def _loader(**overrides) -> DuckDBLoader:
    return DuckDBLoader(DuckDBSettings(auto_install_extensions=False, **overrides))


def test_load_csv_creates_table_and_counts_rows(csv_file: Path) -> None:
    loader = _loader()

    with loader.load(csv_file, FileType.CSV) as loaded:
        assert loaded.table == "data"
        assert loaded.row_count == 3
        names = loaded.connection.execute("SELECT name FROM data ORDER BY id").fetchall()

    assert [row[0] for row in names] == ["Lisbon", "Porto", "Braga"]


def test_load_parquet_with_custom_table(parquet_file: Path) -> None:
    loader = _loader()

    with loader.load(parquet_file, FileType.PARQUET, table="readings") as loaded:
        assert loaded.table == "readings"
        assert loaded.row_count == 10
        assert loaded.file_type is FileType.PARQUET


def test_preview_returns_schema_and_leading_rows(csv_file: Path) -> None:
    loader = _loader(preview_rows=2)

    with loader.load(csv_file, FileType.CSV) as loaded:
        preview = loader.preview(loaded)

    assert [column.name for column in preview.columns] == ["id", "name", "population"]
    assert preview.columns[1].type == "VARCHAR"
    assert len(preview.rows) == 2
    assert preview.rows[0][1] == "Lisbon"
    assert preview.total_rows == 3


def test_preview_limit_override(csv_file: Path) -> None:
    loader = _loader()

    with loader.load(csv_file, FileType.CSV) as loaded:
        assert loader.preview(loaded, limit=0).rows == []


def test_wrong_reader_raises_table_creation_error(csv_file: Path) -> None:
    loader = _loader()

    with pytest.raises(TableCreationError):
        loader.load(csv_file, FileType.PARQUET)


def test_unloadable_extension_raises_extension_error(csv_file: Path) -> None:
    loader = DuckDBLoader(
        DuckDBSettings(auto_install_extensions=False),
        extensions=["duckload_missing_extension"],
    )

    with pytest.raises(ExtensionError):
        loader.load(csv_file, FileType.CSV)


def test_unsafe_table_name_is_rejected(csv_file: Path) -> None:
    with pytest.raises(LoadError):
        _loader().load(csv_file, FileType.CSV, table="bad name")


def test_connection_settings_are_applied() -> None:
    loader = _loader(threads=2, memory_limit="512MB")

    conn = loader.connect()
    try:
        threads = conn.execute("SELECT current_setting('threads')").fetchone()
    finally:
        conn.close()

    assert threads is not None and int(threads[0]) == 2


def test_load_into_existing_connection_keeps_it_open(csv_file: Path, parquet_file: Path) -> None:
    loader = _loader()
    conn = loader.connect()
    try:
        loader.load(csv_file, FileType.CSV, table="cities", connection=conn)
        loader.load(parquet_file, FileType.PARQUET, table="readings", connection=conn)
        tables = {row[0] for row in conn.execute("SHOW TABLES").fetchall()}
    finally:
        conn.close()

    assert tables == {"cities", "readings"}
