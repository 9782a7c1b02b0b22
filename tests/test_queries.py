"""Tests for the SQL templates used to load each format."""

from pathlib import Path

import pytest

from duckload.detection import FileType
from duckload.loading import LoadError, build_create_table_query, required_extensions, table_name_for
from duckload.loading.queries import quote_path, safe_identifier


@pytest.mark.parametrize(
    ("file_type", "reader"),
    [
        (FileType.GEOPACKAGE, "ST_Read"),
        (FileType.SHAPEFILE, "ST_Read"),
        (FileType.GEOJSON, "ST_Read"),
        (FileType.EXCEL, "read_xlsx"),
        (FileType.CSV, "read_csv_auto"),
        (FileType.PARQUET, "parquet_scan"),
    ],
)
def test_each_format_uses_its_reader(file_type: FileType, reader: str) -> None:
    query = build_create_table_query(file_type, Path("/data/input.bin"), "data")

    assert query == f"CREATE TABLE data AS SELECT * FROM {reader}('/data/input.bin');"


def test_paths_with_quotes_are_escaped() -> None:
    assert quote_path(Path("/tmp/o'brien.csv")) == "'/tmp/o''brien.csv'"


def test_unsafe_table_names_are_rejected() -> None:
    with pytest.raises(LoadError):
        build_create_table_query(FileType.CSV, Path("x.csv"), "data; DROP TABLE users")
    with pytest.raises(LoadError):
        safe_identifier("1table")


def test_required_extensions() -> None:
    assert required_extensions(FileType.GEOJSON) == ("spatial",)
    assert required_extensions(FileType.SHAPEFILE) == ("spatial",)
    assert required_extensions(FileType.EXCEL) == ("excel",)
    assert required_extensions(FileType.CSV) == ()
    assert required_extensions(FileType.PARQUET) == ()


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("cities.csv", "cities"),
        ("2024 Parcels.gpkg", "t_2024_parcels"),
        ("roads-v2.shp", "roads_v2"),
        ("___.csv", "data"),
    ],
)
def test_table_name_for(name: str, expected: str) -> None:
    assert table_name_for(Path(name)) == expected
