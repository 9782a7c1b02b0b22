"""Shared fixtures for duckload tests."""

from pathlib import Path

import duckdb
import pytest


@pytest.fixture
def csv_file(tmp_path: Path) -> Path:
    path = tmp_path / "cities.csv"
    path.write_text("id,name,population\n1,Lisbon,545000\n2,Porto,232000\n3,Braga,193000\n", encoding="ascii")
    return path


@pytest.fixture
def parquet_file(tmp_path: Path) -> Path:
    path = tmp_path / "readings.parquet"
    conn = duckdb.connect()
    try:
        conn.execute(
            "COPY (SELECT range AS id, range * 1.5 AS value FROM range(10)) "
            f"TO '{path.as_posix()}' (FORMAT PARQUET)"
        )
    finally:
        conn.close()
    return path
