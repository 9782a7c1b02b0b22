"""Tests covering discovery and the load pipeline."""

from pathlib import Path

from duckload.config.models import DuckDBSettings, ExportSettings
from duckload.detection import ClassificationError, FileType, TypeDetector
from duckload.ingestion import DirectoryScanner, LoadPipeline
from duckload.loading import DuckDBLoader, PostgresExporter


def _scanner(**overrides) -> DirectoryScanner:
    options = {
        "recursive": False,
        "include_hidden": False,
        "follow_symlinks": False,
        "max_size_bytes": None,
    }
    options.update(overrides)
    return DirectoryScanner(**options)


class RecordingExporter(PostgresExporter):
    """Exporter that records statements instead of reaching PostgreSQL."""

    def __init__(self, settings: ExportSettings) -> None:
        super().__init__(settings, install_extension=False)
        self.statements: list[str] = []

    def _run(self, connection, query: str, *, step: str) -> None:
        self.statements.append(query)


def _pipeline(scanner: DirectoryScanner, **kwargs) -> LoadPipeline:
    return LoadPipeline(
        scanner=scanner,
        detector=TypeDetector(),
        loader=DuckDBLoader(DuckDBSettings(auto_install_extensions=False)),
        **kwargs,
    )


def test_directory_scanner_filters(tmp_path: Path) -> None:
    (tmp_path / "visible.csv").write_text("a,b\n1,2\n", encoding="utf-8")
    (tmp_path / ".hidden.csv").write_text("a,b\n1,2\n", encoding="utf-8")
    (tmp_path / "oversized.bin").write_bytes(b"x" * 2048)
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "inner.csv").write_text("a,b\n1,2\n", encoding="utf-8")

    found = list(_scanner(max_size_bytes=1024).scan(tmp_path))
    names = [item.path.name for item in found]

    assert names == ["oversized.bin", "visible.csv"]
    assert next(item for item in found if item.path.name == "oversized.bin").oversized is True
    assert next(item for item in found if item.path.name == "visible.csv").size_bytes == 8

    recursive_names = sorted(item.path.name for item in _scanner(recursive=True).scan(tmp_path))
    assert recursive_names == ["inner.csv", "oversized.bin", "visible.csv"]


def test_scanner_accepts_a_file_root(csv_file: Path) -> None:
    found = list(_scanner().scan(csv_file))

    assert [item.path for item in found] == [csv_file.resolve()]


def test_type_detector_reads_file(csv_file: Path, parquet_file: Path, tmp_path: Path) -> None:
    detector = TypeDetector()
    geojson = tmp_path / "shapes.geojson"
    geojson.write_text('{"type": "FeatureCollection", "features": []}', encoding="utf-8")

    assert detector.detect(csv_file).file_type is FileType.CSV
    assert detector.detect(parquet_file).file_type is FileType.PARQUET
    assert detector.detect(geojson).file_type is FileType.GEOJSON


def test_pipeline_loads_single_file_with_configured_table(csv_file: Path) -> None:
    result = _pipeline(_scanner(), table_name="cities", preview_rows=2).run([csv_file])

    assert result.ok
    assert len(result.loaded) == 1
    outcome = result.loaded[0]
    assert outcome.file_type is FileType.CSV
    assert outcome.table == "cities"
    assert outcome.row_count == 3
    assert outcome.preview is not None
    assert len(outcome.preview.rows) == 2
    assert outcome.exported_to is None


def test_pipeline_reports_loaded_rejected_and_skipped(
    tmp_path: Path, csv_file: Path, parquet_file: Path
) -> None:
    (tmp_path / "notes.txt").write_text("just some prose\n", encoding="utf-8")
    (tmp_path / "config.json").write_text('{"debug": true}', encoding="utf-8")
    (tmp_path / "huge.csv").write_text("a,b\n" + "1,2\n" * 2000, encoding="utf-8")

    scanner = _scanner(max_size_bytes=4096)
    result = _pipeline(scanner, preview_rows=0).run([tmp_path])

    loaded = {outcome.path.name: outcome for outcome in result.loaded}
    assert set(loaded) == {"cities.csv", "readings.parquet"}
    assert loaded["cities.csv"].table == "cities"
    assert loaded["readings.parquet"].table == "readings"
    assert loaded["cities.csv"].preview is None

    rejected = {item.path.name: item.error for item in result.rejected}
    assert rejected == {
        "config.json": ClassificationError.INVALID_GEOJSON,
        "notes.txt": ClassificationError.UNKNOWN_FORMAT,
    }
    assert [path.name for path in result.skipped] == ["huge.csv"]
    assert not result.errors
    assert not result.ok


def test_pipeline_records_load_failures_and_continues(tmp_path: Path, csv_file: Path) -> None:
    (tmp_path / "broken.parquet").write_bytes(b"PAR1 not really parquet")

    result = _pipeline(_scanner()).run([tmp_path])

    assert [outcome.path.name for outcome in result.loaded] == ["cities.csv"]
    assert len(result.errors) == 1
    assert "broken.parquet" in result.errors[0]


def test_pipeline_deduplicates_table_names(tmp_path: Path) -> None:
    first = tmp_path / "a"
    second = tmp_path / "b"
    first.mkdir()
    second.mkdir()
    (first / "data.csv").write_text("x,y\n1,2\n", encoding="utf-8")
    (second / "data.csv").write_text("x,y\n3,4\n", encoding="utf-8")

    result = _pipeline(_scanner()).run([first, second])

    assert [outcome.table for outcome in result.loaded] == ["data", "data_1"]


def test_pipeline_exports_each_file_to_its_own_table(tmp_path: Path) -> None:
    (tmp_path / "north.csv").write_text("x,y\n1,2\n", encoding="utf-8")
    (tmp_path / "south.csv").write_text("x,y\n3,4\n", encoding="utf-8")
    exporter = RecordingExporter(ExportSettings(table_name="imported", overwrite=True))

    result = _pipeline(_scanner(), exporter=exporter, preview_rows=0).run([tmp_path])

    assert result.ok
    assert [outcome.exported_to for outcome in result.loaded] == [
        "pg.public.north",
        "pg.public.south",
    ]
    drops = [s for s in exporter.statements if s.startswith("DROP TABLE")]
    assert drops == [
        "DROP TABLE IF EXISTS pg.public.north;",
        "DROP TABLE IF EXISTS pg.public.south;",
    ]


def test_pipeline_single_file_uses_configured_export_table(csv_file: Path) -> None:
    exporter = RecordingExporter(ExportSettings(table_name="imported"))

    result = _pipeline(_scanner(), exporter=exporter, preview_rows=0).run([csv_file])

    assert [outcome.exported_to for outcome in result.loaded] == ["pg.public.imported"]
