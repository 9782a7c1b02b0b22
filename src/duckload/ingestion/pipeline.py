"""High-level load pipeline orchestration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from duckload.detection import TypeDetector
from duckload.loading import DuckDBLoader, LoadError, PostgresExporter, table_name_for

from .discovery import DirectoryScanner
from .models import LoadOutcome, PendingFile, PipelineResult, RejectedFile

LOGGER = logging.getLogger(__name__)


class LoadPipeline:
    """Discover files, classify them and load each one into its own DuckDB table."""

    def __init__(
        self,
        scanner: DirectoryScanner,
        detector: TypeDetector,
        loader: DuckDBLoader,
        *,
        exporter: Optional[PostgresExporter] = None,
        table_name: Optional[str] = None,
        preview_rows: Optional[int] = None,
    ) -> None:
        self.scanner = scanner
        self.detector = detector
        self.loader = loader
        self.exporter = exporter
        self.table_name = table_name
        self.preview_rows = preview_rows

    def run(self, roots: Iterable[Path]) -> PipelineResult:
        """Process every file under roots and return aggregated results.

        A failure on one file is recorded and does not stop the others.
        """
        result = PipelineResult()
        pending: List[PendingFile] = []
        for root in roots:
            pending.extend(self.scanner.scan(root))

        single = len(pending) == 1
        used_names: set[str] = set()
        for item in pending:
            if item.oversized:
                LOGGER.warning("Skipping %s: %d bytes exceeds the size limit", item.path, item.size_bytes)
                result.skipped.append(item.path)
                continue

            try:
                classification = self.detector.detect(item.path)
            except OSError as exc:
                result.errors.append(f"{item.path}: {exc}")
                continue

            if classification.error is not None:
                LOGGER.warning("Rejected %s: %s", item.path, classification.detail or classification.label)
                result.rejected.append(
                    RejectedFile(
                        path=item.path,
                        error=classification.error,
                        detail=classification.detail,
                    )
                )
                continue

            file_type = classification.unwrap()
            table = self._table_for(item.path, single=single, used=used_names)
            try:
                loaded = self.loader.load(item.path, file_type, table=table)
            except LoadError as exc:
                result.errors.append(f"{item.path}: {exc}")
                continue

            with loaded:
                outcome = LoadOutcome(
                    path=item.path,
                    file_type=loaded.file_type,
                    table=loaded.table,
                    row_count=loaded.row_count,
                )
                try:
                    if self.preview_rows != 0:
                        outcome.preview = self.loader.preview(loaded, self.preview_rows)
                    if self.exporter is not None:
                        # Only a lone file may take the configured export table name.
                        outcome.exported_to = self.exporter.export(
                            loaded.connection,
                            loaded.table,
                            loaded.file_type,
                            target_table=None if single else loaded.table,
                        )
                except LoadError as exc:
                    result.errors.append(f"{item.path}: {exc}")
                result.loaded.append(outcome)

        return result

    def _table_for(self, path: Path, *, single: bool, used: set[str]) -> str:
        if single and self.table_name:
            name = self.table_name
        elif single:
            name = self.loader.settings.table_name
        else:
            name = table_name_for(path)
        candidate = name
        counter = 1
        while candidate in used:
            candidate = f"{name}_{counter}"
            counter += 1
        used.add(candidate)
        return candidate


__all__ = ["LoadPipeline"]
