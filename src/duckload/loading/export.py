"""Copy loaded DuckDB tables into PostgreSQL through the postgres extension."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import duckdb

from duckload.config.models import ExportSettings
from duckload.detection import FileType

from .errors import ExportError
from .queries import quote_literal, safe_identifier

LOGGER = logging.getLogger(__name__)


def _quote_dsn_value(value: str) -> str:
    """Quote a libpq keyword value, escaping backslashes and single quotes."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


class SupportsExecute(Protocol):
    def execute(self, query: str, *args: Any) -> Any: ...


class PostgresExporter:
    """Attach a PostgreSQL database and create a copy of a DuckDB table in it."""

    def __init__(self, settings: ExportSettings, *, install_extension: bool = True) -> None:
        self.settings = settings
        self.install_extension = install_extension

    def dsn(self, *, redact: bool = False) -> str:
        """Return a libpq connection string for the configured database."""
        parts = {
            "dbname": self.settings.dbname,
            "user": self.settings.user,
            "host": self.settings.host,
            "port": str(self.settings.port),
        }
        if self.settings.password:
            parts["password"] = "***" if redact else self.settings.password
        return " ".join(f"{key}={_quote_dsn_value(value)}" for key, value in parts.items())

    def target_for(self, source_table: str, target_table: Optional[str] = None) -> str:
        """Return the fully qualified attached table name."""
        alias = safe_identifier(self.settings.alias)
        schema = safe_identifier(self.settings.schema_name)
        table = safe_identifier(target_table or self.settings.table_name or source_table)
        return f"{alias}.{schema}.{table}"

    def export(
        self,
        connection: SupportsExecute,
        source_table: str,
        file_type: FileType,
        *,
        target_table: Optional[str] = None,
    ) -> str:
        """Create the exported table and return its qualified name.

        Spatial tables are copied with their geometry as WKT text and the column
        is converted to a PostGIS geometry afterwards.

        Raises:
            ExportError: If any step fails; the database is detached regardless.
        """
        source = safe_identifier(source_table)
        table = safe_identifier(target_table or self.settings.table_name or source)
        target = self.target_for(source, table)
        alias = safe_identifier(self.settings.alias)

        if self.install_extension:
            self._run(connection, "INSTALL postgres;", step="install postgres extension")
        self._run(connection, "LOAD postgres;", step="load postgres extension")

        LOGGER.info("Attaching PostgreSQL database %s", self.dsn(redact=True))
        self._run(
            connection,
            f"ATTACH {quote_literal(self.dsn())} AS {alias} (TYPE POSTGRES);",
            step="attach database",
        )
        try:
            if self.settings.overwrite:
                self._run(connection, f"DROP TABLE IF EXISTS {target};", step="drop existing table")
            self._run(
                connection,
                f"CREATE TABLE {target} AS {self._select_for(source, file_type)};",
                step="create table",
            )
            if file_type.is_spatial:
                self._run(
                    connection,
                    self._geometry_conversion(table),
                    step="convert geometry column",
                )
        finally:
            try:
                connection.execute(f"DETACH {alias};")
            except duckdb.Error as exc:
                LOGGER.warning("Could not detach %s: %s", alias, exc)

        LOGGER.info("Exported %s to %s", source, target)
        return target

    def _select_for(self, source: str, file_type: FileType) -> str:
        if not file_type.is_spatial:
            return f"SELECT * FROM {source}"
        column = safe_identifier(self.settings.geometry_column)
        return f"SELECT * REPLACE (ST_AsText({column}) AS {column}) FROM {source}"

    def _geometry_conversion(self, table: str) -> str:
        schema = safe_identifier(self.settings.schema_name)
        column = safe_identifier(self.settings.geometry_column)
        srid = int(self.settings.srid)
        remote_sql = (
            f'ALTER TABLE "{schema}"."{safe_identifier(table)}" '
            f'ALTER COLUMN "{column}" TYPE geometry(Geometry, {srid}) '
            f'USING ST_GeomFromText("{column}", {srid})'
        )
        return f"CALL postgres_execute({quote_literal(self.settings.alias)}, {quote_literal(remote_sql)});"

    def _run(self, connection: SupportsExecute, query: str, *, step: str) -> None:
        try:
            connection.execute(query)
        except duckdb.Error as exc:
            raise ExportError(f"PostgreSQL export failed to {step}: {exc}") from exc


__all__ = ["PostgresExporter", "SupportsExecute"]
