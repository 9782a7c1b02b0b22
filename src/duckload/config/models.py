"""Configuration models describing duckload settings."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DuckloadBaseModel(BaseModel):
    """Shared configuration for duckload Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class ProcessingOptions(DuckloadBaseModel):
    """Options governing which files are picked up for loading.

    Attributes:
        recurse_directories: Whether to recurse into subdirectories.
        process_hidden_files: Whether hidden files should be included.
        follow_symlinks: Whether to traverse symbolic links.
        max_file_size_mb: Files larger than this are skipped; 0 disables the limit.
    """

    recurse_directories: bool = False
    process_hidden_files: bool = False
    follow_symlinks: bool = False
    max_file_size_mb: int = Field(default=512, ge=0)


class DuckDBSettings(DuckloadBaseModel):
    """Settings for the DuckDB database files are loaded into.

    Attributes:
        database: DuckDB database path, or `:memory:` for an in-memory database.
        table_name: Table created when a single file is loaded.
        preview_rows: Number of rows shown after loading.
        threads: Optional DuckDB worker thread count.
        memory_limit: Optional DuckDB memory limit such as `4GB`.
        auto_install_extensions: Whether to `INSTALL` extensions before loading them.
    """

    database: str = ":memory:"
    table_name: str = "data"
    preview_rows: int = Field(default=5, ge=0)
    threads: Optional[int] = Field(default=None, ge=1)
    memory_limit: Optional[str] = None
    auto_install_extensions: bool = True


class ExportSettings(DuckloadBaseModel):
    """Settings for copying loaded tables into PostgreSQL.

    Attributes:
        enabled: Whether loaded tables are exported.
        host: PostgreSQL host name.
        port: PostgreSQL port.
        dbname: Target database name.
        user: Role used to connect.
        password: Optional password for the role.
        schema_name: Target schema for exported tables.
        table_name: Target table name; defaults to the DuckDB table name.
        overwrite: Whether to drop an existing target table first.
        alias: Name the database is attached under inside DuckDB.
        srid: Spatial reference id assigned to exported geometries.
        geometry_column: Geometry column produced by the spatial reader.
    """

    enabled: bool = False
    host: str = "localhost"
    port: int = 5432
    dbname: str = "postgres"
    user: str = "postgres"
    password: Optional[str] = None
    schema_name: str = "public"
    table_name: Optional[str] = None
    overwrite: bool = False
    alias: str = "pg"
    srid: int = 4326
    geometry_column: str = "geom"


class LoggingSettings(DuckloadBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(DuckloadBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class DuckloadConfig(DuckloadBaseModel):
    """Top-level configuration struct for duckload.

    Attributes:
        processing: File discovery settings.
        duckdb: DuckDB loading settings.
        export: PostgreSQL export settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
        extensions: Extra DuckDB extensions to load for every file.
    """

    processing: ProcessingOptions = Field(default_factory=ProcessingOptions)
    duckdb: DuckDBSettings = Field(default_factory=DuckDBSettings)
    export: ExportSettings = Field(default_factory=ExportSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)
    extensions: List[str] = Field(default_factory=list)


__all__ = [
    "DuckloadBaseModel",
    "ProcessingOptions",
    "DuckDBSettings",
    "ExportSettings",
    "LoggingSettings",
    "CLIOptions",
    "DuckloadConfig",
]
