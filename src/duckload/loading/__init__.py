"""DuckDB loading and PostgreSQL export of classified files."""

from .errors import ExportError, ExtensionError, LoadError, PreviewError, TableCreationError
from .export import PostgresExporter
from .loader import ColumnInfo, DuckDBLoader, LoadedTable, TablePreview
from .queries import build_create_table_query, required_extensions, table_name_for

__all__ = [
    "ColumnInfo",
    "DuckDBLoader",
    "ExportError",
    "ExtensionError",
    "LoadError",
    "LoadedTable",
    "PostgresExporter",
    "PreviewError",
    "TableCreationError",
    "TablePreview",
    "build_create_table_query",
    "required_extensions",
    "table_name_for",
]
