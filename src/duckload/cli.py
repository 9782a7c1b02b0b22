"""Command line interface for duckload."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any, NoReturn, Optional

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from duckload.config import (
    ConfigError,
    ConfigManager,
    DuckloadConfig,
    redact_secrets,
    resolve_with_precedence,
)
from duckload.detection import Classification, TypeDetector
from duckload.ingestion import DirectoryScanner, LoadPipeline, PipelineResult
from duckload.loading import DuckDBLoader, PostgresExporter, TablePreview
from duckload.log_config import configure_logging

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> NoReturn:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    if summary_only and mode not in {"summary", "warning", "error"}:
        return

    console.print(message)


def _format_summary_line(command: str, target: str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands."""

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {target}: {parts}.[/green]"


def _assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a nested value within a dictionary for a dotted path.

    Raises:
        ConfigError: If a non-mapping value is encountered along the path.
    """

    node = target
    for segment in path[:-1]:
        existing = node.get(segment)
        if existing is None:
            existing = {}
            node[segment] = existing
        elif not isinstance(existing, dict):
            raise ConfigError(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[path[-1]] = value


def _content_lines(text: str) -> list[str]:
    return [line for line in text.splitlines() if not line.startswith("# Last updated:")]


def _config_manager(ctx: click.Context) -> ConfigManager:
    config_path = (ctx.find_root().obj or {}).get("config_path")
    return ConfigManager(config_path=config_path)


def _load_config(ctx: click.Context, *, json_output: bool) -> DuckloadConfig:
    """Load configuration and configure logging for a command."""
    try:
        config = _config_manager(ctx).load()
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
    verbose = (ctx.find_root().obj or {}).get("verbose", 0)
    configure_logging(config.logging, verbose=verbose)
    return config


def _resolve_output_modes(
    ctx: click.Context,
    config: DuckloadConfig,
    *,
    quiet: bool,
    summary_mode: bool,
    json_output: bool,
) -> tuple[bool, bool]:
    """Combine CLI flags with configured defaults into (quiet, summary_only)."""

    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE

    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        return False, False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )
    return quiet_enabled, summary_only


def _build_scanner(config: DuckloadConfig, recursive: bool) -> DirectoryScanner:
    max_size_bytes = None
    if config.processing.max_file_size_mb > 0:
        max_size_bytes = config.processing.max_file_size_mb * 1024 * 1024
    return DirectoryScanner(
        recursive=recursive or config.processing.recurse_directories,
        include_hidden=config.processing.process_hidden_files,
        follow_symlinks=config.processing.follow_symlinks,
        max_size_bytes=max_size_bytes,
    )


def _classification_record(path: Path, result: Classification) -> dict[str, Any]:
    return {
        "path": str(path),
        "file_type": result.file_type.value if result.file_type else None,
        "error": result.error.value if result.error else None,
        "detail": result.detail,
    }


def _preview_table(preview: TablePreview) -> Table:
    table = Table(title=f"{preview.table} ({preview.total_rows} rows)")
    for column in preview.columns:
        table.add_column(f"{column.name}\n[dim]{column.type}[/dim]")
    for row in preview.rows:
        table.add_row(*("NULL" if value is None else str(value) for value in row))
    return table


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="duckload")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file to use instead of ~/.duckload/config.yaml.",
)
@click.option("-v", "--verbose", count=True, help="Increase logging verbosity (repeatable).")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: int) -> None:
    """Detect tabular and geospatial file formats and load them into DuckDB."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option("-r", "--recursive", is_flag=True, help="Include all subdirectories.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON classification records.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def detect(
    ctx: click.Context,
    paths: tuple[Path, ...],
    recursive: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Report the detected format of each file under PATHS.

    Exits with status 1 when any file could not be classified.
    """
    config = _load_config(ctx, json_output=json_output)
    quiet_enabled, summary_only = _resolve_output_modes(
        ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
    )

    scanner = _build_scanner(config, recursive)
    detector = TypeDetector()
    records: list[dict[str, Any]] = []
    errors: list[str] = []
    skipped = 0
    for root in paths:
        for pending in scanner.scan(root):
            if pending.oversized:
                skipped += 1
                continue
            try:
                result = detector.detect(pending.path)
            except OSError as exc:
                errors.append(f"{pending.path}: {exc}")
                continue
            records.append(_classification_record(pending.path, result))

    failed = [record for record in records if record["error"]]

    if json_output:
        console.print_json(data={"files": records, "skipped": skipped, "errors": errors})
    else:
        table = Table(title="Detected formats")
        table.add_column("Path")
        table.add_column("Format")
        table.add_column("Detail")
        for record in records:
            label = record["file_type"] or f"[red]{record['error']}[/red]"
            table.add_row(record["path"], label, record["detail"] or "")
        _emit_message(table, mode="detail", quiet=quiet_enabled, summary_only=summary_only)
        for entry in errors:
            _emit_message(f"[red]{entry}[/red]", mode="error", quiet=quiet_enabled, summary_only=summary_only)
        _emit_message(
            _format_summary_line(
                "Detect",
                ", ".join(str(path) for path in paths),
                {
                    "detected": len(records) - len(failed),
                    "unrecognized": len(failed),
                    "skipped": skipped,
                    "errors": len(errors),
                },
            ),
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

    if failed or errors:
        raise SystemExit(1)


def _emit_load_result(
    result: PipelineResult,
    target: str,
    *,
    quiet: bool,
    summary_only: bool,
) -> None:
    for outcome in result.loaded:
        _emit_message(
            f"[cyan]Loaded {outcome.path} as {outcome.file_type.value} into table "
            f"{outcome.table} ({outcome.row_count} rows).[/cyan]",
            mode="detail",
            quiet=quiet,
            summary_only=summary_only,
        )
        if outcome.preview is not None:
            _emit_message(
                _preview_table(outcome.preview),
                mode="detail",
                quiet=quiet,
                summary_only=summary_only,
            )
        if outcome.exported_to:
            _emit_message(
                f"[cyan]Exported to {outcome.exported_to}.[/cyan]",
                mode="detail",
                quiet=quiet,
                summary_only=summary_only,
            )

    for rejected in result.rejected:
        reason = rejected.error.value
        if rejected.detail:
            reason = f"{reason}: {rejected.detail}"
        _emit_message(
            f"[yellow]Could not determine the format of {rejected.path} ({reason}).[/yellow]",
            mode="warning",
            quiet=quiet,
            summary_only=summary_only,
        )
    if result.skipped:
        _emit_message(
            f"[yellow]{len(result.skipped)} file(s) skipped for exceeding the size limit.[/yellow]",
            mode="warning",
            quiet=quiet,
            summary_only=summary_only,
        )
    if result.errors:
        _emit_message("[red]Errors encountered:[/red]", mode="error", quiet=quiet, summary_only=summary_only)
        for entry in result.errors:
            _emit_message(f"  - {entry}", mode="error", quiet=quiet, summary_only=summary_only)

    _emit_message(
        _format_summary_line(
            "Load",
            target,
            {
                "loaded": len(result.loaded),
                "rows": sum(outcome.row_count for outcome in result.loaded),
                "rejected": len(result.rejected),
                "skipped": len(result.skipped),
                "errors": len(result.errors),
            },
        ),
        mode="summary",
        quiet=quiet,
        summary_only=summary_only,
    )


@cli.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option("-r", "--recursive", is_flag=True, help="Include all subdirectories.")
@click.option("--table", type=str, help="Table name when loading a single file.")
@click.option("--rows", type=click.IntRange(min=0), help="Number of preview rows to show.")
@click.option(
    "--export/--no-export",
    default=None,
    help="Copy loaded tables into the configured PostgreSQL database.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing loaded tables.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def load(
    ctx: click.Context,
    path: Path,
    recursive: bool,
    table: Optional[str],
    rows: Optional[int],
    export: Optional[bool],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Detect the format of PATH and load it into DuckDB.

    PATH may be a file or a directory; every file found gets its own table.
    Exits with status 1 when any file is rejected or fails to load.
    """
    config = _load_config(ctx, json_output=json_output)
    quiet_enabled, summary_only = _resolve_output_modes(
        ctx, config, quiet=quiet, summary_mode=summary_mode, json_output=json_output
    )

    export_enabled = config.export.enabled if export is None else export
    exporter = None
    if export_enabled:
        exporter = PostgresExporter(
            config.export, install_extension=config.duckdb.auto_install_extensions
        )

    pipeline = LoadPipeline(
        scanner=_build_scanner(config, recursive),
        detector=TypeDetector(),
        loader=DuckDBLoader(config.duckdb, extensions=config.extensions),
        exporter=exporter,
        table_name=table,
        preview_rows=config.duckdb.preview_rows if rows is None else rows,
    )

    try:
        result = pipeline.run([path])
    except Exception as exc:
        _handle_cli_error(
            f"Unexpected error while loading {path}: {exc}",
            code="internal_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )

    if json_output:
        console.print_json(data=result.model_dump(mode="json"))
    else:
        _emit_load_result(result, str(path), quiet=quiet_enabled, summary_only=summary_only)

    if not result.ok:
        raise SystemExit(1)


@cli.group()
def config() -> None:
    """Manage duckload configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
@click.option("--show-secrets", is_flag=True, help="Display passwords instead of masking them.")
@click.pass_context
def config_view(ctx: click.Context, no_env: bool, show_secrets: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = _config_manager(ctx)
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    data = loaded.model_dump(mode="python")
    if not show_secrets:
        data = redact_secrets(data)
    yaml_text = yaml.safe_dump(data, sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = _config_manager(ctx)
    manager.ensure_exists()

    before = _content_lines(manager.read_text())
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'duckdb.preview_rows'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = manager.load_file_overrides()
        _assign_nested(file_data, segments, parsed_value)
        resolve_with_precedence(defaults=DuckloadConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    after = _content_lines(manager.read_text())

    diff = list(
        difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )

    if not diff:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
@click.pass_context
def config_edit(ctx: click.Context) -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = _config_manager(ctx)
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=DuckloadConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
