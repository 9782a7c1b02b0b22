"""CLI tests for configuration commands."""

import os
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from duckload.cli import cli
from duckload.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path)
    env["DUCKLOAD_CONFIG"] = None
    return env


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / ".duckload" / "config.yaml"


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "view"], env=env)

    assert result.exit_code == 0
    assert "duckdb:" in result.output
    assert _config_path(tmp_path).exists()


def test_config_view_masks_password(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    env["DUCKLOAD__EXPORT__PASSWORD"] = "hunter2"

    result = runner.invoke(cli, ["config", "view"], env=env)

    assert result.exit_code == 0
    assert "hunter2" not in result.output
    assert "********" in result.output


def test_config_set_updates_value_and_writes_diff(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "duckdb.preview_rows", "--value", "12"], env=env)

    assert result.exit_code == 0
    assert "Updated duckdb.preview_rows" in result.output

    manager = ConfigManager(config_path=_config_path(tmp_path))
    config = manager.load(include_env=False)
    assert config.duckdb.preview_rows == 12


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "duckdb.preview_rows", "--value", "-1"], env=env)

    assert result.exit_code != 0
    assert "Invalid configuration values" in result.output


def test_config_edit_applies_changes(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    manager = ConfigManager(config_path=_config_path(tmp_path))
    manager.ensure_exists()

    def _mock_edit(text: str, **_: Any) -> str:
        return text.replace("table_name: data", "table_name: imported")

    monkeypatch.setattr("duckload.cli.click.edit", _mock_edit)

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 0
    assert "updated" in result.output.lower()

    config = manager.load(include_env=False)
    assert config.duckdb.table_name == "imported"
