"""Configuration management for duckload."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import DuckloadConfig
from .resolver import ENV_PREFIX, redact_secrets, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.duckload/config.yaml")
CONFIG_PATH_ENV = "DUCKLOAD_CONFIG"
_CONFIG_HEADER = textwrap.dedent(
    """\
    # duckload configuration file
    # Manage via `duckload config edit` or `duckload config set KEY --value VALUE`.
    # Environment variables named DUCKLOAD__SECTION__KEY override these values.
    """
)


class ConfigManager:
    """Read, validate and persist the YAML configuration file."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._env = env if env is not None else os.environ
        if config_path is None:
            env_path = self._env.get(CONFIG_PATH_ENV)
            config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH
        self._config_path = config_path.expanduser()

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> DuckloadConfig:
        """Return the effective configuration after applying precedence rules."""
        if ensure_file:
            self.ensure_exists()

        env_layer = None
        if include_env:
            env_layer = self._parse_env(env_overrides if env_overrides is not None else self._env)

        return resolve_with_precedence(
            defaults=DuckloadConfig(),
            file_overrides=self._read_file(),
            env_overrides=env_layer or None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return raw overrides stored on disk."""
        return self._read_file()

    def save(self, config: DuckloadConfig | Mapping[str, Any]) -> None:
        """Persist configuration data to disk."""
        if isinstance(config, DuckloadConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._write_file(data)

    def ensure_exists(self) -> Path:
        """Create a configuration file with defaults if one does not exist."""
        if not self._config_path.exists():
            self._write_file(DuckloadConfig().model_dump(mode="python"))
        return self._config_path

    def read_text(self) -> str:
        """Return the current configuration file contents."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    def _read_file(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def _write_file(self, data: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        body = yaml.safe_dump(dict(data), sort_keys=False)
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{body}", encoding="utf-8"
        )

    def _parse_env(self, env: Mapping[str, str]) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for key, raw_value in env.items():
            if not key.startswith(ENV_PREFIX) or key == ENV_PREFIX:
                continue
            dotted = ".".join(part.lower() for part in key[len(ENV_PREFIX) :].split("__"))
            try:
                overrides[dotted] = yaml.safe_load(raw_value)
            except yaml.YAMLError:
                overrides[dotted] = raw_value
        return overrides


__all__ = [
    "ConfigManager",
    "CONFIG_PATH_ENV",
    "DEFAULT_CONFIG_PATH",
    "DuckloadConfig",
    "resolve_with_precedence",
    "redact_secrets",
    "ConfigError",
]
