"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Mapping

from pydantic import ValidationError

from .exceptions import ConfigError
from .models import DuckloadConfig

ENV_PREFIX = "DUCKLOAD__"
SECRET_KEYS = frozenset({"password"})
REDACTED = "********"


def resolve_with_precedence(
    *,
    defaults: DuckloadConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> DuckloadConfig:
    """Layer overrides onto defaults: file, then environment, then CLI."""
    merged = defaults.model_dump(mode="python")
    layers = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for source_name, layer in layers:
        if layer is None:
            continue
        merged = merge_mappings(merged, expand_dotted_keys(layer, source_name=source_name))

    try:
        return DuckloadConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def expand_dotted_keys(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    """Turn `{"duckdb.threads": 4}` style keys into nested mappings."""
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = expand_dotted_keys(value, source_name=source_name)
        *parents, leaf = key.split(".")
        node = expanded
        for segment in parents:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(
                    f"{source_name.capitalize()} override for {key} conflicts with existing value."
                )
            node = child
        if isinstance(value, dict) and isinstance(node.get(leaf), dict):
            node[leaf] = merge_mappings(node[leaf], value)
        else:
            node[leaf] = value
    return expanded


def merge_mappings(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Return a deep copy of base with overrides merged in recursively."""
    merged = deepcopy(dict(base))
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = merge_mappings(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


def redact_secrets(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of data with credential values masked for display."""
    redacted: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, MappingABC):
            redacted[key] = redact_secrets(value)
        elif key in SECRET_KEYS and value:
            redacted[key] = REDACTED
        else:
            redacted[key] = value
    return redacted


__all__ = [
    "ENV_PREFIX",
    "resolve_with_precedence",
    "expand_dotted_keys",
    "merge_mappings",
    "redact_secrets",
]
