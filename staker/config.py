"""
Configuration loading.

`load_config()` reads a `StakerConfig` from YAML and fails closed on unknown or
malformed fields.
"""

from __future__ import annotations

from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from .core.params import StakerConfig


CONFIG_SCHEMA = "staker/config/v1"


class ConfigError(ValueError):
    pass


def _require_mapping(obj: Any, *, name: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise ConfigError(f"{name} must be a mapping")
    return obj


def _require_int(obj: Any, *, name: str) -> int:
    if not isinstance(obj, int) or isinstance(obj, bool):
        raise ConfigError(f"{name} must be an int")
    return obj


def config_from_dict(d: Any) -> StakerConfig:
    root = _require_mapping(d, name="config")
    schema = root.get("schema", CONFIG_SCHEMA)
    if schema != CONFIG_SCHEMA:
        raise ConfigError(f"unsupported config schema: {schema}")

    known = {f.name for f in fields(StakerConfig)}
    kwargs: dict[str, int] = {}
    for key, value in root.items():
        if key == "schema":
            continue
        if key not in known:
            raise ConfigError(f"unknown config field: {key}")
        kwargs[key] = _require_int(value, name=f"config.{key}")
    try:
        return StakerConfig(**kwargs)
    except (TypeError, ValueError) as exc:
        raise ConfigError(str(exc)) from exc


def load_config(path: Path | str) -> StakerConfig:
    """Load a `StakerConfig` from a YAML file. An empty file yields the defaults."""
    raw = Path(path).read_text(encoding="utf-8")
    data = yaml.safe_load(raw)
    if data is None:
        return StakerConfig()
    return config_from_dict(data)


__all__ = ["CONFIG_SCHEMA", "ConfigError", "StakerConfig", "config_from_dict", "load_config"]
