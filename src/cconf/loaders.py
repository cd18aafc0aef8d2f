"""Load functions that decode configuration files into untyped trees."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import yaml

from cconf.errors import ConfigNotFoundError, ConfigParseError

__all__ = ["LoadFunc", "default_loaders", "load_json", "load_yaml"]

LoadFunc = Callable[[str], Any]


def _read(file_path: str) -> str:
    path = Path(file_path)
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigNotFoundError(config_path=file_path, cause=exc) from exc
    except OSError as exc:
        raise ConfigParseError(config_path=file_path, reason=str(exc), cause=exc) from exc


def load_json(file_path: str) -> Any:
    """Read and decode a JSON file."""
    content = _read(file_path)
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise ConfigParseError(config_path=file_path, reason=f"Invalid JSON: {exc}", cause=exc) from exc


def load_yaml(file_path: str) -> Any:
    """Read and decode a YAML file. An empty document yields None."""
    content = _read(file_path)
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigParseError(config_path=file_path, reason=f"Invalid YAML: {exc}", cause=exc) from exc


def default_loaders() -> dict[str, LoadFunc]:
    """A fresh format-name to load-function table."""
    return {"json": load_json, "yaml": load_yaml, "yml": load_yaml}
