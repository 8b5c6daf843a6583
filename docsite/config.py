"""Configuration file discovery and option merging."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAMES: Sequence[str] = (
    ".docsiterc",
    ".docsiterc.yml",
    ".docsiterc.yaml",
    ".docsiterc.json",
    "docsite.config.yml",
    "docsite.config.yaml",
    "docsite.config.json",
)

PYPROJECT_FILENAME = "pyproject.toml"

DEFAULTS: Dict[str, Any] = {
    "src": "docs",
    "dst": "docs/dist",
    "baseURL": "/",
    "fqdn": None,
    "title": "Documentation",
    "mode": "production",
    "watch": False,
    "port": 8080,
    "open": True,
    "json": False,
    "static": False,
    "publish": False,
    "githubURL": None,
    "plugins": [],
    "navItems": {},
}


@dataclass(frozen=True)
class ConfigSearchResult:
    """A configuration mapping and the file it was read from."""

    path: Path
    config: Dict[str, Any]


def search_config(start_dir: Path | str) -> Optional[ConfigSearchResult]:
    """Walk upward from ``start_dir`` and return the first configuration found."""
    current = Path(start_dir).expanduser().resolve()
    if current.is_file():
        current = current.parent

    for directory in (current, *current.parents):
        for name in CONFIG_FILENAMES:
            candidate = directory / name
            if candidate.is_file():
                return ConfigSearchResult(path=candidate, config=load_config_file(candidate))
        pyproject = directory / PYPROJECT_FILENAME
        if pyproject.is_file():
            table = _read_pyproject_table(pyproject)
            if table is not None:
                return ConfigSearchResult(path=pyproject, config=table)
    return None


def load_config_file(path: Path) -> Dict[str, Any]:
    """Load a single YAML or JSON configuration file."""
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}

    if path.suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    else:
        # YAML is a superset of JSON, so extensionless rc files accept both.
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return data


def merge_options(*layers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Shallow-merge option layers, later layers taking precedence."""
    merged: Dict[str, Any] = {}
    for layer in layers:
        if not layer:
            continue
        merged.update(layer)
    return merged


def _read_pyproject_table(path: Path) -> Optional[Dict[str, Any]]:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    tool = _as_dict(data.get("tool"))
    table = tool.get("docsite")
    if table is None:
        return None
    if not isinstance(table, dict):
        raise ConfigError("[tool.docsite] must be a table")
    return dict(table)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


__all__ = [
    "CONFIG_FILENAMES",
    "ConfigError",
    "ConfigSearchResult",
    "DEFAULTS",
    "load_config_file",
    "merge_options",
    "search_config",
]
