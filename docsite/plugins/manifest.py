"""Plugin manifest model and lookup."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Sequence

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..logging import get_logger

MANIFEST_FILENAMES: Sequence[str] = (
    "docsite-plugin.yml",
    "docsite-plugin.yaml",
    "docsite-plugin.json",
)

_logger = get_logger("plugins.manifest")


class PluginManifest(BaseModel):
    """Metadata shipped in a plugin's install directory."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    version: str = "0.0.0"
    description: str = ""
    init: Optional[str] = Field(
        default=None,
        description="Init entry: a 'module:attribute' reference or a path to a Python file",
    )


def read_manifest(install_dir: Path) -> Optional[PluginManifest]:
    """Return the first manifest found in ``install_dir``; unreadable manifests count as absent."""
    for name in MANIFEST_FILENAMES:
        path = install_dir / name
        if not path.is_file():
            continue
        try:
            text = path.read_text(encoding="utf-8")
            data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
            return PluginManifest.model_validate(data or {})
        except (OSError, ValueError, yaml.YAMLError, ValidationError) as exc:
            _logger.debug("Ignoring manifest %s: %s", path, exc)
            return None
    return None


__all__ = ["MANIFEST_FILENAMES", "PluginManifest", "read_manifest"]
