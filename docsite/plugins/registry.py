"""In-process and entry-point plugin registration."""

from __future__ import annotations

from importlib import metadata
from typing import Dict, Iterable, Optional

_ENTRY_POINT_GROUP = "docsite.plugins"

_REGISTERED: Dict[str, object] = {}


def register_plugin(kind: str, plugin: object) -> None:
    """Register a plugin object for descriptors of the given kind."""
    _REGISTERED[kind.lower()] = plugin


def unregister_plugin(kind: str) -> None:
    _REGISTERED.pop(kind.lower(), None)


def lookup_plugin(kind: str) -> Optional[object]:
    """Return the registered object for ``kind``, loading entry points on demand."""
    key = kind.lower()
    if key in _REGISTERED:
        return _REGISTERED[key]
    for entry in _iter_entry_points():
        if entry.name.lower() == key:
            return entry.load()
    return None


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = ["lookup_plugin", "register_plugin", "unregister_plugin"]
