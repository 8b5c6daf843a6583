"""Plugin capability interface, registration and loading."""

from __future__ import annotations

from .base import FunctionPlugin, Plugin, coerce_plugin
from .loader import CONVENTIONAL_INIT_FILE, PluginLoader
from .manifest import MANIFEST_FILENAMES, PluginManifest, read_manifest
from .registry import lookup_plugin, register_plugin, unregister_plugin

__all__ = [
    "CONVENTIONAL_INIT_FILE",
    "FunctionPlugin",
    "MANIFEST_FILENAMES",
    "Plugin",
    "PluginLoader",
    "PluginManifest",
    "coerce_plugin",
    "lookup_plugin",
    "read_manifest",
    "register_plugin",
    "unregister_plugin",
]
