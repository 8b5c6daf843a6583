"""Concurrent discovery and initialization of declared plugins."""

from __future__ import annotations

import asyncio
import hashlib
import importlib.util
import inspect
import pkgutil
import re
from pathlib import Path
from types import ModuleType
from typing import Any, Iterable, List, Mapping

from ..errors import PluginLoadError
from ..logging import get_logger, report_error
from ..models import INIT_DATA_KEY, INJECTED_COMPONENTS_KEY, PluginDescriptor
from .base import Plugin, coerce_plugin
from .manifest import read_manifest
from .registry import lookup_plugin

CONVENTIONAL_INIT_FILE = "init.py"

_REFERENCE_PATTERN = re.compile(r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$")


class PluginLoader:
    """Initializes plugins and enriches their options blocks in place.

    Each plugin moves through discover -> load -> invoke -> attach. A plugin
    without a usable entry point is skipped without touching its options.
    All plugins run concurrently and :meth:`load` returns once every one of
    them has finished.
    """

    def __init__(self) -> None:
        self.logger = get_logger("plugins")

    async def load(self, declarations: Iterable[Any]) -> List[PluginDescriptor]:
        descriptors: List[PluginDescriptor] = []
        for declaration in declarations:
            try:
                descriptors.append(PluginDescriptor.from_config(declaration))
            except ValueError as exc:
                report_error(f"Ignoring plugin declaration: {exc}")

        results = await asyncio.gather(
            *(self._initialize(descriptor) for descriptor in descriptors),
            return_exceptions=True,
        )
        for descriptor, result in zip(descriptors, results):
            if isinstance(result, Exception):
                self.logger.warning("Plugin '%s' failed: %s", descriptor.kind, result)
        return descriptors

    def resolve(self, descriptor: PluginDescriptor) -> Plugin:
        """Locate the init entry for ``descriptor`` and wrap it as a :class:`Plugin`."""
        install_dir = self._install_dir(descriptor)
        manifest = read_manifest(install_dir)

        if manifest is not None and manifest.init:
            target: object = self._load_reference(install_dir, manifest.init)
        elif (install_dir / CONVENTIONAL_INIT_FILE).is_file():
            target = _load_module_from_file(install_dir / CONVENTIONAL_INIT_FILE, descriptor.kind)
        else:
            try:
                target = lookup_plugin(descriptor.kind)
            except Exception as exc:
                raise PluginLoadError(f"Entry point for '{descriptor.kind}' failed to load: {exc}") from exc
            if target is None:
                raise PluginLoadError(f"No init entry found for plugin '{descriptor.kind}'")
        return coerce_plugin(target)

    async def _initialize(self, descriptor: PluginDescriptor) -> None:
        try:
            plugin = self.resolve(descriptor)
        except Exception as exc:
            self.logger.debug("Plugin '%s' has no init hook: %s", descriptor.kind, exc)
            return

        options = descriptor.options
        try:
            result = plugin.init(options)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            self.logger.warning("Plugin '%s' failed to initialize: %s", descriptor.kind, exc)
            return
        options[INIT_DATA_KEY] = result

        try:
            components = plugin.inject_components(options)
            if inspect.isawaitable(components):
                components = await components
            if components and not isinstance(components, Mapping):
                raise TypeError(f"expected a mapping of components, got {type(components).__name__}")
            if components:
                install_dir = self._install_dir(descriptor)
                resolved = {
                    str(name): str((install_dir / str(path)).resolve())
                    for name, path in components.items()
                }
            else:
                resolved = None
        except Exception as exc:
            self.logger.warning("Plugin '%s' failed to declare components: %s", descriptor.kind, exc)
            return
        if resolved:
            options[INJECTED_COMPONENTS_KEY] = resolved
        self.logger.debug("Plugin '%s' initialized", descriptor.kind)

    @staticmethod
    def _install_dir(descriptor: PluginDescriptor) -> Path:
        return Path(descriptor.path).expanduser().resolve()

    @staticmethod
    def _load_reference(install_dir: Path, reference: str) -> object:
        if _REFERENCE_PATTERN.match(reference):
            try:
                return pkgutil.resolve_name(reference)
            except Exception as exc:
                raise PluginLoadError(f"Cannot import {reference}: {exc}") from exc
        return _load_module_from_file(install_dir / reference, install_dir.name)


def _load_module_from_file(path: Path, kind: str) -> ModuleType:
    if not path.is_file():
        raise PluginLoadError(f"Init file not found: {path}")
    digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:12]
    safe_kind = re.sub(r"\W", "_", kind)
    module_name = f"_docsite_plugin_{safe_kind}_{digest}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise PluginLoadError(f"Cannot load init file {path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise PluginLoadError(f"Init file {path} raised during import: {exc}") from exc
    return module


__all__ = ["CONVENTIONAL_INIT_FILE", "PluginLoader"]
