"""Capability interface implemented by docsite plugins."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import ModuleType
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from ..errors import PluginLoadError

InitResult = Union[Any, Awaitable[Any]]
ComponentMap = Mapping[str, str]

_COMPONENT_HOOKS = ("inject_components", "injectComponents")


class Plugin(ABC):
    """Contract for plugins taking part in option resolution."""

    @abstractmethod
    def init(self, options: Dict[str, Any]) -> InitResult:
        """Prepare the plugin; the (possibly awaitable) result is kept in the options block."""

    def inject_components(self, options: Dict[str, Any]) -> Optional[ComponentMap]:
        """Return ``component name -> source file`` for the site bundle, if any."""
        return None


class FunctionPlugin(Plugin):
    """Adapts a bare init callable (and optional component hook) to :class:`Plugin`."""

    def __init__(
        self,
        init: Callable[[Dict[str, Any]], InitResult],
        components: Callable[[Dict[str, Any]], Optional[ComponentMap]] | None = None,
    ) -> None:
        self._init = init
        self._components = components

    def init(self, options: Dict[str, Any]) -> InitResult:
        return self._init(options)

    def inject_components(self, options: Dict[str, Any]) -> Optional[ComponentMap]:
        if self._components is None:
            return None
        return self._components(options)


def coerce_plugin(obj: object) -> Plugin:
    """Build a :class:`Plugin` from an instance, class, module or callable."""
    if isinstance(obj, Plugin):
        return obj
    if isinstance(obj, type):
        if issubclass(obj, Plugin):
            try:
                return obj()
            except Exception as exc:
                raise PluginLoadError(f"Cannot instantiate {obj.__name__}: {exc}") from exc
        raise PluginLoadError(f"{obj.__name__} is not a Plugin subclass")
    if isinstance(obj, ModuleType):
        # A ``default`` export wins over a direct ``init`` function.
        entry = getattr(obj, "default", None) or getattr(obj, "init", None)
        if entry is None:
            raise PluginLoadError(f"Module {obj.__name__} exposes no init function")
        if isinstance(entry, (Plugin, type)):
            return coerce_plugin(entry)
        if not callable(entry):
            raise PluginLoadError(f"init entry of {obj.__name__} is not callable")
        return FunctionPlugin(entry, _component_hook(obj) or _component_hook(entry))
    if callable(obj):
        return FunctionPlugin(obj, _component_hook(obj))
    raise PluginLoadError(f"Cannot build a plugin from {type(obj).__name__}")


def _component_hook(obj: object) -> Callable[[Dict[str, Any]], Optional[ComponentMap]] | None:
    for name in _COMPONENT_HOOKS:
        hook = getattr(obj, name, None)
        if callable(hook):
            return hook
    return None


__all__ = ["ComponentMap", "FunctionPlugin", "InitResult", "Plugin", "coerce_plugin"]
