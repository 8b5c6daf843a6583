"""Exception types raised across the build pipeline."""

from __future__ import annotations

from typing import Any


class DocsiteError(RuntimeError):
    """Base class for docsite failures."""


class ConfigError(DocsiteError):
    """Raised for malformed options or missing publish preconditions."""


class ContentQueryError(DocsiteError):
    """Raised when version-control history cannot be read for a file."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"Unable to read history for {path}: {message}")
        self.path = path


class PluginLoadError(DocsiteError):
    """Raised when a plugin exposes no usable init entry point."""


class BundlerError(DocsiteError):
    """Fatal bundler failure, optionally carrying a detail payload."""

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.details = details


class PublishError(DocsiteError):
    """Raised when pushing the built site to the hosting branch fails."""


__all__ = [
    "BundlerError",
    "ConfigError",
    "ContentQueryError",
    "DocsiteError",
    "PluginLoadError",
    "PublishError",
]
