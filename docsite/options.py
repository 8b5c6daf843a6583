"""Option resolution: turn raw options into the final build configuration."""

from __future__ import annotations

import copy
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import urlsplit

from .config import DEFAULTS, search_config, merge_options
from .content.blog import BlogIndexBuilder
from .content.scanner import ContentScanner
from .content.search import ContentTransform, SearchIndexBuilder
from .errors import ConfigError
from .logging import get_logger
from .plugins.loader import PluginLoader

_SCHEME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
_SLASHES = re.compile(r"/{2,}")


def split_base_url(base_url: Any) -> Tuple[Optional[str], str]:
    """Split a baseURL into ``(fqdn, path)``; fqdn is ``None`` for plain paths."""
    if not isinstance(base_url, str):
        raise ConfigError(f"baseURL must be a string, got {type(base_url).__name__}")
    if not _SCHEME_PATTERN.match(base_url):
        return None, base_url

    try:
        parts = urlsplit(base_url)
    except ValueError as exc:
        raise ConfigError(f"Malformed baseURL {base_url!r}: {exc}") from exc
    if parts.scheme.lower() not in {"http", "https"}:
        raise ConfigError(f"baseURL must use http or https, got {parts.scheme!r}")
    if not parts.netloc:
        raise ConfigError(f"baseURL {base_url!r} has no host")
    return parts.netloc, parts.path


def url_join(*parts: str) -> str:
    """Join URL path segments, collapsing duplicate slashes and dot segments."""
    joined = "/".join(part for part in parts if part)
    trailing = joined.endswith("/")
    segments: list[str] = []
    for segment in _SLASHES.sub("/", joined).split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)
    result = "/".join(segments)
    if joined.startswith("/"):
        result = "/" + result
    if trailing and not result.endswith("/"):
        result += "/"
    return result or "/"


def build_messages(options: Mapping[str, Any]) -> Dict[str, Any]:
    """Return status messages shown once a compile finishes."""
    if options.get("watch"):
        return {
            "mode": "development",
            "compilationSuccessInfo": {
                "messages": [
                    f"Your documentation is running here http://localhost:{options.get('port')}"
                ],
            },
        }
    return {
        "compilationSuccessInfo": {
            "messages": ["Documentation built!"],
            "notes": [
                f"Bundled documentation stored in '{options.get('dst')}'.",
                "Run `docsite --publish` to publish documentation to github-pages.",
            ],
        },
    }


class OptionResolver:
    """Merges defaults, config files and CLI options, then attaches derived indices.

    Stages run strictly in order: config merge, baseURL normalization and
    finalization, build messages, blog index, search index, plugins, and
    navigation rewrite. Plugins see the finalized baseURL and both indices.
    """

    def __init__(
        self,
        blog_builder: BlogIndexBuilder | None = None,
        search_builder: SearchIndexBuilder | None = None,
        plugin_loader: PluginLoader | None = None,
        transform: ContentTransform | None = None,
    ) -> None:
        self.blog_builder = blog_builder
        self.search_builder = search_builder
        self.plugin_loader = plugin_loader or PluginLoader()
        self.transform = transform
        self.logger = get_logger("options")

    async def resolve(self, raw_options: Mapping[str, Any] | None = None) -> Dict[str, Any]:
        raw = dict(raw_options or {})
        options = self._merge(raw)
        options = self._normalize_base_url(options)
        options.update(build_messages(options))

        src = Path(options["src"]).expanduser()
        scanner = self._scanner(options)
        blog_builder = self.blog_builder or BlogIndexBuilder(scanner=scanner)
        search_builder = self.search_builder or SearchIndexBuilder(scanner=scanner)

        options["blogPosts"] = await blog_builder.build(src)
        options["searchIndex"] = await search_builder.build(
            src, transform=self.transform, context=options
        )

        if options.get("plugins"):
            options["plugins"] = await self.plugin_loader.load(options["plugins"])

        nav_items = options.get("navItems")
        if nav_items:
            options["navItems"] = self._rewrite_nav_items(nav_items, options["baseURL"])

        self.logger.debug(
            "Resolved options: baseURL=%s fqdn=%s pages=%d",
            options["baseURL"],
            options.get("fqdn"),
            len(options["searchIndex"]),
        )
        return options

    def _merge(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        defaults = copy.deepcopy(DEFAULTS)
        src = raw.get("src", defaults["src"])
        found = search_config(src)
        file_config: Dict[str, Any] = {}
        if found is not None:
            self.logger.debug("Loaded configuration from %s", found.path)
            file_config = copy.deepcopy(found.config)
        return merge_options(defaults, file_config, raw)

    @staticmethod
    def _normalize_base_url(options: Dict[str, Any]) -> Dict[str, Any]:
        fqdn, base_path = split_base_url(options.get("baseURL") or "/")
        if fqdn:
            options["fqdn"] = fqdn
        elif options.get("fqdn") and options["fqdn"] in base_path:
            base_path = base_path.split(options["fqdn"], 1)[1]

        options["baseURL"] = "/" if options.get("watch") else url_join("/", base_path, "/")
        return options

    @staticmethod
    def _scanner(options: Mapping[str, Any]) -> ContentScanner:
        exclude = [options["dst"]] if options.get("dst") else []
        return ContentScanner(exclude=exclude)

    @staticmethod
    def _rewrite_nav_items(nav_items: Mapping[str, Any], base_url: str) -> Dict[str, Any]:
        rewritten: Dict[str, Any] = {}
        for key, target in nav_items.items():
            if not isinstance(target, str) or _SCHEME_PATTERN.match(target):
                rewritten[key] = target
                continue
            rewritten[key] = url_join(base_url, target)
        return rewritten


async def resolve_options(raw_options: Mapping[str, Any] | None = None) -> Dict[str, Any]:
    """Resolve ``raw_options`` with the default collaborators."""
    return await OptionResolver().resolve(raw_options)


__all__ = ["OptionResolver", "build_messages", "resolve_options", "split_base_url", "url_join"]
