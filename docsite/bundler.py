"""Bundler contract and the default site bundler."""

from __future__ import annotations

import json
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .content.scanner import ContentScanner
from .errors import BundlerError
from .logging import get_logger
from .models import BlogPost, PluginDescriptor, SearchDocument

SITE_DATA_FILENAME = "site-data.json"
SHELL_TEMPLATE = "index.html.j2"
_TEMPLATES_DIR = Path(__file__).with_name("templates")


@dataclass
class BuildStats:
    """Outcome of one bundler compile."""

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    assets: List[Dict[str, Any]] = field(default_factory=list)
    duration: float = 0.0

    def has_errors(self) -> bool:
        return bool(self.errors)

    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "assets": list(self.assets),
            "duration": self.duration,
        }


class Bundler(Protocol):
    """Turns a resolved configuration into build output under ``dst``."""

    async def run(self, config: Mapping[str, Any]) -> BuildStats:
        """Compile once; raise :class:`BundlerError` on fatal failures."""
        ...


def output_dir(config: Mapping[str, Any]) -> Path:
    """Directory holding the bundle: ``dst`` joined with the baseURL path."""
    base = str(config.get("baseURL") or "/").strip("/")
    dst = Path(config["dst"]).expanduser()
    return dst / base if base else dst


def create_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_shell(
    env: Environment,
    config: Mapping[str, Any],
    *,
    components: Sequence[Mapping[str, str]] = (),
    page: Optional[Mapping[str, str]] = None,
) -> str:
    """Render the HTML app shell for the site, or for one page of it."""
    base_url = str(config.get("baseURL") or "/")
    nav_items = config.get("navItems") or {}
    boot = {
        "baseURL": base_url,
        "title": config.get("title"),
        "dataURL": f"{base_url}{SITE_DATA_FILENAME}",
        "mode": config.get("mode"),
    }
    template = env.get_template(SHELL_TEMPLATE)
    return template.render(
        title=config.get("title") or "Documentation",
        base_url=base_url,
        boot=boot,
        nav_items=list(nav_items.items()),
        components=components,
        page=page,
    )


def component_entries(config: Mapping[str, Any]) -> List[Dict[str, str]]:
    """List injected plugin components with their bundle path and public URL."""
    base_url = str(config.get("baseURL") or "/")
    entries: List[Dict[str, str]] = []
    for plugin in config.get("plugins") or []:
        if not isinstance(plugin, PluginDescriptor) or not plugin.injected_components:
            continue
        for name, source in plugin.injected_components.items():
            rel_path = f"components/{plugin.kind}/{name}{Path(source).suffix}"
            entries.append(
                {
                    "name": name,
                    "plugin": plugin.kind,
                    "source": source,
                    "path": rel_path,
                    "src": f"{base_url}{rel_path}",
                }
            )
    return entries


class SiteBundler:
    """Copies the source tree and writes the app shell plus its data payload."""

    def __init__(self) -> None:
        self.env = create_environment()
        self.logger = get_logger("bundler")

    async def run(self, config: Mapping[str, Any]) -> BuildStats:
        started = time.perf_counter()
        src = Path(config["src"]).expanduser().resolve()
        if not src.is_dir():
            raise BundlerError(
                "Source directory not found",
                details=f"'{config['src']}' does not exist or is not a directory",
            )

        target = output_dir(config).resolve()
        stats = BuildStats()
        try:
            target.mkdir(parents=True, exist_ok=True)
            scanner = ContentScanner(exclude=[Path(config["dst"])])
            for path in scanner.scan(src, ["**"]):
                rel_path = path.relative_to(src).as_posix()
                destination = target / rel_path
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(path, destination)
                stats.assets.append({"name": rel_path, "size": destination.stat().st_size})

            components = self._copy_components(config, target, stats)
            payload = self._site_data(config, stats)
            self._emit(target, SITE_DATA_FILENAME, json.dumps(payload, indent=2, default=str), stats)
            shell = render_shell(self.env, config, components=components)
            self._emit(target, "index.html", shell, stats)
            # GitHub Pages serves 404.html for unknown routes, which gives client-side routing a chance.
            self._emit(target, "404.html", shell, stats)
            script = (_TEMPLATES_DIR / "app.js").read_text(encoding="utf-8")
            self._emit(target, "app.js", script, stats)
        except OSError as exc:
            raise BundlerError(f"Failed to write bundle to {target}", details=str(exc)) from exc

        stats.duration = round(time.perf_counter() - started, 4)
        self.logger.debug("Bundled %d assets into %s", len(stats.assets), target)
        return stats

    def _copy_components(
        self, config: Mapping[str, Any], target: Path, stats: BuildStats
    ) -> List[Dict[str, str]]:
        components: List[Dict[str, str]] = []
        for entry in component_entries(config):
            source_path = Path(entry["source"])
            if not source_path.is_file():
                stats.errors.append(
                    f"Component '{entry['name']}' of plugin '{entry['plugin']}' not found at {source_path}"
                )
                continue
            destination = target / entry["path"]
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source_path, destination)
            stats.assets.append({"name": entry["path"], "size": destination.stat().st_size})
            components.append(entry)
        return components

    @staticmethod
    def _site_data(config: Mapping[str, Any], stats: BuildStats) -> Dict[str, Any]:
        blog_posts = config.get("blogPosts")
        search_index = config.get("searchIndex") or []
        plugins: List[Dict[str, Any]] = []
        for plugin in config.get("plugins") or []:
            if not isinstance(plugin, PluginDescriptor):
                continue
            init_data = plugin.init_data
            try:
                json.dumps(init_data)
            except (TypeError, ValueError):
                stats.warnings.append(
                    f"Init data of plugin '{plugin.kind}' is not JSON serializable; storing its repr"
                )
                init_data = repr(init_data)
            plugins.append({"kind": plugin.kind, "initData": init_data})

        if blog_posts:
            undated = [post.path for post in blog_posts if post.birth is None]
            if undated:
                stats.warnings.append(f"Blog posts without commit history: {', '.join(undated)}")

        return {
            "title": config.get("title"),
            "baseURL": config.get("baseURL"),
            "navItems": config.get("navItems") or {},
            "blogPosts": None if blog_posts is None else [_as_dict(post) for post in blog_posts],
            "searchIndex": [_as_dict(document) for document in search_index],
            "plugins": plugins,
        }

    @staticmethod
    def _emit(target: Path, name: str, content: str, stats: BuildStats) -> None:
        path = target / name
        path.write_text(content, encoding="utf-8")
        stats.assets.append({"name": name, "size": path.stat().st_size})


def _as_dict(item: Any) -> Any:
    if isinstance(item, (BlogPost, SearchDocument)):
        return item.to_dict()
    return item


__all__ = [
    "BuildStats",
    "Bundler",
    "SITE_DATA_FILENAME",
    "SiteBundler",
    "component_entries",
    "create_environment",
    "output_dir",
    "render_shell",
]
