"""Render the bundle into a static tree with one HTML entry per page."""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Any, Dict, List, Mapping, Protocol

from .bundler import component_entries, create_environment, output_dir, render_shell
from .content.links import page_route
from .logging import get_logger
from .models import SearchDocument


class StaticRenderer(Protocol):
    async def render(self, config: Mapping[str, Any]) -> List[Path]:
        ...


class ShellStaticRenderer:
    """Writes a page-specific copy of the app shell at every page route.

    Static hosts can then serve deep links such as ``/docs/guide/setup.html``
    without a history-fallback server.
    """

    def __init__(self) -> None:
        self.env = create_environment()
        self.logger = get_logger("static")

    async def render(self, config: Mapping[str, Any]) -> List[Path]:
        target = output_dir(config)
        components = [entry for entry in component_entries(config) if (target / entry["path"]).is_file()]
        written: List[Path] = []
        for route, page_id in self._pages(config).items():
            if not route or route.endswith("/"):
                path = target / route / "index.html"
            else:
                path = target / route
            title = posixpath.splitext(posixpath.basename(page_id))[0].replace("-", " ").title()
            html = render_shell(
                self.env, config, components=components, page={"id": page_id, "title": title}
            )
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(html, encoding="utf-8")
            written.append(path)
        self.logger.info("Rendered %d static pages into %s", len(written), target)
        return written

    def _pages(self, config: Mapping[str, Any]) -> Dict[str, str]:
        """Map each route to the page rendered there; ``index.md`` beats ``README.md``."""
        pages: Dict[str, str] = {}
        for document in config.get("searchIndex") or []:
            page_id = document.id if isinstance(document, SearchDocument) else document["id"]
            route = page_route(page_id)
            existing = pages.get(route)
            if existing is not None:
                if _is_index_page(existing):
                    page_id, existing = existing, page_id
                self.logger.warning(
                    "Pages %s and %s share route '%s'; rendering %s", existing, page_id, route, page_id
                )
            pages[route] = page_id
        return pages


def _is_index_page(page_id: str) -> bool:
    stem = posixpath.splitext(posixpath.basename(page_id))[0]
    return stem.lower() == "index"


async def create_static_site(config: Mapping[str, Any]) -> List[Path]:
    return await ShellStaticRenderer().render(config)


__all__ = ["ShellStaticRenderer", "StaticRenderer", "create_static_site"]
