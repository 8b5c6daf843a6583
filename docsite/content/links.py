"""Cross-document link rewriting for markdown pages."""

from __future__ import annotations

import posixpath
import re
from pathlib import Path
from typing import Any, Mapping

_LINK_PATTERN = re.compile(r"(?<!!)\[([^\]]*)\]\(([^)\s]+)((?:\s+\"[^\"]*\")?)\)")
_INDEX_STEMS = {"index", "readme"}


def page_route(rel_path: str) -> str:
    """Map a markdown path relative to the source root onto its site route."""
    stem, suffix = posixpath.splitext(rel_path)
    if suffix.lower() != ".md":
        return rel_path
    directory, name = posixpath.split(stem)
    if name.lower() in _INDEX_STEMS:
        return f"{directory}/" if directory else ""
    return f"{stem}.html"


def transform_links(content: str, path: Path | str, context: Mapping[str, Any]) -> str:
    """Rewrite relative ``*.md`` link targets into routes under ``baseURL``.

    External links, in-page anchors, images and targets escaping the source
    root are left as they are.
    """
    src = context.get("src")
    if not src:
        return content
    root = Path(src).expanduser().resolve()
    try:
        rel_dir = Path(path).resolve().parent.relative_to(root).as_posix()
    except ValueError:
        return content
    if rel_dir == ".":
        rel_dir = ""
    base_url = str(context.get("baseURL") or "/")

    def _rewrite(match: re.Match[str]) -> str:
        text, target, title = match.group(1), match.group(2), match.group(3)
        if "://" in target or target.startswith(("#", "/", "mailto:")):
            return match.group(0)
        target_path, _, anchor = target.partition("#")
        if not target_path.lower().endswith(".md"):
            return match.group(0)
        resolved = posixpath.normpath(posixpath.join(rel_dir, target_path))
        if resolved.startswith(".."):
            return match.group(0)
        route = base_url.rstrip("/") + "/" + page_route(resolved)
        if anchor:
            route = f"{route}#{anchor}"
        return f"[{text}]({route}{title})"

    return _LINK_PATTERN.sub(_rewrite, content)


__all__ = ["page_route", "transform_links"]
