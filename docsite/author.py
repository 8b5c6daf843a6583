"""Publishing identity derived from project metadata."""

from __future__ import annotations

import json
import re
import tomllib
from pathlib import Path
from typing import Any, Mapping, Optional

from .logging import get_logger
from .models import Author

# "Name <email>" with optional quotes around the name; the name is optional.
_AUTHOR_PATTERN = re.compile(r'(?:"?([^"]*)"?\s)?(?:<?(.+@[^>]+)>?)')

_logger = get_logger("author")


def parse_author(value: Any) -> Author:
    """Normalize a mapping or ``"Name <email>"`` string into an :class:`Author`."""
    if isinstance(value, Author):
        return value
    if isinstance(value, Mapping):
        return Author(name=_as_str(value.get("name")), email=_as_str(value.get("email")))
    if isinstance(value, str):
        match = _AUTHOR_PATTERN.match(value.strip())
        if match:
            name = (match.group(1) or "").strip() or None
            return Author(name=name, email=match.group(2).strip())
        return Author(name=value.strip() or None)
    return Author()


def get_author(override: Any = None, root: Path | str | None = None) -> Author:
    """Return the publishing author.

    An explicit override wins. Otherwise the nearest ``pyproject.toml``
    (first entry of ``[project].authors``) or ``package.json`` (``author``)
    found walking upward from ``root`` is used.
    """
    if override:
        return parse_author(override)

    start = Path(root or Path.cwd()).expanduser().resolve()
    for directory in (start, *start.parents):
        pyproject = directory / "pyproject.toml"
        if pyproject.is_file():
            author = _author_from_pyproject(pyproject)
            if author is not None:
                return author
        package_json = directory / "package.json"
        if package_json.is_file():
            author = _author_from_package_json(package_json)
            if author is not None:
                return author
    return Author()


def _author_from_pyproject(path: Path) -> Optional[Author]:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        _logger.debug("Skipping %s: %s", path, exc)
        return None
    project = data.get("project")
    if not isinstance(project, dict):
        return None
    authors = project.get("authors")
    if isinstance(authors, list) and authors:
        return parse_author(authors[0])
    return None


def _author_from_package_json(path: Path) -> Optional[Author]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        _logger.debug("Skipping %s: %s", path, exc)
        return None
    if not isinstance(data, dict) or "author" not in data:
        return None
    return parse_author(data["author"])


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and str(value) else None


__all__ = ["get_author", "parse_author"]
