"""Glob-based discovery of content files under a source root."""

from __future__ import annotations

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
}


@lru_cache(maxsize=64)
def _compile_pattern(pattern: str) -> re.Pattern[str]:
    """Translate a ``**``-aware glob into a regex over posix relative paths."""
    parts: List[str] = []
    index = 0
    while index < len(pattern):
        char = pattern[index]
        if pattern.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
            continue
        if pattern.startswith("**", index):
            parts.append(".*")
            index += 2
            continue
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(char))
        index += 1
    return re.compile("".join(parts) + r"\Z")


def matches(rel_path: str, pattern: str) -> bool:
    return _compile_pattern(pattern).match(rel_path) is not None


class ContentScanner:
    """Finds files under a root whose relative paths match glob patterns.

    Dot-prefixed entries and tooling directories are skipped, as is any
    directory listed in ``exclude`` (typically the build output directory
    when it lives inside the source tree).
    """

    def __init__(self, exclude: Iterable[Path | str] = ()) -> None:
        self._exclude = {Path(path).expanduser().resolve() for path in exclude}

    def scan(self, root: Path | str, patterns: Sequence[str]) -> List[Path]:
        """Return absolute paths of matching files, sorted by relative path."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.is_dir():
            return []

        found: List[Path] = []
        for path in self._iter_files(root_path):
            rel_path = path.relative_to(root_path).as_posix()
            if any(matches(rel_path, pattern) for pattern in patterns):
                found.append(path)
        found.sort(key=lambda item: item.relative_to(root_path).as_posix())
        return found

    def _iter_files(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            dirnames[:] = sorted(
                name
                for name in dirnames
                if name not in _EXCLUDED_DIRS
                and not name.startswith(".")
                and (current_dir / name).resolve() not in self._exclude
            )
            for filename in filenames:
                if filename.startswith("."):
                    continue
                yield current_dir / filename


__all__ = ["ContentScanner", "matches"]
