from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

import pytest


class SiteBuilder:
    """Utility for writing markdown sources into a throwaway site directory."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "site"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries under the site root."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")

    def path(self, relative: str = "") -> Path:
        return self.root / relative if relative else self.root


@pytest.fixture
def site(tmp_path: Path) -> SiteBuilder:
    """Provide a site builder rooted at the pytest tmp_path."""
    return SiteBuilder(tmp_path)
