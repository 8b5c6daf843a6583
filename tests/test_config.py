"""Tests for docsite.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from docsite.config import DEFAULTS, ConfigError, load_config_file, merge_options, search_config


def test_search_config_returns_none_without_files(tmp_path: Path) -> None:
    assert search_config(tmp_path) is None


def test_search_config_walks_upward_from_source_root(tmp_path: Path) -> None:
    (tmp_path / ".docsiterc.yml").write_text(
        """
title: Handbook
baseURL: /handbook
navItems:
  Home: index.html
""",
        encoding="utf-8",
    )
    src = tmp_path / "docs" / "nested"
    src.mkdir(parents=True)

    found = search_config(src)

    assert found is not None
    assert found.path == (tmp_path / ".docsiterc.yml").resolve()
    assert found.config == {
        "title": "Handbook",
        "baseURL": "/handbook",
        "navItems": {"Home": "index.html"},
    }


def test_search_config_prefers_nearest_directory(tmp_path: Path) -> None:
    (tmp_path / ".docsiterc.json").write_text('{"title": "outer"}', encoding="utf-8")
    inner = tmp_path / "docs"
    inner.mkdir()
    (inner / "docsite.config.yaml").write_text("title: inner\n", encoding="utf-8")

    found = search_config(inner)

    assert found is not None
    assert found.config["title"] == "inner"


def test_search_config_reads_pyproject_tool_table(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
[project]
name = "example"

[tool.docsite]
dst = "public"
port = 9000
""",
        encoding="utf-8",
    )

    found = search_config(tmp_path)

    assert found is not None
    assert found.config == {"dst": "public", "port": 9000}


def test_search_config_skips_pyproject_without_table(tmp_path: Path) -> None:
    (tmp_path / ".docsiterc").write_text("title: rc\n", encoding="utf-8")
    project = tmp_path / "project"
    project.mkdir()
    (project / "pyproject.toml").write_text("[project]\nname = 'x'\n", encoding="utf-8")

    found = search_config(project)

    assert found is not None
    assert found.config == {"title": "rc"}


def test_load_config_file_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / ".docsiterc.yml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config_file(path)


def test_load_config_file_reports_parse_errors(tmp_path: Path) -> None:
    path = tmp_path / ".docsiterc.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError, match=".docsiterc.json"):
        load_config_file(path)


def test_load_config_file_treats_blank_file_as_empty(tmp_path: Path) -> None:
    path = tmp_path / ".docsiterc"
    path.write_text("\n\n", encoding="utf-8")

    assert load_config_file(path) == {}


def test_merge_options_later_layers_win() -> None:
    merged = merge_options(DEFAULTS, {"port": 1, "title": "file"}, None, {"port": 2})

    assert merged["port"] == 2
    assert merged["title"] == "file"
    assert merged["dst"] == DEFAULTS["dst"]
