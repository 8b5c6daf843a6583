"""Tests for docsite.options."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from docsite.content.blog import BlogIndexBuilder
from docsite.errors import ConfigError
from docsite.models import INIT_DATA_KEY, BlogPost, PluginDescriptor
from docsite.options import OptionResolver, build_messages, split_base_url, url_join


class StaticHistory:
    """History double returning a fixed birth per relative file name."""

    def __init__(self, births: dict[str, int]) -> None:
        self.births = births

    async def birth_timestamp(self, path: Path) -> int:
        return self.births[path.name]


def _resolve(options: dict, resolver: OptionResolver | None = None) -> dict:
    return asyncio.run((resolver or OptionResolver()).resolve(options))


@pytest.mark.parametrize(
    ("base_url", "fqdn", "path"),
    [
        ("https://example.com/docs", "example.com", "/docs"),
        ("http://example.com", "example.com", ""),
        ("https://docs.example.org:8443/a/b/", "docs.example.org:8443", "/a/b/"),
        ("/plain/path", None, "/plain/path"),
        ("relative", None, "relative"),
    ],
)
def test_split_base_url(base_url: str, fqdn: str | None, path: str) -> None:
    assert split_base_url(base_url) == (fqdn, path)


@pytest.mark.parametrize("base_url", ["ftp://example.com/docs", "https:///docs", 42])
def test_split_base_url_rejects_malformed_values(base_url: object) -> None:
    with pytest.raises(ConfigError):
        split_base_url(base_url)


def test_url_join_normalizes_slashes() -> None:
    assert url_join("/", "docs", "/") == "/docs/"
    assert url_join("/", "/docs/", "/") == "/docs/"
    assert url_join("/", "", "/") == "/"
    assert url_join("/docs/", "index.html") == "/docs/index.html"
    assert url_join("/docs/", "/guide//setup.html") == "/docs/guide/setup.html"
    assert url_join("/docs/", "./a/../b/") == "/docs/b/"


def test_build_messages_for_watch_mode() -> None:
    messages = build_messages({"watch": True, "port": 8080})

    assert messages["mode"] == "development"
    assert messages["compilationSuccessInfo"]["messages"] == [
        "Your documentation is running here http://localhost:8080"
    ]


def test_build_messages_for_one_shot_build() -> None:
    messages = build_messages({"watch": False, "dst": "out"})

    assert "mode" not in messages
    info = messages["compilationSuccessInfo"]
    assert info["messages"] == ["Documentation built!"]
    assert "Bundled documentation stored in 'out'." in info["notes"]


def test_resolve_end_to_end_example(site) -> None:
    site.write({"a.md": "# A\n", "b.md": "# B\n"})

    options = _resolve(
        {"src": str(site.path()), "baseURL": "https://example.com/docs", "watch": False}
    )

    assert options["fqdn"] == "example.com"
    assert options["baseURL"] == "/docs/"
    assert options["blogPosts"] is None
    assert [document.id for document in options["searchIndex"]] == ["a.md", "b.md"]


@pytest.mark.parametrize(
    "base_url", ["https://example.com/docs", "http://example.com", "https://a.b/c/d/"]
)
def test_resolved_base_url_never_contains_scheme_or_host(site, base_url: str) -> None:
    options = _resolve({"src": str(site.path()), "baseURL": base_url})

    assert "://" not in options["baseURL"]
    assert options["fqdn"] not in options["baseURL"]
    assert options["baseURL"].startswith("/") and options["baseURL"].endswith("/")


@pytest.mark.parametrize("base_url", ["/docs", "https://example.com/docs", "/"])
def test_watch_mode_forces_root_base_url(site, base_url: str) -> None:
    options = _resolve({"src": str(site.path()), "baseURL": base_url, "watch": True})

    assert options["baseURL"] == "/"
    assert options["mode"] == "development"


def test_explicit_fqdn_is_stripped_from_base_url(site) -> None:
    options = _resolve(
        {"src": str(site.path()), "baseURL": "docs.example.com/guide", "fqdn": "docs.example.com"}
    )

    assert options["baseURL"] == "/guide/"
    assert options["fqdn"] == "docs.example.com"


def test_malformed_base_url_raises_config_error(site) -> None:
    with pytest.raises(ConfigError):
        _resolve({"src": str(site.path()), "baseURL": "ftp://example.com/docs"})


def test_nav_items_are_prefixed_with_base_url(site) -> None:
    raw_nav = {"home": "index.html", "guide": "guide/setup.html", "repo": "https://github.com/x/y"}

    options = _resolve({"src": str(site.path()), "baseURL": "/docs/", "navItems": raw_nav})

    assert options["navItems"] == {
        "home": "/docs/index.html",
        "guide": "/docs/guide/setup.html",
        "repo": "https://github.com/x/y",
    }
    assert raw_nav["home"] == "index.html"


def test_config_file_values_are_overridden_by_raw_options(site) -> None:
    site.write({".docsiterc.yml": "title: From file\nport: 9000\ndst: from-file\n"})

    options = _resolve({"src": str(site.path()), "port": 7000})

    assert options["title"] == "From file"
    assert options["dst"] == "from-file"
    assert options["port"] == 7000


def test_unknown_options_pass_through(site) -> None:
    options = _resolve({"src": str(site.path()), "theme": "dark"})

    assert options["theme"] == "dark"


def test_raw_options_are_not_mutated(site) -> None:
    raw = {"src": str(site.path()), "baseURL": "https://example.com/docs"}

    _resolve(raw)

    assert raw == {"src": str(site.path()), "baseURL": "https://example.com/docs"}


def test_blog_posts_attached_in_birth_order(site) -> None:
    site.write({"blog/new.md": "new", "blog/old.md": "old", "index.md": "home"})
    history = StaticHistory({"new.md": 2000, "old.md": 1000})
    resolver = OptionResolver(blog_builder=BlogIndexBuilder(history=history))

    options = _resolve({"src": str(site.path())}, resolver)

    assert options["blogPosts"] == [
        BlogPost(path="blog/old.md", birth=1000),
        BlogPost(path="blog/new.md", birth=2000),
    ]
    assert [document.id for document in options["searchIndex"]] == [
        "blog/new.md",
        "blog/old.md",
        "index.md",
    ]


def test_search_index_skips_output_directory_inside_source(site) -> None:
    site.write({"index.md": "home", "dist/copied.md": "stale copy"})

    options = _resolve({"src": str(site.path()), "dst": str(site.path("dist"))})

    assert [document.id for document in options["searchIndex"]] == ["index.md"]


def test_page_with_invalid_utf8_does_not_abort_resolution(site) -> None:
    site.write({"a.md": "first"})
    site.path("b.md").write_bytes(b"caf\xe9 menu")

    options = _resolve({"src": str(site.path())})

    assert [document.id for document in options["searchIndex"]] == ["a.md", "b.md"]


def test_plugins_see_finalized_options_and_replace_declarations(site, tmp_path: Path) -> None:
    plugin_dir = tmp_path / "plugin"
    plugin_dir.mkdir()
    (plugin_dir / "init.py").write_text(
        "def init(options):\n    return options['label'].upper()\n",
        encoding="utf-8",
    )

    options = _resolve(
        {
            "src": str(site.path()),
            "baseURL": "/docs",
            "plugins": [["greeter", str(plugin_dir), {"label": "hi"}]],
        }
    )

    (plugin,) = options["plugins"]
    assert isinstance(plugin, PluginDescriptor)
    assert plugin.options[INIT_DATA_KEY] == "HI"


def test_plugin_loader_not_invoked_without_plugins(site) -> None:
    class ExplodingLoader:
        async def load(self, declarations):  # pragma: no cover - must not run
            raise AssertionError("loader should not be called")

    resolver = OptionResolver(plugin_loader=ExplodingLoader())  # type: ignore[arg-type]

    options = _resolve({"src": str(site.path())}, resolver)

    assert options["plugins"] == []
