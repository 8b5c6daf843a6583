"""Tests for the watch-mode development server."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from docsite.bundler import BuildStats
from docsite.server import create_app, wants_history_fallback

HTML = {"accept": "text/html,application/xhtml+xml"}


@pytest.fixture
def dist(tmp_path: Path) -> Path:
    root = tmp_path / "dist"
    (root / "guide").mkdir(parents=True)
    (root / "index.html").write_text("<html>shell</html>", encoding="utf-8")
    (root / "app.js").write_text("console.log(1);", encoding="utf-8")
    (root / "guide" / "index.html").write_text("<html>guide</html>", encoding="utf-8")
    return root


@pytest.fixture
def client(tmp_path: Path, dist: Path) -> TestClient:
    config = {"src": str(tmp_path / "src"), "dst": str(dist), "baseURL": "/"}
    return TestClient(create_app(config))


@pytest.mark.parametrize(
    ("method", "path", "accept", "expected"),
    [
        ("GET", "/guide/setup", "text/html", True),
        ("HEAD", "/guide/setup", "*/*", True),
        ("GET", "/guide/setup", "application/json", False),
        ("POST", "/guide/setup", "text/html", False),
        ("GET", "/app.js", "text/html", False),
    ],
)
def test_wants_history_fallback(method: str, path: str, accept: str, expected: bool) -> None:
    assert wants_history_fallback(method, path, accept) is expected


def test_client_route_falls_back_to_index(client: TestClient) -> None:
    response = client.get("/guide/setup", headers=HTML)

    assert response.status_code == 200
    assert response.text == "<html>shell</html>"


def test_existing_files_are_served(client: TestClient) -> None:
    response = client.get("/app.js", headers=HTML)

    assert response.status_code == 200
    assert response.text == "console.log(1);"


def test_directory_index_is_not_rewritten(client: TestClient) -> None:
    response = client.get("/guide/", headers=HTML)

    assert response.status_code == 200
    assert response.text == "<html>guide</html>"


def test_missing_asset_is_not_found(client: TestClient) -> None:
    assert client.get("/missing.js", headers=HTML).status_code == 404


def test_non_html_requests_do_not_fall_back(client: TestClient) -> None:
    assert client.get("/api/pages", headers={"accept": "application/json"}).status_code == 404


def test_startup_compiles_with_bundler(tmp_path: Path) -> None:
    src = tmp_path / "src"
    src.mkdir()
    dist = tmp_path / "dist"

    class WritingBundler:
        def __init__(self) -> None:
            self.calls = 0

        async def run(self, config):
            self.calls += 1
            (dist / "index.html").write_text("<html>built</html>", encoding="utf-8")
            return BuildStats()

    bundler = WritingBundler()
    app = create_app({"src": str(src), "dst": str(dist), "baseURL": "/"}, bundler=bundler)

    with TestClient(app) as client:
        response = client.get("/any/route", headers=HTML)

    assert bundler.calls == 1
    assert response.text == "<html>built</html>"
