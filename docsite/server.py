"""Development server used in watch mode."""

from __future__ import annotations

import asyncio
import webbrowser
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Mapping, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles

from .bundler import Bundler, output_dir
from .logging import get_logger, report_error
from .errors import BundlerError

_logger = get_logger("server")

INDEX_FILE = "index.html"


def wants_history_fallback(method: str, path: str, accept: str) -> bool:
    """Return True for browser navigations that the client-side router should handle."""
    if method not in {"GET", "HEAD"}:
        return False
    if "text/html" not in accept and "*/*" not in accept:
        return False
    last_segment = path.rsplit("/", 1)[-1]
    return "." not in last_segment


def create_app(
    config: Mapping[str, Any],
    *,
    bundler: Optional[Bundler] = None,
    poll_interval: float = 1.0,
) -> FastAPI:
    """Create the app serving the bundle output with a history fallback."""
    root = output_dir(config)
    root.mkdir(parents=True, exist_ok=True)
    watcher: Dict[str, Optional[asyncio.Task[None]]] = {"task": None}

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if bundler is not None:
            await _compile(bundler, config)
            watcher["task"] = asyncio.create_task(
                _watch_sources(bundler, config, poll_interval)
            )
        yield
        task = watcher["task"]
        if task is not None:
            task.cancel()

    app = FastAPI(title="docsite dev server", lifespan=lifespan)

    @app.middleware("http")
    async def history_fallback(request: Request, call_next: Callable[[Request], Awaitable[Any]]) -> Any:
        path = request.url.path
        accept = request.headers.get("accept", "")
        if wants_history_fallback(request.method, path, accept) and not (root / path.lstrip("/")).is_file():
            if not (root / path.lstrip("/") / INDEX_FILE).is_file():
                request.scope["path"] = f"/{INDEX_FILE}"
        return await call_next(request)

    app.mount("/", StaticFiles(directory=str(root), html=True, check_dir=False), name="site")
    return app


async def serve(
    config: Mapping[str, Any],
    *,
    bundler: Optional[Bundler] = None,
    on_listening: Optional[Callable[[str], None]] = None,
) -> None:
    """Serve until the process is terminated."""
    port = int(config.get("port") or 8080)
    app = create_app(config, bundler=bundler)
    server = uvicorn.Server(uvicorn.Config(app, host="127.0.0.1", port=port, log_level="warning"))
    url = f"http://localhost:{port}"

    async def _announce() -> None:
        while not server.started:
            if server.should_exit:
                return
            await asyncio.sleep(0.1)
        for message in (config.get("compilationSuccessInfo") or {}).get("messages", []):
            _logger.info(message)
        if on_listening is not None:
            on_listening(url)
        elif config.get("open"):
            open_browser(url)

    await asyncio.gather(server.serve(), _announce())


def open_browser(url: str) -> None:
    if not webbrowser.open(url):
        _logger.info("Open %s in your browser", url)


async def _compile(bundler: Bundler, config: Mapping[str, Any]) -> None:
    try:
        stats = await bundler.run(config)
    except BundlerError as exc:
        report_error(exc)
        return
    for error in stats.errors:
        report_error(error)
    for warning in stats.warnings:
        _logger.warning(warning)


def _snapshot(src: Path, exclude: Path) -> Dict[str, int]:
    snapshot: Dict[str, int] = {}
    for path in src.rglob("*"):
        if not path.is_file() or exclude in path.parents:
            continue
        snapshot[str(path)] = path.stat().st_mtime_ns
    return snapshot


async def _watch_sources(bundler: Bundler, config: Mapping[str, Any], interval: float) -> None:
    src = Path(config["src"]).expanduser().resolve()
    exclude = Path(config["dst"]).expanduser().resolve()
    previous = _snapshot(src, exclude)
    while True:
        await asyncio.sleep(interval)
        current = _snapshot(src, exclude)
        if current != previous:
            _logger.info("Change detected in %s, rebuilding", src)
            await _compile(bundler, config)
            previous = current


__all__ = ["create_app", "open_browser", "serve", "wants_history_fallback"]
