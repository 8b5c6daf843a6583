"""Build driver: watch-serve, one-shot build and publish paths."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, Optional

from .author import get_author
from .bundler import Bundler, BuildStats, SiteBundler, output_dir
from .errors import BundlerError, ConfigError, PublishError
from .git.publisher import DEFAULT_MESSAGE, Publisher, authenticated_repo_url
from .logging import get_logger, report_error
from .models import Author
from .options import OptionResolver
from .static_site import ShellStaticRenderer, StaticRenderer

STATS_FILENAME = "stats.json"

ServeFn = Callable[..., Awaitable[None]]


def check_publish_preconditions(config: Mapping[str, Any], author: Author) -> None:
    """Raise :class:`ConfigError` when publishing was requested without its prerequisites."""
    if not config.get("publish"):
        return
    if not config.get("githubURL"):
        raise ConfigError("Need to provide githubURL option to publish")
    if not author.name:
        raise ConfigError("Need author.name in package metadata to publish")
    if not author.email:
        raise ConfigError("Need author.email in package metadata to publish")


class BuildDriver:
    """Runs the bundler for a resolved configuration and handles its outcome."""

    def __init__(
        self,
        bundler: Optional[Bundler] = None,
        *,
        author: Optional[Author] = None,
        static_renderer: Optional[StaticRenderer] = None,
        publisher: Optional[Publisher] = None,
        serve: Optional[ServeFn] = None,
        stats_dir: Path | str | None = None,
    ) -> None:
        self.bundler = bundler or SiteBundler()
        self.author = author
        self.static_renderer = static_renderer or ShellStaticRenderer()
        self.publisher = publisher or Publisher()
        self._serve = serve
        self.stats_dir = Path(stats_dir) if stats_dir is not None else None
        self.logger = get_logger("driver")

    async def run(self, config: Mapping[str, Any]) -> bool:
        """Build (or serve) the site; return True on success."""
        author = self.author or get_author(config.get("author"))
        try:
            check_publish_preconditions(config, author)
        except ConfigError as exc:
            report_error(exc)
            return False

        if config.get("watch"):
            await self._watch(config)
            return True
        return await self._build_once(config, author)

    async def _watch(self, config: Mapping[str, Any]) -> None:
        serve = self._serve
        if serve is None:
            from .server import serve as serve_site

            serve = serve_site
        self.logger.info("Starting development server on port %s", config.get("port"))
        await serve(config, bundler=self.bundler)

    async def _build_once(self, config: Mapping[str, Any], author: Author) -> bool:
        try:
            stats = await self.bundler.run(config)
        except BundlerError as exc:
            report_error(exc)
            return False

        if stats.has_errors():
            for error in stats.errors:
                report_error(error)
            return False
        for warning in stats.warnings:
            self.logger.warning(warning)

        if config.get("json"):
            self._write_stats(stats)

        if config.get("static"):
            await self.static_renderer.render(config)

        info = config.get("compilationSuccessInfo") or {}
        for message in info.get("messages", []):
            self.logger.info(message)
        for note in info.get("notes", []):
            self.logger.info(note)

        if config.get("publish"):
            self._publish(config, author)
        return True

    def _write_stats(self, stats: BuildStats) -> Path:
        path = (self.stats_dir or Path.cwd()) / STATS_FILENAME
        path.write_text(json.dumps(stats.to_dict(), indent=2), encoding="utf-8")
        self.logger.info("Wrote `%s` to %s", STATS_FILENAME, path.parent)
        return path

    def _publish(self, config: Mapping[str, Any], author: Author) -> None:
        directory = output_dir(config)
        fqdn = config.get("fqdn")
        try:
            if fqdn:
                (directory / "CNAME").write_text(f"{fqdn}\n", encoding="utf-8")
            self.publisher.publish(
                directory,
                repo_url=authenticated_repo_url(str(config["githubURL"])),
                user=author.as_git_user(),
                message=DEFAULT_MESSAGE,
            )
        except (OSError, PublishError) as exc:
            report_error(exc)
            return
        self.logger.info("Documentation published to github-pages!")


async def build(
    raw_options: Mapping[str, Any] | None = None,
    *,
    resolver: Optional[OptionResolver] = None,
    driver: Optional[BuildDriver] = None,
) -> bool:
    """Resolve options and run the build; return True on success."""
    resolver = resolver or OptionResolver()
    try:
        config = await resolver.resolve(raw_options)
    except ConfigError as exc:
        report_error(exc)
        return False
    driver = driver or BuildDriver()
    return await driver.run(config)


__all__ = ["BuildDriver", "STATS_FILENAME", "build", "check_publish_preconditions"]
