"""Publishing of the built site to a hosting branch."""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Iterable, Mapping

from ..errors import PublishError
from ..logging import get_logger

DEFAULT_BRANCH = "gh-pages"
DEFAULT_MESSAGE = ":memo: Update Documentation [skip ci]"
TOKEN_ENV = "GH_TOKEN"


def authenticated_repo_url(github_url: str, token: str | None = None) -> str:
    """Return an https push URL embedding the token from ``GH_TOKEN``."""
    if token is None:
        token = os.environ.get(TOKEN_ENV, "")
    if "//" in github_url:
        github_url = github_url.split("//", 1)[1]
    return f"https://username:{token}@{github_url}"


class Publisher:
    """Force-pushes a directory as the single commit of a hosting branch."""

    def __init__(self, runner: Callable[..., str] | None = None) -> None:
        self._runner = runner or self._default_runner
        self.logger = get_logger("publisher")

    def publish(
        self,
        directory: Path | str,
        *,
        repo_url: str,
        user: Mapping[str, str],
        message: str = DEFAULT_MESSAGE,
        branch: str = DEFAULT_BRANCH,
    ) -> None:
        """Commit the contents of ``directory`` and push them to ``branch``."""
        source = Path(directory)
        if not source.is_dir():
            raise PublishError(f"Publish directory not found: {source}")

        env = os.environ.copy()
        env["GIT_AUTHOR_NAME"] = user.get("name", "")
        env["GIT_AUTHOR_EMAIL"] = user.get("email", "")
        env["GIT_COMMITTER_NAME"] = env["GIT_AUTHOR_NAME"]
        env["GIT_COMMITTER_EMAIL"] = env["GIT_AUTHOR_EMAIL"]

        with tempfile.TemporaryDirectory(prefix="docsite-publish-") as workdir:
            work = Path(workdir)
            shutil.copytree(source, work, dirs_exist_ok=True)
            try:
                self._run(["git", "init", "--quiet"], cwd=work, env=env)
                self._run(["git", "checkout", "--orphan", branch], cwd=work, env=env)
                self._run(["git", "add", "--all"], cwd=work, env=env)
                self._run(["git", "commit", "--quiet", "-m", message], cwd=work, env=env)
                self._run(["git", "push", "--force", repo_url, f"{branch}:{branch}"], cwd=work, env=env)
            except (OSError, subprocess.CalledProcessError) as exc:
                raise PublishError(f"Failed to publish {source}: {_redact(str(exc), repo_url)}") from None

        self.logger.info("Published %s to branch %s", source, branch)

    # ------------------------------------------------------------------
    # Helpers

    def _run(
        self,
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        return self._runner(args, cwd=cwd, env=env, capture_output=capture_output)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        env: dict[str, str] | None = None,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            env=env,
            check=True,
            text=True,
            capture_output=capture_output,
        )
        if capture_output:
            return completed.stdout
        return ""


def _redact(text: str, repo_url: str) -> str:
    # Never surface the token-bearing URL in operator-facing errors.
    return text.replace(repo_url, "<repository>")


__all__ = ["DEFAULT_MESSAGE", "Publisher", "TOKEN_ENV", "authenticated_repo_url"]
