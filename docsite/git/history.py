"""Creation timestamps derived from git history."""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, List, Sequence

from ..errors import ContentQueryError

GitRunner = Callable[..., Awaitable[str]]


class HistoryResolver:
    """Answers "when was this file first committed" via ``git log``."""

    def __init__(self, runner: GitRunner | None = None) -> None:
        self._runner = runner or self._default_runner

    async def commit_dates(self, path: Path | str) -> List[datetime]:
        """Return author dates of commits touching ``path``, newest first."""
        file_path = Path(path)
        args = ["git", "log", "--format=%aI", "--", file_path.name]
        try:
            output = await self._runner(args, cwd=file_path.parent)
        except (OSError, RuntimeError) as exc:
            raise ContentQueryError(str(file_path), str(exc)) from exc

        dates: List[datetime] = []
        for line in output.splitlines():
            stamp = line.strip()
            if not stamp:
                continue
            try:
                dates.append(datetime.fromisoformat(stamp))
            except ValueError as exc:
                raise ContentQueryError(str(file_path), f"unexpected date {stamp!r}") from exc
        return dates

    async def birth_timestamp(self, path: Path | str) -> int:
        """Return the earliest commit date for ``path`` in epoch milliseconds."""
        dates = await self.commit_dates(path)
        if not dates:
            raise ContentQueryError(str(path), "file has no commit history")
        # git log lists newest first, so the oldest entry is the last one.
        return int(dates[-1].timestamp() * 1000)

    @staticmethod
    async def _default_runner(args: Sequence[str], *, cwd: Path) -> str:
        process = await asyncio.create_subprocess_exec(
            *args,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise RuntimeError(message or f"git exited with status {process.returncode}")
        return stdout.decode("utf-8", errors="replace")


__all__ = ["GitRunner", "HistoryResolver"]
