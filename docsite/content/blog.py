"""Blog post index assembled from content files and git history."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

from ..errors import ContentQueryError
from ..git.history import HistoryResolver
from ..logging import get_logger, report_error
from ..models import BlogPost
from .scanner import ContentScanner

BLOG_PATTERN = "blog/**/*.md"


def _birth_sort_key(post: BlogPost) -> tuple[int, int]:
    # Posts without a birth date sort after every dated post.
    if post.birth is None:
        return (1, 0)
    return (0, post.birth)


class BlogIndexBuilder:
    """Builds the ``blogPosts`` option from ``blog/**/*.md`` files."""

    def __init__(
        self,
        scanner: ContentScanner | None = None,
        history: HistoryResolver | None = None,
    ) -> None:
        self.scanner = scanner or ContentScanner()
        self.history = history or HistoryResolver()
        self.logger = get_logger("content.blog")

    async def build(self, source_root: Path | str) -> Optional[List[BlogPost]]:
        """Return posts sorted by birth, or ``None`` when there is no blog content."""
        root = Path(source_root).expanduser().resolve()
        files = self.scanner.scan(root, [BLOG_PATTERN])
        if not files:
            self.logger.debug("No blog posts found under %s", root)
            return None

        posts = await asyncio.gather(*(self._describe(root, path) for path in files))
        self.logger.debug("Indexed %d blog posts", len(posts))
        return sorted(posts, key=_birth_sort_key)

    async def _describe(self, root: Path, path: Path) -> BlogPost:
        rel_path = path.relative_to(root).as_posix()
        try:
            birth = await self.history.birth_timestamp(path)
        except ContentQueryError as exc:
            report_error(exc)
            return BlogPost(path=rel_path)
        return BlogPost(path=rel_path, birth=birth)


__all__ = ["BLOG_PATTERN", "BlogIndexBuilder"]
