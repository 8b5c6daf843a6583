"""Search index assembled from every markdown page."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional

from ..logging import get_logger, report_error
from ..models import SearchDocument
from .links import transform_links
from .scanner import ContentScanner

SEARCH_PATTERN = "**/*.md"

ContentTransform = Callable[[str, Path, Mapping[str, Any]], str]


class SearchIndexBuilder:
    """Builds the ``searchIndex`` option, one document per markdown page."""

    def __init__(
        self,
        scanner: ContentScanner | None = None,
        transform: ContentTransform | None = None,
    ) -> None:
        self.scanner = scanner or ContentScanner()
        self.transform = transform or transform_links
        self.logger = get_logger("content.search")

    async def build(
        self,
        source_root: Path | str,
        transform: ContentTransform | None = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> List[SearchDocument]:
        """Return transformed page bodies sorted by relative path."""
        root = Path(source_root).expanduser().resolve()
        apply = transform or self.transform
        shared: Mapping[str, Any] = context if context is not None else {"src": str(root)}

        documents: List[SearchDocument] = []
        for path in self.scanner.scan(root, [SEARCH_PATTERN]):
            content = self._read_page(path)
            documents.append(
                SearchDocument(
                    id=path.relative_to(root).as_posix(),
                    body=apply(content, path, shared),
                )
            )
        self.logger.debug("Indexed %d pages for search", len(documents))
        return sorted(documents, key=lambda document: document.id)

    @staticmethod
    def _read_page(path: Path) -> str:
        raw = path.read_bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            report_error(f"{path} is not valid UTF-8, indexing with replaced characters: {exc}")
            return raw.decode("utf-8", errors="replace")


__all__ = ["ContentTransform", "SEARCH_PATTERN", "SearchIndexBuilder"]
