"""Content discovery and index builders."""

from .blog import BLOG_PATTERN, BlogIndexBuilder
from .links import transform_links
from .scanner import ContentScanner
from .search import SEARCH_PATTERN, SearchIndexBuilder

__all__ = [
    "BLOG_PATTERN",
    "BlogIndexBuilder",
    "ContentScanner",
    "SEARCH_PATTERN",
    "SearchIndexBuilder",
    "transform_links",
]
