"""Core data models shared across docsite components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

INIT_DATA_KEY = "_initData"
INJECTED_COMPONENTS_KEY = "_injectedComponents"


@dataclass
class BlogPost:
    """Descriptor for one blog post discovered under ``blog/``."""

    path: str
    birth: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"path": self.path}
        if self.birth is not None:
            payload["birth"] = self.birth
        return payload


@dataclass
class SearchDocument:
    """Searchable body of one markdown page."""

    id: str
    body: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "body": self.body}


@dataclass
class PluginDescriptor:
    """A declared plugin: kind tag, install path and its options block."""

    kind: str
    path: str
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_config(cls, value: Any) -> "PluginDescriptor":
        """Build a descriptor from a ``[kind, path, options]`` list or a mapping."""
        if isinstance(value, PluginDescriptor):
            return value
        if isinstance(value, Mapping):
            kind = value.get("kind")
            path = value.get("path")
            options = value.get("options")
        elif isinstance(value, (list, tuple)) and 2 <= len(value) <= 3:
            kind = value[0]
            path = value[1]
            options = value[2] if len(value) == 3 else None
        else:
            raise ValueError(f"Invalid plugin declaration: {value!r}")

        if not isinstance(kind, str) or not isinstance(path, str):
            raise ValueError(f"Plugin declaration needs a kind and a path: {value!r}")
        if options is None:
            options = {}
        if not isinstance(options, dict):
            raise ValueError(f"Plugin options for '{kind}' must be a mapping")
        return cls(kind=kind, path=path, options=options)

    @property
    def init_data(self) -> Any:
        return self.options.get(INIT_DATA_KEY)

    @property
    def injected_components(self) -> Optional[Dict[str, str]]:
        return self.options.get(INJECTED_COMPONENTS_KEY)

    def to_list(self) -> List[Any]:
        return [self.kind, self.path, self.options]


@dataclass(frozen=True)
class Author:
    """Publishing identity."""

    name: Optional[str] = None
    email: Optional[str] = None

    def as_git_user(self) -> Dict[str, str]:
        return {"name": self.name or "", "email": self.email or ""}


__all__ = [
    "Author",
    "BlogPost",
    "INIT_DATA_KEY",
    "INJECTED_COMPONENTS_KEY",
    "PluginDescriptor",
    "SearchDocument",
]
