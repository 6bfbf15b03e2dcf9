"""Data models used throughout the serving pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class Reference:
    """Resource reference discovered on a markup node."""

    node: Any
    attribute: str
    url: str


@dataclass(frozen=True)
class Replacement:
    """Deferred substitution of a stylesheet reference by its embedded form."""

    original: str
    embedded: str


@dataclass
class DirEntry:
    """Single entry of a storage directory listing."""

    path: str
    type: str
    modified: Optional[float] = None
    size: Optional[int] = None

    @property
    def is_dir(self) -> bool:
        return self.type == "DIRECTORY"


@dataclass
class Page:
    """Rendered response handed back to the serving layer."""

    status: int
    content_type: str
    body: str
