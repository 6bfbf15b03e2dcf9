"""Helpers for classifying resource references and resolving storage paths."""

from __future__ import annotations

import posixpath
import re
from enum import Enum
from typing import Optional

ABSOLUTE_URL_PATTERN = re.compile(r"^//|://")
DATA_URL_PATTERN = re.compile(r"^\s*data:", re.IGNORECASE)
QUERY_OR_FRAGMENT_PATTERN = re.compile(r"[?#].*$", re.DOTALL)


class Classification(Enum):
    INLINEABLE = "inlineable"
    SKIP = "skip"


def classify(url: Optional[str]) -> Classification:
    """Decide whether a raw URL refers to a local resource that may be embedded.

    Empty values, absolute URLs (``scheme://`` or protocol-relative ``//``) and
    URLs that are already ``data:`` URIs are skipped. Everything else is taken
    as a path relative to the current base directory.
    """
    if not url:
        return Classification.SKIP
    if ABSOLUTE_URL_PATTERN.search(url) or DATA_URL_PATTERN.match(url):
        return Classification.SKIP
    return Classification.INLINEABLE


def is_inlineable(url: Optional[str]) -> bool:
    return classify(url) is Classification.INLINEABLE


def resolve_path(base_dir: str, ref: str) -> str:
    """Join ``ref`` onto ``base_dir`` and collapse ``.``/``..`` segments."""
    return posixpath.normpath(posixpath.join(base_dir or "/", ref.strip()))


def lookup_path(base_dir: str, ref: str) -> str:
    """Resolve ``ref`` to the storage key of the file it names."""
    bare = QUERY_OR_FRAGMENT_PATTERN.sub("", ref.strip())
    return resolve_path(base_dir, bare)


def anchor_link(base_dir: str, ref: str) -> str:
    """Build the same-origin query link that reopens ``ref`` through the server."""
    return "?" + resolve_path(base_dir, ref)


def parent_dir(path: str) -> str:
    return posixpath.dirname(path.rstrip("/")) or "/"
