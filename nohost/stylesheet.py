"""Embed resources referenced through ``url(...)`` tokens in CSS text."""

from __future__ import annotations

import logging
import re
from typing import Dict, List

from .content import guess_mime, to_data_url
from .errors import ReadError, StylesheetFetchError
from .models import Replacement
from .storage import Storage
from .utils import is_inlineable, lookup_path, parent_dir

logger = logging.getLogger("nohost")

CSS_URL_PATTERN = re.compile(r"""url\(\s*(['"]?)([^'"\)]+?)\s*\1\s*\)""")


def collect_references(css: str) -> List[str]:
    """Return the distinct inlineable ``url()`` references in first-seen order."""
    seen: List[str] = []
    for match in CSS_URL_PATTERN.finditer(css):
        ref = match.group(2)
        if is_inlineable(ref) and ref not in seen:
            seen.append(ref)
    return seen


async def fetch_replacements(
    refs: List[str],
    css_path: str,
    storage: Storage,
) -> List[Replacement]:
    """Fetch every reference in order; any failure aborts the whole batch."""
    base_dir = parent_dir(css_path)
    replacements: List[Replacement] = []
    for ref in refs:
        path = lookup_path(base_dir, ref)
        try:
            data = await storage.read_file(path)
        except ReadError as exc:
            raise StylesheetFetchError(css_path, ref) from exc
        replacements.append(Replacement(ref, to_data_url(data, guess_mime(path, data))))
    return replacements


def apply_replacements(css: str, replacements: List[Replacement]) -> str:
    """Rewrite the reference inside every matching ``url()`` token."""
    if not replacements:
        return css
    embedded: Dict[str, str] = {item.original: item.embedded for item in replacements}

    def substitute(match: re.Match) -> str:
        quote, ref = match.group(1), match.group(2)
        if ref not in embedded:
            return match.group(0)
        return f"url({quote}{embedded[ref]}{quote})"

    return CSS_URL_PATTERN.sub(substitute, css)


async def inline_css(css: str, css_path: str, storage: Storage) -> str:
    """Return ``css`` with every local ``url()`` resource embedded as a data URL.

    References are resolved against the directory holding ``css_path``.
    Substitution only happens once every fetch has succeeded; otherwise
    ``StylesheetFetchError`` is raised and nothing is rewritten. Nested
    ``@import`` rules are not followed.
    """
    refs = collect_references(css)
    if not refs:
        return css
    logger.debug("Inlining %d reference(s) from %s", len(refs), css_path)
    replacements = await fetch_replacements(refs, css_path, storage)
    return apply_replacements(css, replacements)
