"""Exceptions raised while fetching and inlining resources."""

from __future__ import annotations

from typing import Optional


class ReadError(OSError):
    """A storage path could not be read."""

    def __init__(self, path: str, reason: Optional[str] = None) -> None:
        message = f"unable to read `{path}`"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.path = path
        self.reason = reason


class StylesheetFetchError(RuntimeError):
    """A resource referenced from a stylesheet could not be fetched."""

    def __init__(self, stylesheet: str, reference: str) -> None:
        super().__init__(f"failed on {stylesheet} (while fetching {reference})")
        self.stylesheet = stylesheet
        self.reference = reference
