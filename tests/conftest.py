"""
pytest configuration and fixtures.
"""

import asyncio
from typing import Dict, List, Optional

import pytest

from nohost.errors import ReadError
from nohost.storage import MemoryStorage

JPEG_BYTES = bytes([0xFF, 0xD8, 0xFF, 0xE0, 0x00, 0x10, 0x4A, 0x46, 0x49, 0x46])
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24

INDEX_HTML = """<!DOCTYPE html>
<html><head>
<title>Site</title>
<link rel="stylesheet" href="css/style.css">
</head><body>
<a href="about.html">About</a>
<img src="logo.jpg" alt="logo">
<script src="js/app.js"></script>
<iframe src="frame.html"></iframe>
</body></html>
"""


class RecordingStorage(MemoryStorage):
    """MemoryStorage that records reads and can fail or delay selected paths."""

    def __init__(
        self,
        files=None,
        unreadable: Optional[List[str]] = None,
        delays: Optional[Dict[str, float]] = None,
    ) -> None:
        super().__init__(files)
        self.unreadable = set(unreadable or [])
        self.delays = delays or {}
        self.reads: List[str] = []
        self.checks: List[str] = []

    async def exists(self, path):
        self.checks.append(path)
        return await super().exists(path)

    async def read_file(self, path, encoding=None):
        self.reads.append(path)
        if path in self.delays:
            await asyncio.sleep(self.delays[path])
        if path in self.unreadable:
            raise ReadError(path, "permission denied")
        return await super().read_file(path, encoding)


def site_files() -> Dict[str, bytes]:
    return {
        "/site/index.html": INDEX_HTML.encode("utf-8"),
        "/site/about.html": b"<p>About</p>",
        "/site/logo.jpg": JPEG_BYTES,
        "/site/css/style.css": b"body { background: url(../img/bg.png); }",
        "/site/img/bg.png": PNG_BYTES,
        "/site/js/app.js": b"console.log('hi');",
        "/site/frame.html": b"<p>frame</p>",
        "/site/notes.txt": b"plain notes",
    }


@pytest.fixture
def storage() -> RecordingStorage:
    """A small site stored in memory."""
    return RecordingStorage(site_files())


@pytest.fixture
def make_storage():
    """Factory for RecordingStorage instances over the sample site."""

    def factory(**kwargs) -> RecordingStorage:
        files = dict(site_files())
        files.update(kwargs.pop("extra", {}))
        for path in kwargs.pop("remove", []):
            files.pop(path, None)
        return RecordingStorage(files, **kwargs)

    return factory
