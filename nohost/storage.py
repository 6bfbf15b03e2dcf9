"""Virtual filesystem backends consumed by the handlers and the inliner."""

from __future__ import annotations

import asyncio
import logging
import posixpath
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from .errors import ReadError
from .models import DirEntry

logger = logging.getLogger("nohost")

FileData = Union[bytes, str]


def normalize(path: str) -> str:
    """Return the canonical absolute POSIX form of a storage path."""
    return posixpath.normpath(posixpath.join("/", path or "/"))


class Storage(ABC):
    """Asynchronous, read-only view of a file tree addressed by POSIX paths."""

    @abstractmethod
    async def exists(self, path: str) -> bool:
        ...

    @abstractmethod
    async def is_dir(self, path: str) -> bool:
        ...

    @abstractmethod
    async def read_file(self, path: str, encoding: Optional[str] = None) -> FileData:
        """Return the file bytes, or text when ``encoding`` is given.

        Raises ``ReadError`` when the path is missing, a directory, or cannot
        be decoded.
        """

    @abstractmethod
    async def list_dir(self, path: str) -> List[DirEntry]:
        ...


def _decode(path: str, data: bytes, encoding: Optional[str]) -> FileData:
    if encoding is None:
        return data
    try:
        return data.decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        raise ReadError(path, str(exc)) from exc


@dataclass
class _MemoryFile:
    data: bytes
    modified: float


class MemoryStorage(Storage):
    """In-memory file tree; directories are implied by the files below them."""

    def __init__(self, files: Optional[Dict[str, FileData]] = None) -> None:
        self._files: Dict[str, _MemoryFile] = {}
        self._dirs = {"/"}
        for path, data in (files or {}).items():
            self.add_file(path, data)

    def add_file(self, path: str, data: FileData, modified: Optional[float] = None) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        path = normalize(path)
        self._files[path] = _MemoryFile(data, time.time() if modified is None else modified)
        self.add_dir(posixpath.dirname(path))

    def add_dir(self, path: str) -> None:
        path = normalize(path)
        while path not in self._dirs:
            self._dirs.add(path)
            path = posixpath.dirname(path)

    async def exists(self, path: str) -> bool:
        path = normalize(path)
        return path in self._files or path in self._dirs

    async def is_dir(self, path: str) -> bool:
        return normalize(path) in self._dirs

    async def read_file(self, path: str, encoding: Optional[str] = None) -> FileData:
        path = normalize(path)
        entry = self._files.get(path)
        if entry is None:
            reason = "is a directory" if path in self._dirs else "no such file"
            raise ReadError(path, reason)
        return _decode(path, entry.data, encoding)

    async def list_dir(self, path: str) -> List[DirEntry]:
        path = normalize(path)
        if path not in self._dirs:
            raise ReadError(path, "not a directory")
        entries: List[DirEntry] = []
        for candidate in sorted(self._dirs):
            if candidate != path and posixpath.dirname(candidate) == path:
                entries.append(DirEntry(posixpath.basename(candidate), "DIRECTORY"))
        for candidate, entry in sorted(self._files.items()):
            if posixpath.dirname(candidate) == path:
                entries.append(
                    DirEntry(
                        posixpath.basename(candidate),
                        "FILE",
                        modified=entry.modified,
                        size=len(entry.data),
                    )
                )
        return entries


class LocalStorage(Storage):
    """File tree rooted at a directory on disk."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).expanduser().resolve()
        logger.debug("Serving files from %s", self.root)

    def _local(self, path: str) -> Path:
        return self.root / normalize(path).lstrip("/")

    async def _check(self, path: str, predicate: str) -> bool:
        # Unusable names (too long, NUL bytes, no permission) count as absent.
        try:
            return await asyncio.to_thread(getattr(self._local(path), predicate))
        except (OSError, ValueError) as exc:
            logger.debug("Cannot stat %s: %s", path, exc)
            return False

    async def exists(self, path: str) -> bool:
        return await self._check(path, "exists")

    async def is_dir(self, path: str) -> bool:
        return await self._check(path, "is_dir")

    async def read_file(self, path: str, encoding: Optional[str] = None) -> FileData:
        local = self._local(path)
        try:
            data = await asyncio.to_thread(local.read_bytes)
        except (OSError, ValueError) as exc:
            raise ReadError(normalize(path), getattr(exc, "strerror", None) or str(exc)) from exc
        return _decode(normalize(path), data, encoding)

    def _scan(self, path: str) -> List[DirEntry]:
        entries: List[DirEntry] = []
        for child in sorted(self._local(path).iterdir(), key=lambda p: p.name):
            stat = child.stat()
            if child.is_dir():
                entries.append(DirEntry(child.name, "DIRECTORY", modified=stat.st_mtime))
            else:
                entries.append(
                    DirEntry(child.name, "FILE", modified=stat.st_mtime, size=stat.st_size)
                )
        return entries

    async def list_dir(self, path: str) -> List[DirEntry]:
        try:
            return await asyncio.to_thread(self._scan, path)
        except (OSError, ValueError) as exc:
            raise ReadError(normalize(path), getattr(exc, "strerror", None) or str(exc)) from exc
