"""Configuration objects and constants for the file server."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .document import SoupParser
from .storage import LocalStorage

DEFAULT_PARSER_FEATURES = "html.parser"
DEFAULT_SIGNATURE = "NoHost/0.0.1 (Web) Server"


@dataclass
class ServeConfig:
    """Top-level settings that control how pages are served and inlined."""

    root: Path
    parser_features: str = DEFAULT_PARSER_FEATURES
    signature: str = DEFAULT_SIGNATURE
    icon_dir: str = "icons"


def build_storage(config: ServeConfig) -> LocalStorage:
    """Create the storage backend serving ``config.root``."""
    return LocalStorage(config.root)


def build_parser(config: ServeConfig) -> SoupParser:
    return SoupParser(config.parser_features)
