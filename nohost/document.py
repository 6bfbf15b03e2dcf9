"""Markup parsing and serialization used by the document rewriter."""

from __future__ import annotations

from typing import Any, List, Protocol

from bs4 import BeautifulSoup


class MarkupParser(Protocol):
    """Builds a navigable tree from markup and turns it back into text.

    Nodes returned by ``find_all`` must support ``node.get(attr)`` and
    ``node[attr] = value``.
    """

    def parse(self, text: str) -> Any:
        ...

    def find_all(self, tree: Any, tag: str) -> List[Any]:
        ...

    def serialize(self, tree: Any) -> str:
        ...


class SoupParser:
    """BeautifulSoup-backed parser."""

    def __init__(self, features: str = "html.parser") -> None:
        self.features = features

    def parse(self, text: str) -> BeautifulSoup:
        return BeautifulSoup(text, self.features)

    def find_all(self, tree: BeautifulSoup, tag: str) -> List[Any]:
        return list(tree.find_all(tag))

    def serialize(self, tree: BeautifulSoup) -> str:
        return tree.decode()
