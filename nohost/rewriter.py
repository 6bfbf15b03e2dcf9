"""Rewrite HTML documents into self-contained pages with embedded resources."""

from __future__ import annotations

import logging
import posixpath
from typing import Any, Iterator, Optional

from .content import guess_mime, to_data_url
from .document import MarkupParser, SoupParser
from .errors import ReadError, StylesheetFetchError
from .models import Reference
from .storage import Storage
from .stylesheet import inline_css
from .utils import anchor_link, is_inlineable, lookup_path

logger = logging.getLogger("nohost")

STYLESHEET_MIME = "text/css"
SCRIPT_MIME = "text/javascript"


class DocumentRewriter:
    """Single-use rewriter owning one parsed document tree.

    Stages run strictly in order (anchors, stylesheet links, images, scripts,
    iframes) and the elements of each stage are handled one at a time in
    document order, so every attribute write happens in a fixed sequence.
    """

    def __init__(
        self,
        tree: Any,
        doc_path: str,
        storage: Storage,
        parser: MarkupParser,
    ) -> None:
        self.tree = tree
        self.doc_path = doc_path
        self.base_dir = posixpath.dirname(doc_path) or "/"
        self.storage = storage
        self.parser = parser
        self.inlined = 0
        self.skipped = 0

    def _references(self, tag: str, attribute: str) -> Iterator[Reference]:
        for node in self.parser.find_all(self.tree, tag):
            url = node.get(attribute)
            if not isinstance(url, str) or not is_inlineable(url):
                continue
            yield Reference(node, attribute, url)

    async def _locate(self, ref: Reference) -> Optional[str]:
        path = lookup_path(self.base_dir, ref.url)
        if not await self.storage.exists(path):
            logger.debug("Skipping missing resource %s (%s)", path, ref.url)
            self.skipped += 1
            return None
        return path

    def rewrite_anchors(self) -> None:
        for ref in self._references("a", "href"):
            ref.node[ref.attribute] = anchor_link(self.base_dir, ref.url)

    async def rewrite_stylesheets(self) -> None:
        for ref in list(self._references("link", "href")):
            path = await self._locate(ref)
            if path is None:
                continue
            try:
                css = await self.storage.read_file(path, "utf-8")
                css = await inline_css(css, path, self.storage)
            except (ReadError, StylesheetFetchError) as exc:
                logger.warning("Leaving stylesheet %s untouched: %s", ref.url, exc)
                self.skipped += 1
                continue
            ref.node[ref.attribute] = to_data_url(css, STYLESHEET_MIME)
            self.inlined += 1

    async def rewrite_elements(
        self,
        tag: str,
        attribute: str,
        mime: Optional[str] = None,
    ) -> None:
        for ref in list(self._references(tag, attribute)):
            path = await self._locate(ref)
            if path is None:
                continue
            try:
                data = await self.storage.read_file(path)
            except ReadError as exc:
                logger.error("Failed to embed <%s %s=%r>: %s", tag, attribute, ref.url, exc)
                self.skipped += 1
                continue
            ref.node[ref.attribute] = to_data_url(data, mime or guess_mime(path, data))
            self.inlined += 1

    async def run(self) -> Any:
        self.rewrite_anchors()
        await self.rewrite_stylesheets()
        await self.rewrite_elements("img", "src")
        await self.rewrite_elements("script", "src", SCRIPT_MIME)
        await self.rewrite_elements("iframe", "src")
        logger.debug(
            "Rewrote %s: %d resource(s) embedded, %d left as-is",
            self.doc_path,
            self.inlined,
            self.skipped,
        )
        return self.tree


async def inline_document(
    html: str,
    doc_path: str,
    storage: Storage,
    parser: Optional[MarkupParser] = None,
) -> str:
    """Return ``html`` with every local resource embedded.

    ``doc_path`` is the storage path of the document; references are resolved
    against its directory. Missing or unreadable resources are left as they
    were, so this never fails because of a broken reference.
    """
    parser = parser or SoupParser()
    tree = parser.parse(html)
    rewriter = DocumentRewriter(tree, doc_path, storage, parser)
    await rewriter.run()
    return parser.serialize(tree)
