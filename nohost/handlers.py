"""Page handlers for 404s, raw files, directory indexes, images and HTML."""

from __future__ import annotations

import datetime as dt
import html
import logging
import math
import posixpath
from typing import List, Optional, Tuple

from .config import DEFAULT_SIGNATURE
from .content import guess_mime, is_image_path
from .document import MarkupParser
from .errors import ReadError
from .models import DirEntry, Page
from .rewriter import inline_document
from .storage import Storage, normalize
from .utils import parent_dir

logger = logging.getLogger("nohost")

HTML_EXTENSIONS = {".html", ".htm"}
SIZE_UNITS = ["", "K", "M"]

# based on http://dxr.mozilla.org/mozilla-central/source/layout/style/TopLevelImageDocument.css
IMAGE_DOCUMENT_STYLE = (
    "@media not print {"
    " body { margin: 0; }"
    " img { text-align: center; position: absolute; margin: auto;"
    " top: 0; right: 0; bottom: 0; left: 0; }"
    " }"
    " img { image-orientation: from-image; }"
)


def handle_404(url: str, signature: str = DEFAULT_SIGNATURE) -> Page:
    """Render an Apache-style Not Found page."""
    body = (
        "<!DOCTYPE html>"
        "<html><head><title>404 Not Found</title></head><body>"
        "<h1>Not Found</h1>"
        f"<p>The requested URL {html.escape(url)} was not found on this server.</p>"
        "<hr>"
        f"<address>{html.escape(signature)}</address>"
        "</body></html>"
    )
    return Page(404, "text/html", body)


async def handle_image(
    path: str,
    storage: Storage,
    parser: Optional[MarkupParser] = None,
) -> Page:
    """Wrap an image in a synthetic document with the image embedded."""
    escaped = html.escape(path)
    document = (
        "<!DOCTYPE html>"
        f"<html><head><title>{escaped}</title>"
        f"<style>{IMAGE_DOCUMENT_STYLE}</style></head><body>"
        f'<img src="{escaped}"></body></html>'
    )
    body = await inline_document(document, path, storage, parser)
    return Page(200, "text/html", body)


async def handle_file(
    path: str,
    storage: Storage,
    signature: str = DEFAULT_SIGNATURE,
) -> Page:
    """Send the raw file contents."""
    try:
        data = await storage.read_file(path, "utf-8")
    except ReadError as exc:
        logger.error("unable to read `%s`: %s", path, exc)
        return handle_404(path, signature)
    return Page(200, guess_mime(path), data)


async def handle_html(
    path: str,
    storage: Storage,
    parser: Optional[MarkupParser] = None,
    signature: str = DEFAULT_SIGNATURE,
) -> Page:
    """Send an HTML file with its external resources inlined."""
    try:
        source = await storage.read_file(path, "utf-8")
    except ReadError as exc:
        logger.error("unable to read `%s`: %s", path, exc)
        return handle_404(path, signature)
    body = await inline_document(source, path, storage, parser)
    return Page(200, "text/html", body)


def format_date(timestamp: Optional[float]) -> str:
    """Format a timestamp the way Apache indexes do, e.g. ``20-Apr-2004 17:14``."""
    if timestamp is None:
        return "&nbsp;"
    return dt.datetime.fromtimestamp(timestamp).strftime("%d-%b-%Y %H:%M")


def format_size(size: Optional[int]) -> str:
    if not size:
        return "-"
    exponent = min(int(math.log(size, 1024)), len(SIZE_UNITS) - 1)
    return f"{round(size / 1024 ** exponent)}{SIZE_UNITS[exponent]}"


def entry_icon(entry: DirEntry, icon_dir: str = "icons") -> Tuple[str, str]:
    """Return the (icon, alt) pair for a listing row."""
    if entry.is_dir:
        return f"{icon_dir}/folder.png", "[DIR]"
    if posixpath.splitext(entry.path)[1].lower() in {".gif", ".png", ".jpg", ".jpeg"}:
        return f"{icon_dir}/image2.png", "[IMG]"
    return f"{icon_dir}/text.png", "[TXT]"


def _row(icon: str, alt: str, href: str, name: str, modified: str, size: str) -> str:
    return (
        f'<tr><td valign="top"><img src="{icon}" alt="{alt}"></td><td>'
        f'<a href="{html.escape(href)}">{html.escape(name)}</a></td>'
        f'<td align="right">{modified}</td>'
        f'<td align="right">{size}</td><td>&nbsp;</td></tr>'
    )


def render_listing(
    path: str,
    entries: List[DirEntry],
    signature: str = DEFAULT_SIGNATURE,
    icon_dir: str = "icons",
) -> str:
    title = html.escape(path)
    header = (
        "<!DOCTYPE html>"
        f"<html><head><title>Index of {title}</title></head>"
        f"<body><h1>Index of {title}</h1>"
        f'<table><tr><th><img src="{icon_dir}/blank.png" alt="[ICO]"></th>'
        '<th><a href="#">Name</a></th><th><a href="#">Last modified</a></th>'
        '<th><a href="#">Size</a></th><th><a href="#">Description</a></th></tr>'
        '<tr><th colspan="5"><hr></th></tr>'
        f'<tr><td valign="top"><img src="{icon_dir}/back.png" alt="[DIR]"></td>'
        f'<td><a href="?{html.escape(parent_dir(path))}">Parent Directory</a></td><td>&nbsp;</td>'
        '<td align="right">-</td><td>&nbsp;</td></tr>'
    )
    footer = (
        '<tr><th colspan="5"><hr></th></tr>'
        f"</table><address>{html.escape(signature)}</address>"
        "</body></html>"
    )
    rows = []
    for entry in entries:
        icon, alt = entry_icon(entry, icon_dir)
        href = "?" + posixpath.join(path, entry.path)
        name = posixpath.basename(entry.path)
        rows.append(
            _row(icon, alt, href, name, format_date(entry.modified), format_size(entry.size))
        )
    return header + "".join(rows) + footer


async def handle_dir(
    path: str,
    storage: Storage,
    signature: str = DEFAULT_SIGNATURE,
    icon_dir: str = "icons",
) -> Page:
    """Send an Apache-style directory listing."""
    try:
        entries = await storage.list_dir(path)
    except ReadError as exc:
        logger.error("unable to list `%s`: %s", path, exc)
        return handle_404(path, signature)
    return Page(200, "text/html", render_listing(path, entries, signature, icon_dir))


async def route(
    path: str,
    storage: Storage,
    parser: Optional[MarkupParser] = None,
    signature: str = DEFAULT_SIGNATURE,
    icon_dir: str = "icons",
) -> Page:
    """Pick the handler for ``path`` (optionally in ``?/path`` link form)."""
    if path.startswith("?"):
        path = path[1:]
    path = normalize(path)
    if not await storage.exists(path):
        logger.info("404 %s", path)
        return handle_404(path, signature)
    if await storage.is_dir(path):
        return await handle_dir(path, storage, signature, icon_dir)
    if posixpath.splitext(path)[1].lower() in HTML_EXTENSIONS:
        return await handle_html(path, storage, parser, signature)
    if is_image_path(path):
        return await handle_image(path, storage, parser)
    return await handle_file(path, storage, signature)
