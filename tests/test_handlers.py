"""
Tests for the page handlers and the path router.
"""

import asyncio
import datetime as dt

from bs4 import BeautifulSoup

from conftest import PNG_BYTES
from nohost.handlers import (
    entry_icon,
    format_date,
    format_size,
    handle_404,
    handle_dir,
    handle_file,
    handle_image,
    route,
)
from nohost.models import DirEntry
from nohost.storage import MemoryStorage


def links(html):
    soup = BeautifulSoup(html, "html.parser")
    return [(a.get("href"), a.get_text()) for a in soup.find_all("a")]


class TestNotFound:
    def test_page(self):
        page = handle_404("/missing.html")
        assert page.status == 404
        assert "<h1>Not Found</h1>" in page.body
        assert "The requested URL /missing.html was not found on this server." in page.body
        assert "<address>NoHost/0.0.1 (Web) Server</address>" in page.body

    def test_url_is_escaped(self):
        page = handle_404("/<script>")
        assert "<script>" not in page.body
        assert "&lt;script&gt;" in page.body


class TestFormatting:
    def test_size(self):
        assert format_size(None) == "-"
        assert format_size(0) == "-"
        assert format_size(512) == "512"
        assert format_size(2048) == "2K"
        assert format_size(3 * 1024 * 1024) == "3M"
        assert format_size(5 * 1024 ** 3) == "5120M"

    def test_date(self):
        stamp = dt.datetime(2004, 4, 20, 17, 14).timestamp()
        assert format_date(stamp) == "20-Apr-2004 17:14"

    def test_icons(self):
        assert entry_icon(DirEntry("docs", "DIRECTORY")) == ("icons/folder.png", "[DIR]")
        assert entry_icon(DirEntry("a.JPG", "FILE")) == ("icons/image2.png", "[IMG]")
        assert entry_icon(DirEntry("a.html", "FILE")) == ("icons/text.png", "[TXT]")


class TestDirectory:
    def test_listing(self, storage):
        page = asyncio.run(handle_dir("/site", storage))
        assert page.status == 200
        assert "<title>Index of /site</title>" in page.body
        found = links(page.body)
        assert ("?/", "Parent Directory") in found
        assert ("?/site/css", "css") in found
        assert ("?/site/logo.jpg", "logo.jpg") in found
        assert 'alt="[DIR]"' in page.body
        assert 'alt="[IMG]"' in page.body

    def test_listing_of_file_is_404(self, storage):
        page = asyncio.run(handle_dir("/site/notes.txt", storage))
        assert page.status == 404


class TestFiles:
    def test_raw_file(self, storage):
        page = asyncio.run(handle_file("/site/notes.txt", storage))
        assert page.status == 200
        assert page.content_type == "text/plain"
        assert page.body == "plain notes"

    def test_unreadable_file_is_404(self, storage):
        page = asyncio.run(handle_file("/site/nothing.txt", storage))
        assert page.status == 404

    def test_image_wrapper_embeds_image(self):
        storage = MemoryStorage({"/pics/cat.png": PNG_BYTES})
        page = asyncio.run(handle_image("/pics/cat.png", storage))
        soup = BeautifulSoup(page.body, "html.parser")
        assert soup.title.get_text() == "/pics/cat.png"
        assert soup.img["src"].startswith("data:image/png;base64,")
        assert "image-orientation: from-image" in page.body


class TestRoute:
    def test_missing(self, storage):
        page = asyncio.run(route("/site/missing.html", storage))
        assert page.status == 404

    def test_directory_in_link_form(self, storage):
        page = asyncio.run(route("?/site", storage))
        assert page.status == 200
        assert "Index of /site" in page.body

    def test_root(self, storage):
        page = asyncio.run(route("", storage))
        assert "Index of /" in page.body
        assert ("?/site", "site") in links(page.body)

    def test_html_is_inlined(self, storage):
        page = asyncio.run(route("/site/index.html", storage))
        assert page.status == 200
        soup = BeautifulSoup(page.body, "html.parser")
        assert soup.img["src"].startswith("data:image/jpeg;base64,")
        assert soup.a["href"] == "?/site/about.html"

    def test_image(self, storage):
        page = asyncio.run(route("/site/img/bg.png", storage))
        assert "data:image/png;base64," in page.body

    def test_other_files_are_raw(self, storage):
        page = asyncio.run(route("/site/js/app.js", storage))
        assert page.body == "console.log('hi');"
        assert page.content_type == "text/javascript"
