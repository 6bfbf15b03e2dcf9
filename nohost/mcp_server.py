"""MCP server exposing the page handlers as tools."""

from __future__ import annotations

import logging
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from .config import ServeConfig, build_parser, build_storage
from .handlers import route
from .rewriter import inline_document

logger = logging.getLogger("nohost.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="nohost")


def _config(root: str) -> ServeConfig:
    source = Path(root).expanduser()
    if not source.is_dir():
        raise FileNotFoundError(f"Root directory does not exist: {source}")
    return ServeConfig(root=source.resolve())


@mcp.tool()
async def serve_path(path: str, root: str = ".") -> str:
    """Render a path under ``root`` as the server would, with resources inlined."""
    config = _config(root)
    page = await route(path, build_storage(config), build_parser(config), config.signature)
    if page.status != 200:
        raise FileNotFoundError(f"Not found: {path}")
    return page.body


@mcp.tool()
async def inline_html(html: str, path: str = "/index.html", root: str = ".") -> str:
    """Inline local resources of an HTML string as if it lived at ``path``."""
    config = _config(root)
    return await inline_document(html, path, build_storage(config), build_parser(config))


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
