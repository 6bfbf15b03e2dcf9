"""Command-line entry point for serving and inlining pages."""

from __future__ import annotations

import argparse
import asyncio
import logging
import posixpath
import sys
import time
from pathlib import Path
from typing import Iterable, List, Sequence

from .config import DEFAULT_PARSER_FEATURES, ServeConfig, build_parser, build_storage
from .handlers import handle_html, route
from .models import Page
from .storage import normalize

logger = logging.getLogger("nohost.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("serve", *argv)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--root",
        default=".",
        type=Path,
        help="Directory served as the root of the virtual filesystem",
    )
    parser.add_argument(
        "--parser",
        default=DEFAULT_PARSER_FEATURES,
        help="BeautifulSoup parser used for HTML documents (default: html.parser)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Serve files from a directory as self-contained HTML pages.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser(
        "serve", help="Render a path the way the server would answer it"
    )
    serve_parser.add_argument("path", help="Path to render, e.g. /docs/index.html or ?/docs")
    serve_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the page to this file instead of STDOUT",
    )
    _add_common_arguments(serve_parser)

    inline_parser = subparsers.add_parser(
        "inline", help="Write self-contained copies of HTML documents"
    )
    inline_parser.add_argument("paths", nargs="+", help="HTML documents to inline")
    inline_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Directory for the inlined copies (default: next to each source)",
    )
    _add_common_arguments(inline_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _run_serve(args: argparse.Namespace) -> int:
    config = ServeConfig(root=Path(args.root).resolve(), parser_features=args.parser)
    storage = build_storage(config)
    page: Page = asyncio.run(
        route(args.path, storage, build_parser(config), config.signature, config.icon_dir)
    )
    if args.output:
        args.output.write_text(page.body, encoding="utf-8")
        logger.info("Saved %s (%d) to %s", args.path, page.status, args.output)
    else:
        sys.stdout.write(page.body if page.body.endswith("\n") else page.body + "\n")
        sys.stdout.flush()
    return 0 if page.status < 400 else 1


def inline_output_path(config: ServeConfig, path: str, output: Path | None) -> Path:
    """Place the copy next to its source, or at the same relative spot under ``output``."""
    path = normalize(path)
    stem, _ = posixpath.splitext(posixpath.basename(path))
    subdir = posixpath.dirname(path).lstrip("/")
    base = config.root if output is None else output
    return base / subdir / f"{stem}.inline.html"


async def _inline_all(paths: List[str], config: ServeConfig, output: Path | None) -> int:
    storage = build_storage(config)
    parser = build_parser(config)
    failures = 0
    for path in paths:
        start = time.perf_counter()
        path = normalize(path)
        page = await handle_html(path, storage, parser, config.signature)
        if page.status != 200:
            failures += 1
            continue
        destination = inline_output_path(config, path, output)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(page.body, encoding="utf-8")
        logger.info(
            "Saved %s to %s in %.2fs", path, destination, time.perf_counter() - start
        )
    return failures


def _run_inline(args: argparse.Namespace) -> int:
    config = ServeConfig(root=Path(args.root).resolve(), parser_features=args.parser)
    failures = asyncio.run(_inline_all(args.paths, config, args.output))
    logger.info(
        "Finished (%d/%d succeeded, %d failed)",
        len(args.paths) - failures,
        len(args.paths),
        failures,
    )
    return 1 if failures else 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    if args.command == "serve":
        return _run_serve(args)
    return _run_inline(args)


if __name__ == "__main__":
    sys.exit(main())
