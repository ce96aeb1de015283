"""Command line entry point.

Usage::

    webproject [-I dir] [-C dir] [-H dir] [-T dir] [-F dir] [-R dir]
               -o out/index.html [-m mode] [-s addr:port] source_file.js
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .builder import PageBuilder
from .config import Settings, extend_search_paths
from .materialize import BuildMode
from .paths import Category, SearchPaths

logger = logging.getLogger(__name__)

EXIT_FATAL = 1
EXIT_NO_OUTPUT = 4
EXIT_NO_PORT = 5
EXIT_BAD_PORT = 6

# switch -> (category, help text)
PATH_SWITCHES = {
    "-I": (Category.SCRIPT, "add search path for scripts"),
    "-C": (Category.STYLE, "add search path for styles"),
    "-H": (Category.HEADER, "add search path for header fragments"),
    "-T": (Category.TEMPLATE, "add search path for page templates"),
    "-F": (Category.PAGE, "add search path for page fragments"),
    "-R": (Category.RESOURCE, "add search path for resources"),
}


def _build_mode(text: str) -> BuildMode:
    try:
        return BuildMode.parse(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webproject",
        description="Assemble an HTML page from a script and the files its //# directives reference.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "build modes:\n"
            "  s, symlink    link all linkable resources by symlinks\n"
            "  h, hardlink   link all linkable resources by hardlinks\n"
            "  c, copy       copy all linkable resources\n"
            "  p, onefile    create one page with inline styles and scripts\n"
        ),
    )
    parser.add_argument("source", help="root script (source_file.js)")
    for switch, (category, text) in PATH_SWITCHES.items():
        parser.add_argument(
            switch,
            dest=category.name.lower(),
            action="append",
            default=[],
            metavar="PATH",
            help=text,
        )
    parser.add_argument("-o", dest="output", metavar="PATH", help="output html page (path/index.html)")
    parser.add_argument(
        "-m",
        dest="mode",
        type=_build_mode,
        default=None,
        metavar="MODE",
        help=f"build mode (default: {Settings.build_mode})",
    )
    parser.add_argument("-s", dest="server", metavar="ADDR:PORT", help="start preview server, e.g. localhost:10000")
    parser.add_argument("-v", dest="verbose", action="store_true", help="debug logging")
    return parser


def parse_server_address(address: str) -> Tuple[str, int]:
    """Split ``host:port``.  Raises ``ValueError`` naming the problem."""

    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError("Server address has no port")
    try:
        number = int(port)
    except ValueError:
        number = 0
    if number <= 0:
        raise ValueError("Invalid port address")
    return host or "localhost", number


def search_paths_from_args(args: argparse.Namespace) -> SearchPaths:
    paths = SearchPaths()
    for category, _ in PATH_SWITCHES.values():
        for directory in getattr(args, category.name.lower()):
            paths.add(category, directory)
    return extend_search_paths(paths)


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, Settings.log_level, logging.INFO)
    logging.basicConfig(level=level, format="%(message)s", handlers=[logging.StreamHandler()])


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    mode = args.mode
    if mode is None:
        try:
            mode = BuildMode.parse(Settings.build_mode)
        except ValueError as exc:
            parser.error(f"WEBPROJECT__BUILD_MODE: {exc}")

    if not args.output:
        logger.error("Target directory is not specified (use -o <target>)")
        return EXIT_NO_OUTPUT

    server_address = None
    if args.server:
        try:
            server_address = parse_server_address(args.server)
        except ValueError as exc:
            logger.error("%s. Failed to start server", exc)
            return EXIT_BAD_PORT if ":" in args.server else EXIT_NO_PORT

    input_path = Path(args.source).absolute()
    output_path = Path(args.output).absolute()

    builder = PageBuilder()
    try:
        builder.prepare(input_path, search_paths_from_args(args))
        builder.build(output_path, mode)
    except OSError as exc:
        logger.error("FATAL: %s", exc)
        return EXIT_FATAL

    if server_address is not None:
        # imported late so plain builds do not pay for Flask
        from .server import create_app, run_server

        host, port = server_address
        run_server(create_app(builder, output_path), host, port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
