"""CLI entrypoint for docsite."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict

from .driver import build
from .logging import configure_logging

# argparse destination -> option name understood by the resolver.
_OPTION_NAMES = {
    "src": "src",
    "dst": "dst",
    "base_url": "baseURL",
    "fqdn": "fqdn",
    "title": "title",
    "watch": "watch",
    "port": "port",
    "open": "open",
    "json": "json",
    "static": "static",
    "publish": "publish",
    "github_url": "githubURL",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsite",
        description="Build, serve and publish a documentation site from markdown.",
        argument_default=argparse.SUPPRESS,
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file.")
    parser.add_argument("-s", "--src", help="Directory holding the markdown sources.")
    parser.add_argument("-d", "--dst", help="Directory receiving the built site.")
    parser.add_argument(
        "-b",
        "--base-url",
        help="Path prefix (or full URL) the site is served under.",
    )
    parser.add_argument("--fqdn", help="Custom domain written to CNAME when publishing.")
    parser.add_argument("--title", help="Site title.")
    parser.add_argument(
        "-w",
        "--watch",
        action="store_true",
        help="Serve the site locally and rebuild on changes.",
    )
    parser.add_argument("--port", type=int, help="Port for the development server.")
    parser.add_argument(
        "--no-open",
        dest="open",
        action="store_false",
        help="Do not open a browser when the development server starts.",
    )
    parser.add_argument("--json", action="store_true", help="Write bundler statistics to stats.json.")
    parser.add_argument("--static", action="store_true", help="Render a fully static site.")
    parser.add_argument(
        "-p",
        "--publish",
        action="store_true",
        help="Publish the built site to the gh-pages branch.",
    )
    parser.add_argument("--github-url", help="Repository URL used when publishing.")
    return parser


def options_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Collect only the options given on the command line."""
    values = vars(args)
    return {name: values[dest] for dest, name in _OPTION_NAMES.items() if dest in values}


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docsite."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        succeeded = asyncio.run(build(options_from_args(args)))
    except KeyboardInterrupt:
        parser.exit(130, "\n")
    except Exception as exc:  # pragma: no cover - defensive guard
        parser.exit(1, f"docsite failed: {exc}\nRun with --verbose for more details.\n")
    if not succeeded:
        parser.exit(1)


if __name__ == "__main__":
    main(sys.argv[1:])
