"""Command-line front door for summer.

Parses CLI options, loads the configuration, analyzes the directory and
prints the summary grid.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from . import __version__
from .config import Config, dump_config, load_config, load_default_config
from .config.model import COLORS_ALWAYS, COLORS_AUTO
from .display.render import render_analysis
from .display.terminal import stream_is_tty, terminal_width
from .errors import SummerError
from .summarizer.analyzer import analyze_path

LOG_FORMAT = "%(levelname)-8s | %(name)-25s | %(message)s"
LOG_LEVEL_ENV = "SUMMER_LOG"

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr; ``$SUMMER_LOG`` overrides the level."""
    level = logging.DEBUG if verbose else logging.WARNING
    env_level = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if env_level:
        resolved = logging.getLevelName(env_level)
        if isinstance(resolved, int):
            level = resolved
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="summer",
        description="Summarize the contents of a directory in a grid of columns.",
    )
    parser.add_argument("path", nargs="?", default=".", help="Directory to summarize. Defaults to the current one.")
    parser.add_argument("-c", "--config", metavar="FILE", help="Configuration file (YAML).")
    parser.add_argument(
        "-D",
        "--dump-config",
        action="store_true",
        help="Print the active configuration as YAML and exit.",
    )
    parser.add_argument("-V", "--version", action="version", version=f"summer {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log collection details to stderr.")
    return parser


def use_colors(config: Config) -> bool:
    when = config.colors.when
    if when == COLORS_ALWAYS:
        return True
    if when == COLORS_AUTO:
        return stream_is_tty(sys.stdout)
    return False


def run(args: argparse.Namespace) -> list[str]:
    """Execute parsed arguments and return the output lines."""
    config = load_config(Path(args.config)) if args.config else load_default_config()
    if args.dump_config:
        return dump_config(config).splitlines()

    analysis = analyze_path(Path(args.path), config)
    return render_analysis(
        analysis,
        config,
        width=terminal_width(),
        use_colors=use_colors(config),
    )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and print the summary of one directory.

    Fatal configuration and scan errors exit with status 1 and a message on
    stderr; nothing is written to stdout in that case.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        lines = run(args)
    except SummerError as exc:
        logger.debug("Fatal error", exc_info=True)
        raise SystemExit(f"summer: {exc}") from exc

    if lines:
        sys.stdout.write("\n".join(lines) + "\n")


if __name__ == "__main__":
    main()
