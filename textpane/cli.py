"""Command-line front door for textpane.

Merges command-line options over the JSON config, builds the panel, and
either prints one frame (``--render``) or runs the interactive terminal host.
"""

from __future__ import annotations

import argparse
import logging
import math
import shutil
import sys
from dataclasses import replace
from pathlib import Path

from .ansi import MARKUP_ANSI, MARKUP_TAGS
from .config import CONFIG_PATH, PanelConfig, load_settings
from .panel import DisplayState, Panel
from .sources import SourceSet

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _positive_float(value: str) -> float:
    """argparse type for positive, finite float values."""
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if not math.isfinite(parsed) or parsed <= 0:
        raise argparse.ArgumentTypeError("value must be a finite number > 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Show text files in a terminal panel that refreshes when they change."
    )
    parser.add_argument("paths", nargs="*", help="Files to show. Defaults to the configured files.")
    parser.add_argument("--config", type=Path, default=None, help=f"Config file (default: {CONFIG_PATH}).")
    parser.add_argument(
        "--format",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Enable or disable syntax highlighting.",
    )
    parser.add_argument("--style", default=None, help="Pygments style name for highlighting.")
    parser.add_argument(
        "--formatter",
        default=None,
        help="Pygments terminal formatter (terminal, terminal256, terminal16m).",
    )
    parser.add_argument(
        "--markup",
        choices=(MARKUP_ANSI, MARKUP_TAGS),
        default=MARKUP_ANSI,
        help="Color markup of the rendered body.",
    )
    parser.add_argument(
        "--poll-interval",
        type=_positive_float,
        default=None,
        help="Seconds between change checks (default: 0.1).",
    )
    parser.add_argument("--render", action="store_true", help="Print the first file once and exit.")
    parser.add_argument("--log-file", type=Path, default=None, help="Write logs to this file.")
    parser.add_argument("--verbose", action="store_true", help="Log debug messages.")
    return parser


def configure_logging(log_file: Path | None, verbose: bool) -> None:
    """Send logs to ``log_file``; without one, logs are discarded.

    Log records must not reach the terminal the panel paints on.
    """
    package_logger = logging.getLogger("textpane")
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if log_file is None:
        package_logger.addHandler(logging.NullHandler())
        package_logger.propagate = False
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)


def merge_options(config: PanelConfig, args: argparse.Namespace) -> PanelConfig:
    """Overlay explicitly given command-line options on ``config``."""
    changes: dict[str, object] = {}
    if args.paths:
        changes["sources"] = SourceSet.from_config(file_paths=args.paths).paths
    if args.format is not None:
        changes["format"] = args.format
    if args.style:
        changes["format_style"] = args.style
    if args.formatter:
        changes["formatter"] = args.formatter
    if args.poll_interval is not None:
        changes["poll_interval"] = args.poll_interval
    return replace(config, **changes)


def format_frame(state: DisplayState) -> str:
    return f"{state.title}\n{state.body}"


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and show the configured files."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file, args.verbose)

    options = merge_options(load_settings(args.config), args)
    if not options.sources:
        raise SystemExit("No files to show: pass paths or set filePath/filePaths in the config.")

    settings = options.render_settings(args.markup)
    width = shutil.get_terminal_size((80, 24)).columns

    if args.render:
        frames: list[DisplayState] = []
        Panel(SourceSet(options.sources), settings, frames.append, width=width).display()
        text = format_frame(frames[-1])
        sys.stdout.buffer.write(text.encode("utf-8", errors="surrogateescape"))
        if not text.endswith("\n"):
            sys.stdout.buffer.write(b"\n")
        sys.stdout.buffer.flush()
        return

    from .app import paint_to_terminal, run_panel

    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    paint = paint_to_terminal(stdout_fd, sanitize=not settings.highlight)
    panel = Panel(SourceSet(options.sources), settings, paint, width=width)
    run_panel(panel, stdin_fd, stdout_fd, options.poll_interval)


if __name__ == "__main__":
    main()
