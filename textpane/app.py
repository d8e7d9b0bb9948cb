"""Standalone terminal host for one panel.

Paints ``DisplayState`` frames to the terminal, maps keys to source
navigation, and drains the panel's redraw requests between key reads. All
painting happens on this loop's thread; the watcher thread only queues.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable

from .ansi import sanitize_terminal_text
from .panel import DisplayState, Panel
from .terminal import TerminalController, read_key
from .watch import DEFAULT_POLL_INTERVAL

logger = logging.getLogger(__name__)

CLEAR_SCREEN = "\x1b[H\x1b[2J"
TITLE_ON = "\x1b[7m"
RESET = "\x1b[0m"

NEXT_KEYS = frozenset({"n", "l", "RIGHT", "TAB"})
PREVIOUS_KEYS = frozenset({"p", "h", "LEFT", "SHIFT_TAB"})
QUIT_KEYS = frozenset({"q", "Q", "ESC", "CTRL_C"})


def frame_text(state: DisplayState, columns: int, rows: int, *, sanitize: bool) -> str:
    """Lay out one frame: title row then as many body lines as fit."""
    body = sanitize_terminal_text(state.body) if sanitize else state.body
    lines = body.split("\n")[: max(0, rows - 1)]
    title = state.title[:columns].ljust(columns)
    out = [CLEAR_SCREEN, TITLE_ON, title, RESET]
    for line in lines:
        out.append("\r\n")
        out.append(line.rstrip("\r"))
    out.append(RESET)
    return "".join(out)


def paint_to_terminal(
    stdout_fd: int,
    *,
    sanitize: bool,
    terminal_size: Callable[[], os.terminal_size] = lambda: shutil.get_terminal_size((80, 24)),
) -> Callable[[DisplayState], None]:
    """Build a paint callable that writes frames to ``stdout_fd``."""

    def paint(state: DisplayState) -> None:
        size = terminal_size()
        text = frame_text(state, size.columns, size.lines, sanitize=sanitize)
        os.write(stdout_fd, text.encode("utf-8", errors="surrogateescape"))

    return paint


def handle_key(panel: Panel, key: str) -> bool:
    """Apply one key to ``panel``. Returns ``False`` when the host should quit."""
    if key in QUIT_KEYS:
        return False
    if key in NEXT_KEYS:
        panel.next_source()
    elif key in PREVIOUS_KEYS:
        panel.previous_source()
    return True


def run_panel(
    panel: Panel,
    stdin_fd: int,
    stdout_fd: int,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> None:
    """Run the interactive loop until a quit key is pressed."""
    terminal = TerminalController(stdin_fd, stdout_fd)
    timeout_ms = max(1, int(poll_interval * 1000))
    with terminal.raw_mode():
        panel.start_watching(poll_interval)
        try:
            panel.display()
            while True:
                key = read_key(stdin_fd, timeout_ms=timeout_ms)
                if key and not handle_key(panel, key):
                    break
                panel.process_pending()
        finally:
            panel.close()
    logger.debug("panel host exited")
