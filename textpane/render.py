"""Build the displayable text block for one configured file.

Resolution order:
1. home-directory expansion (failure -> error text)
2. plain mode: raw bytes, decoded losslessly
3. highlight mode: lexer/style/formatter chains, then host markup translation

Rendering never raises. Missing or unreadable files become readable error
text so the panel always has something to show.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .ansi import MARKUP_ANSI, sanitize_terminal_text, translate_for_host
from .errors import PathResolutionError
from .paths import expand_home_dir
from .syntax import DEFAULT_FORMATTER, DEFAULT_STYLE, highlight

logger = logging.getLogger(__name__)

# Lossless: ``text.encode("utf-8", RAW_ERRORS)`` gives back the original bytes.
RAW_ERRORS = "surrogateescape"


@dataclass(frozen=True)
class RenderSettings:
    """How file contents are turned into display text."""

    highlight: bool = False
    style: str = DEFAULT_STYLE
    formatter: str = DEFAULT_FORMATTER
    markup: str = MARKUP_ANSI


def error_text(path: str, exc: BaseException) -> str:
    """Format a file-level failure as one readable line."""
    reason = getattr(exc, "strerror", None) or str(exc) or type(exc).__name__
    if isinstance(exc, PathResolutionError):
        reason = exc.reason
    return f"{path}: {reason}"


def decode_text(data: bytes) -> str:
    """Decode file bytes for tokenizing, tolerating any encoding.

    Attempts UTF-8 (dropping a leading BOM), then latin-1, which accepts any
    byte sequence.
    """
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def read_raw_text(path: str) -> str:
    """Read ``path`` verbatim; binary content survives the round trip."""
    with open(path, "rb") as handle:
        return handle.read().decode("utf-8", errors=RAW_ERRORS)


def read_highlighted_text(path: str, settings: RenderSettings) -> str:
    """Highlight ``path``; control bytes in the file are escaped first.

    Highlighted text is painted unsanitized, so only the formatter's own
    escape codes may reach the terminal.
    """
    with open(path, "rb") as handle:
        source = sanitize_terminal_text(decode_text(handle.read()))
    colored = highlight(source, path, settings.style, settings.formatter)
    return translate_for_host(colored, settings.markup)


@dataclass(frozen=True)
class RenderedText:
    """Rendered body plus whether it reports a failure instead of content."""

    text: str
    is_error: bool = False

    @classmethod
    def failure(cls, path: str, exc: BaseException) -> RenderedText:
        return cls(text=error_text(path, exc), is_error=True)


def render_text(path: str, settings: RenderSettings) -> RenderedText:
    """Render ``path`` and report whether the result is an error line."""
    try:
        full_path = expand_home_dir(path)
    except PathResolutionError as exc:
        return RenderedText.failure(path, exc)

    try:
        if not settings.highlight:
            return RenderedText(read_raw_text(full_path))
        return RenderedText(read_highlighted_text(full_path, settings))
    except OSError as exc:
        logger.debug("reading %s failed: %s", full_path, exc)
        return RenderedText.failure(full_path, exc)


def render(path: str, settings: RenderSettings) -> str:
    """Return the text to display for ``path``; never raises."""
    return render_text(path, settings).text


class Renderer:
    """``render`` bound to one ``RenderSettings``."""

    def __init__(self, settings: RenderSettings) -> None:
        self.settings = settings

    def render(self, path: str) -> str:
        return render(path, self.settings)

    def render_text(self, path: str) -> RenderedText:
        return render_text(path, self.settings)
