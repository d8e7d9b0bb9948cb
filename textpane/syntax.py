"""Syntax highlighting through ordered provider chains.

Lexer, style, and formatter selection each walk an explicit list of candidate
providers; the first provider that returns a value wins. The final provider of
every chain is a generic fallback, so selection only degrades, never fails.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from typing import TypeVar

from pygments import highlight as pygments_highlight
from pygments.formatter import Formatter
from pygments.formatters import NullFormatter, get_formatter_by_name
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.style import StyleMeta
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

DEFAULT_STYLE = "monokai"
DEFAULT_FORMATTER = "terminal256"
# Names (with aliases) of the pygments formatters that emit terminal escape codes.
TERMINAL_FORMATTERS = frozenset(
    {
        "terminal",
        "console",
        "terminal256",
        "console256",
        "256",
        "terminal16m",
        "console16m",
        "16m",
    }
)

T = TypeVar("T")

_INVALID_STYLES: set[str] = set()
_FORMATTERS: dict[tuple[str, str], Formatter] = {}


def first_available(providers: Sequence[Callable[..., T | None]], *args) -> T:
    """Return the first non-``None`` result of ``providers`` called with ``args``.

    Providers signal "not mine" by returning ``None`` or raising
    ``ClassNotFound``/``LookupError``.
    """
    for provider in providers:
        try:
            found = provider(*args)
        except (ClassNotFound, LookupError):
            continue
        if found is not None:
            return found
    raise LookupError("no provider produced a value")


# Lexers: (path, source) -> Lexer | None


def lexer_for_filename(path: str, source: str) -> Lexer | None:
    """Match the file name/extension against the pygments lexer catalog."""
    return get_lexer_for_filename(os.path.basename(path), source)


def plain_text_lexer(path: str, source: str) -> Lexer:
    return TextLexer()


LEXER_PROVIDERS: tuple[Callable[[str, str], Lexer | None], ...] = (
    lexer_for_filename,
    plain_text_lexer,
)


# Styles: (name) -> style class | None


def named_style(name: str) -> StyleMeta | None:
    """Look up ``name`` in the style catalog, caching unknown names."""
    if name in _INVALID_STYLES:
        return None
    try:
        style = get_style_by_name(name)
    except ClassNotFound:
        _INVALID_STYLES.add(name)
        logger.debug("unknown style %r, falling back", name)
        return None
    return style


def default_style(name: str) -> StyleMeta:
    return get_style_by_name(DEFAULT_STYLE)


STYLE_PROVIDERS: tuple[Callable[[str], StyleMeta | None], ...] = (
    named_style,
    default_style,
)


# Formatters: (name, style) -> Formatter | None


def named_formatter(name: str, style: StyleMeta) -> Formatter | None:
    """Build the terminal formatter called ``name``, cached per style.

    Formatters that do not produce terminal text (html, img, raw, ...) are
    declined.
    """
    if name not in TERMINAL_FORMATTERS:
        logger.debug("formatter %r is not a terminal formatter, falling back", name)
        return None
    key = (name, style.__name__)
    formatter = _FORMATTERS.get(key)
    if formatter is None:
        formatter = get_formatter_by_name(name, style=style)
        _FORMATTERS[key] = formatter
    return formatter


def uncolored_formatter(name: str, style: StyleMeta) -> Formatter:
    return NullFormatter()


FORMATTER_PROVIDERS: tuple[Callable[[str, StyleMeta], Formatter | None], ...] = (
    named_formatter,
    uncolored_formatter,
)


def select_lexer(
    path: str,
    source: str,
    providers: Sequence[Callable[[str, str], Lexer | None]] = LEXER_PROVIDERS,
) -> Lexer:
    return first_available(providers, path, source)


def select_style(
    name: str,
    providers: Sequence[Callable[[str], StyleMeta | None]] = STYLE_PROVIDERS,
) -> StyleMeta:
    return first_available(providers, name)


def select_formatter(
    name: str,
    style: StyleMeta,
    providers: Sequence[Callable[[str, StyleMeta], Formatter | None]] = FORMATTER_PROVIDERS,
) -> Formatter:
    return first_available(providers, name, style)


def highlight(
    source: str,
    path: str,
    style_name: str = DEFAULT_STYLE,
    formatter_name: str = DEFAULT_FORMATTER,
) -> str:
    """Colorize ``source`` as terminal escape-coded text.

    Returns ``source`` unchanged if selection, tokenizing or formatting fails.
    """
    try:
        lexer = select_lexer(path, source)
        style = select_style(style_name)
        formatter = select_formatter(formatter_name, style)
        return pygments_highlight(source, lexer, formatter)
    except Exception:
        logger.exception("highlighting %s failed", path)
        return source
