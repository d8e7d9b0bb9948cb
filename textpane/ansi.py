"""Translate ANSI SGR escape codes into bracket color-tag markup.

Hosts that paint through a tag-markup text widget (``[fg:bg:attrs]`` tags in
the tview style) cannot consume raw escape codes. ``translate_ansi`` turns a
terminal formatter's output into that markup; ``strip_ansi`` removes codes.
"""

from __future__ import annotations

import re

ANSI_ESCAPE_RE = re.compile(r"\x1b\[([0-9;?]*)([ -/]*)([@-~])")
# Two-byte escapes and stray ESC bytes.
OTHER_ESCAPE_RE = re.compile(r"\x1b[@-Z\\-_]?")
TAG_LIKE_RE = re.compile(r"(\[[a-zA-Z0-9_,;: \-.\"#]+\[*)\]")

MARKUP_ANSI = "ansi"
MARKUP_TAGS = "tags"

BASIC_COLORS = (
    "black",
    "maroon",
    "green",
    "olive",
    "navy",
    "purple",
    "teal",
    "silver",
)
BRIGHT_COLORS = (
    "gray",
    "red",
    "lime",
    "yellow",
    "blue",
    "fuchsia",
    "aqua",
    "white",
)
_CUBE_LEVELS = (0, 95, 135, 175, 215, 255)

ATTR_FLAGS = {1: "b", 2: "d", 3: "i", 4: "u", 5: "l", 7: "r", 9: "s"}
ATTR_RESETS = {22: "bd", 23: "i", 24: "u", 25: "l", 27: "r", 29: "s"}


def strip_ansi(text: str) -> str:
    return OTHER_ESCAPE_RE.sub("", ANSI_ESCAPE_RE.sub("", text))


def escape_tags(text: str) -> str:
    """Escape literal text that a tag-markup widget would read as a tag."""
    return TAG_LIKE_RE.sub(r"\1[]", text)


def color_for_index(index: int) -> str:
    """Return the tag color name for a 256-color palette index."""
    if index < 8:
        return BASIC_COLORS[index]
    if index < 16:
        return BRIGHT_COLORS[index - 8]
    if index < 232:
        cube = index - 16
        red, green, blue = cube // 36, (cube // 6) % 6, cube % 6
        return "#{:02x}{:02x}{:02x}".format(
            _CUBE_LEVELS[red], _CUBE_LEVELS[green], _CUBE_LEVELS[blue]
        )
    gray = 8 + (index - 232) * 10
    return f"#{gray:02x}{gray:02x}{gray:02x}"


def _extended_color(rest: list[int]) -> tuple[str | None, int]:
    """Parse the tail of a ``38;...``/``48;...`` sequence.

    Returns the color (``None`` if malformed) and how many codes it consumed.
    """
    if not rest:
        return None, 0
    mode = rest[0]
    if mode == 5 and len(rest) >= 2:
        return color_for_index(max(0, min(255, rest[1]))), 2
    if mode == 2 and len(rest) >= 4:
        red, green, blue = (max(0, min(255, value)) for value in rest[1:4])
        return f"#{red:02x}{green:02x}{blue:02x}", 4
    return None, 1


class SgrState:
    """Foreground, background, and attribute flags accumulated from SGR codes."""

    def __init__(self) -> None:
        self.fg = "-"
        self.bg = "-"
        self.attrs = ""

    def reset(self) -> None:
        self.fg = "-"
        self.bg = "-"
        self.attrs = ""

    def tag(self) -> str:
        return f"[{self.fg}:{self.bg}:{self.attrs or '-'}]"

    def apply(self, params: str) -> None:
        codes: list[int] = []
        for part in (params.split(";") if params else ["0"]):
            try:
                codes.append(int(part) if part else 0)
            except ValueError:
                continue

        idx = 0
        while idx < len(codes):
            code = codes[idx]
            if code == 0:
                self.reset()
            elif code in ATTR_FLAGS:
                if ATTR_FLAGS[code] not in self.attrs:
                    self.attrs += ATTR_FLAGS[code]
            elif code in ATTR_RESETS:
                self.attrs = "".join(ch for ch in self.attrs if ch not in ATTR_RESETS[code])
            elif 30 <= code <= 37:
                self.fg = BASIC_COLORS[code - 30]
            elif 90 <= code <= 97:
                self.fg = BRIGHT_COLORS[code - 90]
            elif code == 39:
                self.fg = "-"
            elif 40 <= code <= 47:
                self.bg = BASIC_COLORS[code - 40]
            elif 100 <= code <= 107:
                self.bg = BRIGHT_COLORS[code - 100]
            elif code == 49:
                self.bg = "-"
            elif code in (38, 48):
                color, consumed = _extended_color(codes[idx + 1 :])
                if color is not None:
                    if code == 38:
                        self.fg = color
                    else:
                        self.bg = color
                idx += consumed
            idx += 1


def translate_ansi(text: str) -> str:
    """Convert SGR escape codes in ``text`` into ``[fg:bg:attrs]`` tags.

    Every SGR sequence emits the full resulting state as one tag, ``-`` meaning
    the host default. Literal text is tag-escaped and non-SGR escapes dropped.
    """
    state = SgrState()
    out: list[str] = []
    cursor = 0
    for match in ANSI_ESCAPE_RE.finditer(text):
        if match.start() > cursor:
            out.append(escape_tags(OTHER_ESCAPE_RE.sub("", text[cursor : match.start()])))
        cursor = match.end()
        params, intermediates, final = match.groups()
        if final != "m" or intermediates or params.startswith("?"):
            continue
        state.apply(params)
        out.append(state.tag())
    if cursor < len(text):
        out.append(escape_tags(OTHER_ESCAPE_RE.sub("", text[cursor:])))
    return "".join(out)


def translate_for_host(text: str, markup: str) -> str:
    """Convert escape-coded text into the host markup named by ``markup``."""
    if markup == MARKUP_TAGS:
        return translate_ansi(text)
    return text


_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\udc80-\udcff]")


def sanitize_terminal_text(source: str) -> str:
    """Escape control bytes and undecodable bytes before writing to a terminal.

    Newlines, carriage returns and tabs are kept. Bytes that were preserved as
    surrogates by a lossless decode are shown as ``\\xNN``.
    """
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
        elif 0xDC80 <= code <= 0xDCFF:
            out.append(f"\\x{code - 0xDC00:02x}")
        elif code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
        else:
            out.append(ch)
    return "".join(out)
