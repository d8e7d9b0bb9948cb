"""JSON configuration for the panel.

Reads the list of files to show and the highlighting options. Access is
defensive: a missing or malformed file, or values of the wrong type, fall
back to defaults. The panel never writes configuration.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .ansi import MARKUP_ANSI
from .render import RenderSettings
from .sources import SourceSet
from .syntax import DEFAULT_FORMATTER
from .watch import DEFAULT_POLL_INTERVAL

APP_NAME = "textpane"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_FORMAT_STYLE = "vim"


@dataclass(frozen=True)
class PanelConfig:
    """Normalized panel options."""

    sources: tuple[str, ...] = ()
    format: bool = False
    format_style: str = DEFAULT_FORMAT_STYLE
    formatter: str = DEFAULT_FORMATTER
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def render_settings(self, markup: str = MARKUP_ANSI) -> RenderSettings:
        return RenderSettings(
            highlight=self.format,
            style=self.format_style,
            formatter=self.formatter,
            markup=markup,
        )


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = CONFIG_PATH if path is None else path
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _string(value: object, default: str) -> str:
    if not isinstance(value, str):
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _sources(data: dict[str, object]) -> tuple[str, ...]:
    """Merge the single ``filePath`` and the list ``filePaths`` forms."""
    single = data.get("filePath")
    many = data.get("filePaths")
    return SourceSet.from_config(
        file_path=single.strip() if isinstance(single, str) else None,
        file_paths=[item.strip() for item in many if isinstance(item, str)]
        if isinstance(many, list)
        else None,
    ).paths


def _poll_interval(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_POLL_INTERVAL
    if not math.isfinite(value) or value <= 0:
        return DEFAULT_POLL_INTERVAL
    return float(value)


def load_settings(path: Path | None = None) -> PanelConfig:
    """Load and normalize panel options from the config file."""
    data = load_config(path)
    fmt = data.get("format")
    return PanelConfig(
        sources=_sources(data),
        format=fmt if isinstance(fmt, bool) else False,
        format_style=_string(data.get("formatStyle"), DEFAULT_FORMAT_STYLE),
        formatter=_string(data.get("formatter"), DEFAULT_FORMATTER),
        poll_interval=_poll_interval(data.get("pollInterval")),
    )
