"""Public package surface for textpane.

Exports the panel building blocks and ``main`` for programmatic CLI use.
"""

from __future__ import annotations

from .errors import EmptySetError, PathResolutionError, TextpaneError, WatcherStateError
from .panel import DisplayState, Panel
from .render import RenderedText, Renderer, RenderSettings, render
from .sources import SourceSet
from .watch import Watcher, WatcherState, WatchError


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "DisplayState",
    "EmptySetError",
    "Panel",
    "PathResolutionError",
    "RenderSettings",
    "RenderedText",
    "Renderer",
    "SourceSet",
    "TextpaneError",
    "WatchError",
    "Watcher",
    "WatcherState",
    "WatcherStateError",
    "main",
    "render",
]
