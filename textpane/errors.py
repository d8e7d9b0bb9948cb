"""Exception types raised by textpane.

File-level problems (missing, unreadable, undecodable) are never raised; they
become display text. These cover the states callers must prevent or handle.
"""

from __future__ import annotations


class TextpaneError(Exception):
    """Base class for textpane errors."""


class EmptySetError(TextpaneError, LookupError):
    """Raised when the current source is requested from an empty source set."""

    def __init__(self) -> None:
        super().__init__("no file paths configured")


class PathResolutionError(TextpaneError, ValueError):
    """Raised when a configured path cannot be expanded to an absolute path."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path or '<empty>'}: {reason}")


class WatcherStateError(TextpaneError, RuntimeError):
    """Raised on an invalid watcher lifecycle transition."""
