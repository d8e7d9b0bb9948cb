"""Ordered set of configured file paths with a current-source cursor."""

from __future__ import annotations

from collections.abc import Iterable

from .errors import EmptySetError

SIGIL_CURRENT = "●"
SIGIL_OTHER = "○"


class SourceSet:
    """Configured file paths in order, plus the index of the one on display.

    The index always refers to a valid element when the set is non-empty and
    wraps modulo ``len(self)`` when cycling. Only user navigation moves it.
    """

    def __init__(self, paths: Iterable[str] = ()) -> None:
        self._paths: tuple[str, ...] = tuple(paths)
        self._index = 0

    @classmethod
    def from_config(
        cls,
        file_path: str | None = None,
        file_paths: Iterable[str] | None = None,
    ) -> SourceSet:
        """Build from the single-source and multiple-source configuration forms.

        The single entry comes first; repeated paths keep their first position.
        """
        ordered: list[str] = []
        candidates = [file_path] if file_path else []
        candidates.extend(file_paths or ())
        for path in candidates:
            if path and path not in ordered:
                ordered.append(path)
        return cls(ordered)

    @property
    def paths(self) -> tuple[str, ...]:
        return self._paths

    @property
    def index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._paths)

    def current(self) -> str:
        if not self._paths:
            raise EmptySetError()
        return self._paths[self._index]

    def next(self) -> None:
        if len(self._paths) > 1:
            self._index = (self._index + 1) % len(self._paths)

    def previous(self) -> None:
        if len(self._paths) > 1:
            self._index = (self._index - 1) % len(self._paths)

    def position_indicator(self) -> str:
        """Return ``"2/5"`` style text, or ``""`` when there is nothing to page."""
        if len(self._paths) <= 1:
            return ""
        return f"{self._index + 1}/{len(self._paths)}"

    def sigil_indicator(self, width: int) -> str:
        """Return paging dots for the title bar, right-aligned to ``width``."""
        if len(self._paths) <= 1:
            return ""
        sigils = "".join(
            SIGIL_CURRENT if idx == self._index else SIGIL_OTHER
            for idx in range(len(self._paths))
        )
        return sigils.rjust(max(0, width))

    def __repr__(self) -> str:
        return f"SourceSet(paths={list(self._paths)!r}, index={self._index})"
