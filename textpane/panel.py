"""The text-file panel: current source, rendered body, and live refresh.

The panel is driven from one UI context. The watcher thread only calls
``request_redraw``/``report_watch_error``, which put a signal on a bounded
queue; the UI context calls ``process_pending`` to turn queued signals into a
single ``display()``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from queue import Empty, Full, Queue

from .errors import EmptySetError
from .render import Renderer, RenderSettings
from .sources import SourceSet
from .watch import DEFAULT_POLL_INTERVAL, Watcher, WatcherState, WatchError

logger = logging.getLogger(__name__)

DEGRADED_MARKER = "[degraded]"
NO_SOURCES_TEXT = "No files configured. Set filePath or filePaths."


@dataclass(frozen=True)
class DisplayState:
    """One full frame for the host: title row plus body text."""

    title: str
    body: str


class Panel:
    """Displays one of several files and redraws when the shown file is written."""

    def __init__(
        self,
        sources: SourceSet,
        settings: RenderSettings,
        paint: Callable[[DisplayState], None],
        *,
        renderer: Renderer | None = None,
        width: int = 80,
    ) -> None:
        self.sources = sources
        self.settings = settings
        self.width = width
        self._paint = paint
        self._renderer = renderer or Renderer(settings)
        # One slot: a pending redraw absorbs any further requests.
        self._redraw_requests: Queue[str | None] = Queue(maxsize=1)
        self._lock = threading.Lock()
        self._degraded_reason: str | None = None
        self._last_good_body: dict[str, str] = {}
        self._watcher: Watcher | None = None
        self.last_state: DisplayState | None = None

    @property
    def degraded(self) -> bool:
        with self._lock:
            return self._degraded_reason is not None

    @property
    def degraded_reason(self) -> str | None:
        with self._lock:
            return self._degraded_reason

    def display(self) -> None:
        """Re-render the current source and hand the frame to the host."""
        state = self._build_state()
        self.last_state = state
        self._paint(state)

    def _build_state(self) -> DisplayState:
        try:
            path = self.sources.current()
        except EmptySetError:
            return DisplayState(title="", body=NO_SOURCES_TEXT)

        if self._watcher is not None and self._watcher.state is WatcherState.RUNNING:
            self.clear_degraded()

        rendered = self._renderer.render_text(path)
        body = rendered.text
        reason = self.degraded_reason
        if rendered.is_error and reason is not None and path in self._last_good_body:
            body = self._last_good_body[path]
        elif not rendered.is_error:
            self._last_good_body[path] = body

        title = path
        position = self.sources.position_indicator()
        if position:
            title = f"{title}  {position}"
        if reason is not None:
            title = f"{title} {DEGRADED_MARKER}"
        indicator = self.sources.sigil_indicator(self.width)
        if indicator:
            body = f"{indicator}\n{body}"
        return DisplayState(title=title, body=body)

    def request_redraw(self, path: str | None = None) -> bool:
        """Ask the UI context for a redraw; safe from any thread.

        Returns whether a new request was queued, ``False`` when it coalesced
        into one already pending.
        """
        try:
            self._redraw_requests.put_nowait(path)
        except Full:
            return False
        logger.debug("redraw requested for %s", path or "panel")
        return True

    def process_pending(self) -> bool:
        """Drain queued redraw requests and display once if there were any."""
        pending = False
        while True:
            try:
                self._redraw_requests.get_nowait()
            except Empty:
                break
            pending = True
        if pending:
            self.display()
        return pending

    def report_watch_error(self, watch_error: WatchError) -> None:
        """Enter the degraded state and ask for a redraw; safe from any thread."""
        with self._lock:
            self._degraded_reason = str(watch_error)
        logger.warning("panel degraded: %s", watch_error)
        self.request_redraw()

    def clear_degraded(self) -> None:
        with self._lock:
            self._degraded_reason = None

    def next_source(self) -> None:
        self.sources.next()
        self.display()

    def previous_source(self) -> None:
        self.sources.previous()
        self.display()

    def start_watching(self, poll_interval: float = DEFAULT_POLL_INTERVAL) -> Watcher:
        """Watch every configured source; written files request redraws."""
        if self._watcher is not None:
            return self._watcher
        watcher = Watcher(
            self.request_redraw,
            self.report_watch_error,
            on_recover=self.request_redraw,
            poll_interval=poll_interval,
        )
        self._watcher = watcher
        watcher.start(self.sources.paths)
        return watcher

    def rebind(self, paths: Iterable[str]) -> None:
        """Replace the configured sources and re-register watches."""
        self.sources = SourceSet(paths)
        self._last_good_body.clear()
        self.clear_degraded()
        if self._watcher is not None:
            self._watcher.rebind(self.sources.paths)
        self.display()

    def close(self) -> None:
        if self._watcher is not None:
            self._watcher.close()
