"""Poll-based write watcher for the configured file paths.

One daemon thread stats every registered path each ``poll_interval`` and
reports paths whose size or modification time changed since the previous
scan. Only writes qualify: creation, removal, and permission-only changes
update the baseline silently. Several writes inside one interval are seen as
one change, which keeps editors that save in bursts from causing redraw storms.

The watcher never reads file contents. ``on_change`` is called on the watcher
thread and should only request a redraw from the UI context.
"""

from __future__ import annotations

import logging
import math
import os
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from queue import Empty, Full, Queue

from .errors import PathResolutionError, WatcherStateError
from .paths import expand_home_dir

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.1
ERROR_QUEUE_SIZE = 64

# (state, mtime_ns, size, mode); state is "ok", "missing", or "error".
StatSignature = tuple[str, int, int, int]
MISSING: StatSignature = ("missing", 0, 0, 0)


class WatcherState(Enum):
    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    DEGRADED = "degraded"
    CLOSED = "closed"


@dataclass(frozen=True)
class WatchError:
    """A watched path that could not be inspected."""

    path: str
    error: Exception

    def __str__(self) -> str:
        return f"{self.path}: {self.error}"


def stat_signature(path: str) -> tuple[StatSignature, OSError | None]:
    """Return the stat tuple for ``path`` and the error, if any, behind it.

    A missing file is a normal state, not an error.
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return MISSING, None
    except OSError as exc:
        return ("error", 0, 0, 0), exc
    return ("ok", st.st_mtime_ns, st.st_size, st.st_mode), None


def is_write(previous: StatSignature, current: StatSignature) -> bool:
    """Whether going from ``previous`` to ``current`` is a content write."""
    if previous[0] != "ok" or current[0] != "ok":
        return False
    return previous[1:3] != current[1:3]


def resolve_watch_targets(paths: Iterable[str]) -> tuple[str, ...]:
    """Expand configured paths, skipping entries that do not resolve."""
    targets: list[str] = []
    for path in paths:
        try:
            full_path = expand_home_dir(path)
        except PathResolutionError as exc:
            logger.warning("not watching %s", exc)
            continue
        if full_path not in targets:
            targets.append(full_path)
    return tuple(targets)


class Watcher:
    """Watch a set of files for writes and call ``on_change`` per changed path.

    Lifecycle: ``IDLE -> STARTING -> RUNNING -> CLOSED``. A path that becomes
    uninspectable moves the watcher to ``DEGRADED``: the error goes to
    ``on_error`` and the error queue, and the remaining paths keep being
    watched. It returns to ``RUNNING`` once every path can be inspected again,
    and then calls ``on_recover``.
    """

    def __init__(
        self,
        on_change: Callable[[str], None],
        on_error: Callable[[WatchError], None] | None = None,
        *,
        on_recover: Callable[[], None] | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        if not math.isfinite(poll_interval) or poll_interval <= 0:
            raise ValueError("poll_interval must be a positive finite number")
        self.poll_interval = poll_interval
        self._on_change = on_change
        self._on_error = on_error
        self._on_recover = on_recover
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._state = WatcherState.IDLE
        self._targets: tuple[str, ...] = ()
        self._snapshots: dict[str, StatSignature] = {}
        self._failing: set[str] = set()
        self._errors: Queue[WatchError] = Queue(maxsize=ERROR_QUEUE_SIZE)

    @property
    def state(self) -> WatcherState:
        with self._lock:
            return self._state

    @property
    def watched_paths(self) -> tuple[str, ...]:
        with self._lock:
            return self._targets

    def start(self, paths: Iterable[str]) -> None:
        """Register ``paths`` and launch the poll thread. Allowed once."""
        with self._lock:
            if self._state is not WatcherState.IDLE:
                raise WatcherStateError(f"cannot start watcher in state {self._state.value}")
            self._state = WatcherState.STARTING

        self._register(paths)

        with self._lock:
            if self._state is WatcherState.CLOSED:
                return
            self._state = WatcherState.DEGRADED if self._failing else WatcherState.RUNNING
            thread = threading.Thread(target=self._run, name="textpane-watch", daemon=True)
            self._thread = thread
        thread.start()

    def rebind(self, paths: Iterable[str]) -> None:
        """Replace the watch list and take a fresh baseline for every path."""
        if self.state is WatcherState.CLOSED:
            raise WatcherStateError("cannot rebind a closed watcher")
        self._register(paths)
        with self._lock:
            if self._state in (WatcherState.RUNNING, WatcherState.DEGRADED):
                self._state = WatcherState.DEGRADED if self._failing else WatcherState.RUNNING

    def _register(self, paths: Iterable[str]) -> None:
        targets = resolve_watch_targets(paths)
        snapshots: dict[str, StatSignature] = {}
        failing: set[str] = set()
        for path in targets:
            signature, error = stat_signature(path)
            snapshots[path] = signature
            if error is not None:
                failing.add(path)
                logger.warning("watching %s, currently not accessible: %s", path, error)
            elif signature == MISSING:
                logger.info("watching %s, which does not exist yet", path)

        with self._lock:
            if self._state is WatcherState.CLOSED:
                return
            self._targets = targets
            self._snapshots = snapshots
            self._failing = failing

    def poll_once(self) -> list[str]:
        """Run one scan cycle; return the paths reported as written."""
        with self._lock:
            if self._state is WatcherState.CLOSED:
                return []
            targets = self._targets
            snapshots = dict(self._snapshots)
            failing = set(self._failing)

        changed: list[str] = []
        new_errors: list[WatchError] = []
        for path in targets:
            current, error = stat_signature(path)
            if error is not None:
                if path not in failing:
                    failing.add(path)
                    new_errors.append(WatchError(path, error))
            elif path in failing:
                failing.discard(path)
                logger.info("%s is accessible again", path)
            previous = snapshots.get(path)
            if previous is not None and is_write(previous, current):
                changed.append(path)
            snapshots[path] = current

        with self._lock:
            if self._state is WatcherState.CLOSED or self._targets is not targets:
                # Closed or rebound mid-scan; this scan's view is stale.
                return []
            self._snapshots = snapshots
            self._failing = failing
            was_degraded = self._state is WatcherState.DEGRADED
            if self._state in (WatcherState.RUNNING, WatcherState.DEGRADED):
                self._state = WatcherState.DEGRADED if failing else WatcherState.RUNNING
            recovered = was_degraded and self._state is WatcherState.RUNNING

        for watch_error in new_errors:
            self._report(watch_error)
        if recovered:
            self._recover()
        for path in changed:
            self._notify(path)
        return changed

    def _notify(self, path: str) -> None:
        try:
            self._on_change(path)
        except Exception:
            logger.exception("change callback failed for %s", path)

    def _recover(self) -> None:
        logger.info("all watched paths are accessible again")
        if self._on_recover is None:
            return
        try:
            self._on_recover()
        except Exception:
            logger.exception("recovery callback failed")

    def _report(self, watch_error: WatchError) -> None:
        logger.warning("watch error: %s", watch_error)
        try:
            self._errors.put_nowait(watch_error)
        except Full:
            logger.debug("watch error queue full, dropping %s", watch_error)
        if self._on_error is None:
            return
        try:
            self._on_error(watch_error)
        except Exception:
            logger.exception("error callback failed for %s", watch_error.path)

    def drain_errors(self) -> list[WatchError]:
        """Drain all reported watch errors."""
        out: list[WatchError] = []
        while True:
            try:
                out.append(self._errors.get_nowait())
            except Empty:
                break
        return out

    def _run(self) -> None:
        logger.debug("watch loop started for %d path(s)", len(self.watched_paths))
        while not self._stop.wait(self.poll_interval):
            try:
                self.poll_once()
            except Exception:
                logger.exception("watch poll failed")
        logger.debug("watch loop exited")

    def close(self) -> None:
        """Stop polling and drop all registrations. Safe to call repeatedly."""
        with self._lock:
            if self._state is WatcherState.CLOSED:
                return
            self._state = WatcherState.CLOSED
            thread = self._thread
            self._thread = None
            self._targets = ()
            self._snapshots = {}
            self._failing = set()
        self._stop.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def __enter__(self) -> Watcher:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
