"""Panel frames, redraw coalescing, navigation, and degraded behavior."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from textpane.panel import DEGRADED_MARKER, NO_SOURCES_TEXT, DisplayState, Panel
from textpane.render import RenderSettings
from textpane.sources import SourceSet
from textpane.watch import WatchError

IDLE_POLL = 3600.0


class PanelFixture(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.frames: list[DisplayState] = []

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def make_file(self, name: str, text: str) -> str:
        target = self.root / name
        target.write_text(text, encoding="utf-8")
        return str(target)

    def make_panel(self, paths: list[str], **kwargs) -> Panel:
        panel = Panel(SourceSet(paths), RenderSettings(), self.frames.append, width=4, **kwargs)
        self.addCleanup(panel.close)
        return panel


class PanelDisplayTests(PanelFixture):
    def test_single_source_frame_has_path_title_and_file_body(self) -> None:
        path = self.make_file("a.txt", "alpha\n")
        panel = self.make_panel([path])

        panel.display()

        self.assertEqual(self.frames, [DisplayState(title=path, body="alpha\n")])
        self.assertEqual(panel.last_state, self.frames[-1])

    def test_multiple_sources_show_position_and_navigate(self) -> None:
        a = self.make_file("a.txt", "alpha\n")
        b = self.make_file("b.txt", "beta\n")
        panel = self.make_panel([a, b])

        panel.display()
        panel.next_source()
        panel.previous_source()

        self.assertEqual(self.frames[0], DisplayState(title=f"{a}  1/2", body="  ●○\nalpha\n"))
        self.assertEqual(self.frames[1], DisplayState(title=f"{b}  2/2", body="  ○●\nbeta\n"))
        self.assertEqual(self.frames[2], self.frames[0])

    def test_empty_source_set_still_paints(self) -> None:
        panel = self.make_panel([])

        panel.display()

        self.assertEqual(self.frames, [DisplayState(title="", body=NO_SOURCES_TEXT)])

    def test_missing_file_paints_error_text(self) -> None:
        missing = str(self.root / "gone.txt")
        panel = self.make_panel([missing])

        panel.display()

        self.assertIn("No such file or directory", self.frames[-1].body)


class PanelRedrawTests(PanelFixture):
    def test_requests_coalesce_into_one_display(self) -> None:
        panel = self.make_panel([self.make_file("a.txt", "alpha\n")])

        self.assertTrue(panel.request_redraw("x"))
        self.assertFalse(panel.request_redraw("y"))
        self.assertTrue(panel.process_pending())
        self.assertFalse(panel.process_pending())

        self.assertEqual(len(self.frames), 1)

    def test_file_written_twice_between_polls_redraws_once(self) -> None:
        path = self.make_file("a.txt", "one\n")
        panel = self.make_panel([path])
        watcher = panel.start_watching(IDLE_POLL)
        panel.display()

        Path(path).write_text("two two\n", encoding="utf-8")
        Path(path).write_text("three three three\n", encoding="utf-8")
        watcher.poll_once()
        panel.process_pending()
        panel.process_pending()

        self.assertEqual([frame.body for frame in self.frames], ["one\n", "three three three\n"])

    def test_start_watching_is_idempotent(self) -> None:
        panel = self.make_panel([self.make_file("a.txt", "a\n")])

        first = panel.start_watching(IDLE_POLL)

        self.assertIs(panel.start_watching(IDLE_POLL), first)

    def test_close_is_idempotent(self) -> None:
        panel = self.make_panel([self.make_file("a.txt", "a\n")])
        panel.start_watching(IDLE_POLL)

        panel.close()
        panel.close()


class PanelDegradedTests(PanelFixture):
    def test_watch_error_keeps_last_good_body_and_marks_title(self) -> None:
        path = self.make_file("a.txt", "good content\n")
        panel = self.make_panel([path])
        panel.display()

        Path(path).unlink()
        panel.report_watch_error(WatchError(path, PermissionError("denied")))
        self.assertTrue(panel.process_pending())

        self.assertTrue(panel.degraded)
        self.assertEqual(self.frames[-1].title, f"{path} {DEGRADED_MARKER}")
        self.assertEqual(self.frames[-1].body, "good content\n")

    def test_clearing_degraded_shows_fresh_render(self) -> None:
        path = self.make_file("a.txt", "good content\n")
        panel = self.make_panel([path])
        panel.display()
        Path(path).unlink()
        panel.report_watch_error(WatchError(path, PermissionError("denied")))

        panel.clear_degraded()
        panel.process_pending()

        self.assertFalse(panel.degraded)
        self.assertEqual(self.frames[-1].title, path)
        self.assertIn("No such file or directory", self.frames[-1].body)

    def test_watcher_recovery_redraws_without_marker(self) -> None:
        path = self.make_file("a.txt", "content\n")
        panel = self.make_panel([path])
        watcher = panel.start_watching(IDLE_POLL)
        panel.display()
        real_stat = os.stat

        def denied_stat(target, *args, **kwargs):
            if str(target) == path:
                raise PermissionError(13, "Permission denied", str(target))
            return real_stat(target, *args, **kwargs)

        with mock.patch("textpane.watch.os.stat", side_effect=denied_stat):
            with self.assertLogs("textpane", level="WARNING"):
                watcher.poll_once()
        self.assertTrue(panel.process_pending())
        self.assertEqual(self.frames[-1].title, f"{path} {DEGRADED_MARKER}")

        watcher.poll_once()

        self.assertTrue(panel.process_pending())
        self.assertFalse(panel.degraded)
        self.assertEqual(self.frames[-1].title, path)
        self.assertEqual(self.frames[-1].body, "content\n")

    def test_rebind_replaces_sources_and_redisplays(self) -> None:
        a = self.make_file("a.txt", "alpha\n")
        b = self.make_file("b.txt", "beta\n")
        c = self.make_file("c.txt", "gamma\n")
        panel = self.make_panel([a, b])
        watcher = panel.start_watching(IDLE_POLL)
        panel.next_source()

        panel.rebind([c])

        self.assertEqual(panel.sources.index, 0)
        self.assertEqual(self.frames[-1], DisplayState(title=c, body="gamma\n"))
        self.assertEqual(watcher.watched_paths, (c,))


if __name__ == "__main__":
    unittest.main()
