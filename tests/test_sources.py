from __future__ import annotations

import unittest

from textpane.errors import EmptySetError
from textpane.sources import SourceSet


class SourceSetTests(unittest.TestCase):
    def test_next_len_times_returns_to_start_for_every_start_index(self) -> None:
        for size in range(1, 6):
            for start in range(size):
                sources = SourceSet([f"/tmp/f{i}.txt" for i in range(size)])
                for _ in range(start):
                    sources.next()
                self.assertEqual(sources.index, start)

                for _ in range(len(sources)):
                    sources.next()

                self.assertEqual(sources.index, start, f"size={size} start={start}")

    def test_previous_wraps_from_first_to_last(self) -> None:
        sources = SourceSet(["a", "b", "c"])

        sources.previous()

        self.assertEqual(sources.index, 2)
        self.assertEqual(sources.current(), "c")

    def test_single_source_navigation_is_a_no_op(self) -> None:
        sources = SourceSet(["only.txt"])

        sources.next()
        sources.previous()

        self.assertEqual(sources.index, 0)
        self.assertEqual(sources.current(), "only.txt")

    def test_current_on_empty_set_raises(self) -> None:
        sources = SourceSet()

        sources.next()
        sources.previous()

        self.assertEqual(len(sources), 0)
        with self.assertRaises(EmptySetError):
            sources.current()

    def test_position_indicator(self) -> None:
        sources = SourceSet(["a", "b", "c", "d", "e"])
        sources.next()

        self.assertEqual(sources.position_indicator(), "2/5")
        self.assertEqual(SourceSet(["a"]).position_indicator(), "")

    def test_sigil_indicator_marks_current_and_right_aligns(self) -> None:
        sources = SourceSet(["a", "b", "c"])
        sources.next()

        self.assertEqual(sources.sigil_indicator(5), "  ○●○")
        self.assertEqual(sources.sigil_indicator(0), "○●○")
        self.assertEqual(SourceSet(["a"]).sigil_indicator(10), "")

    def test_from_config_merges_single_and_multiple_forms(self) -> None:
        sources = SourceSet.from_config(
            file_path="~/notes.md",
            file_paths=["/var/log/app.log", "~/notes.md", "", "/etc/hosts"],
        )

        self.assertEqual(sources.paths, ("~/notes.md", "/var/log/app.log", "/etc/hosts"))
        self.assertEqual(SourceSet.from_config().paths, ())


if __name__ == "__main__":
    unittest.main()
