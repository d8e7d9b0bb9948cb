from __future__ import annotations

import os
import tempfile
import unittest
from unittest import mock

from textpane.errors import PathResolutionError
from textpane.paths import expand_home_dir


class ExpandHomeDirTests(unittest.TestCase):
    def test_expands_tilde_against_home(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.dict(os.environ, {"HOME": tmp}):
                self.assertEqual(expand_home_dir("~/notes.txt"), os.path.join(tmp, "notes.txt"))

    def test_relative_path_becomes_absolute(self) -> None:
        self.assertEqual(expand_home_dir("notes.txt"), os.path.join(os.getcwd(), "notes.txt"))

    def test_absolute_path_is_unchanged(self) -> None:
        self.assertEqual(expand_home_dir("/tmp/a.go"), "/tmp/a.go")

    def test_empty_path_fails(self) -> None:
        for path in ("", "   "):
            with self.assertRaises(PathResolutionError):
                expand_home_dir(path)

    def test_unknown_user_fails(self) -> None:
        with self.assertRaises(PathResolutionError) as ctx:
            expand_home_dir("~no-such-user-textpane/file.txt")

        self.assertIn("~no-such-user-textpane/file.txt", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
