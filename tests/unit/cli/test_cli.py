"""Command-line entrypoint tests.

Runs ``summer.cli.main`` end to end against temporary directories with the
terminal width pinned through ``$COLUMNS``.
"""

from __future__ import annotations

import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import yaml

from summer import __version__, cli
from summer.display.terminal import terminal_width

QUIET_CONFIG = """\
collector:
  timeout: null
  git_diff: false
  disk_usage: false
"""


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.config_path = self.root / "summer.yaml"
        self.config_path.write_text(QUIET_CONFIG, encoding="utf-8")
        self.target = self.root / "target"
        self.target.mkdir()
        (self.target / "sub").mkdir()
        (self.target / "b.txt").write_text("b\n", encoding="utf-8")
        (self.target / "a.txt").write_text("a\n", encoding="utf-8")

        env = mock.patch.dict(os.environ, {"COLUMNS": "80", "LS_COLORS": ""})
        env.start()
        self.addCleanup(env.stop)
        default_path = mock.patch("summer.config.loader.DEFAULT_CONFIG_PATH", self.root / "absent.yaml")
        default_path.start()
        self.addCleanup(default_path.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def run_main(self, *argv: str) -> str:
        stdout = io.StringIO()
        with mock.patch("sys.stdout", stdout):
            cli.main(list(argv))
        return stdout.getvalue()

    def test_prints_default_columns(self) -> None:
        output = self.run_main("-c", str(self.config_path), str(self.target))

        self.assertEqual(output, "sub    a.txt\n       b.txt\n")

    def test_path_defaults_to_current_directory(self) -> None:
        previous = Path.cwd()
        try:
            os.chdir(self.target)
            output = self.run_main("-c", str(self.config_path))
        finally:
            os.chdir(previous)

        self.assertEqual(output.splitlines()[0], "sub    a.txt")

    def test_dump_config_prints_yaml(self) -> None:
        output = self.run_main("-c", str(self.config_path), "--dump-config")

        data = yaml.safe_load(output)
        self.assertIsNone(data["collector"]["timeout"])
        self.assertFalse(data["collector"]["git_diff"])
        self.assertEqual(len(data["columns"]), 2)

    def test_dump_default_config_without_file(self) -> None:
        data = yaml.safe_load(self.run_main("-D"))

        self.assertEqual(data["collector"]["timeout"], "100ms")

    def test_version(self) -> None:
        stdout = io.StringIO()
        with mock.patch("sys.stdout", stdout), self.assertRaises(SystemExit) as caught:
            cli.main(["--version"])

        self.assertEqual(caught.exception.code, 0)
        self.assertIn(__version__, stdout.getvalue())

    def test_missing_directory_exits_with_message(self) -> None:
        stdout = io.StringIO()
        with mock.patch("sys.stdout", stdout), self.assertRaises(SystemExit) as caught:
            cli.main(["-c", str(self.config_path), str(self.root / "missing")])

        self.assertIn("summer: ", str(caught.exception.code))
        self.assertIn("No such file or directory", str(caught.exception.code))
        self.assertEqual(stdout.getvalue(), "")

    def test_invalid_config_exits_with_message(self) -> None:
        self.config_path.write_text("grid:\n  max_rows: nope\n", encoding="utf-8")

        with self.assertRaises(SystemExit) as caught:
            self.run_main("-c", str(self.config_path), str(self.target))

        self.assertIn("grid.max_rows", str(caught.exception.code))
        self.assertIn(str(self.config_path), str(caught.exception.code))

    def test_colors_follow_configuration(self) -> None:
        self.config_path.write_text(
            QUIET_CONFIG + "colors:\n  when: always\n  styles:\n    - matchers: [{glob: 'a.*'}]\n      color: red\n",
            encoding="utf-8",
        )

        output = self.run_main("-c", str(self.config_path), str(self.target))

        self.assertIn("\033[31ma.txt\033[0m", output)


class TerminalWidthTests(unittest.TestCase):
    def test_columns_variable_wins(self) -> None:
        self.assertEqual(terminal_width({"COLUMNS": "123"}), 123)

    def test_invalid_columns_falls_back(self) -> None:
        with mock.patch("shutil.get_terminal_size", return_value=os.terminal_size((90, 20))):
            self.assertEqual(terminal_width({"COLUMNS": "wide"}), 90)


if __name__ == "__main__":
    unittest.main()
