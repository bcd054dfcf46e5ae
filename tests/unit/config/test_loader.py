"""Tests for loading, validating and dumping the YAML configuration."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

import yaml

from summer.config import loader
from summer.config.model import COLORS_ALWAYS, Config, default_columns
from summer.display.styles import parse_style
from summer.errors import ConfigError
from summer.summarizer.matchers import AnyMatcher, GitChangedMatcher, TypeMatcher
from summer.summarizer.sorting import SortSpec

SAMPLE_CONFIG = """\
include_hidden: false
columns:
  - label: Directories
    matchers:
      - type: directory
    sort: deep_mtime desc
  - matchers:
      - changes: git
    git_changes_first: false
  - matchers: any
    include_hidden: true
    max_name_width: 20
grid:
  max_rows: 15
collector:
  timeout: 10 seconds
  disk_usage: false
colors:
  when: always
  column_label: bold
  styles:
    - matchers:
        - glob: "*.txt"
      color: red
      indicator:
        text: "*"
        color: yellow
info:
  left: "%p"
  right:
    text: "%S"
    color: dim
  variables:
    dirs:
      - type: directory
"""


class ConfigFromDataTests(unittest.TestCase):
    def test_sample_configuration(self) -> None:
        config = loader.config_from_data(yaml.safe_load(SAMPLE_CONFIG))

        first, second, third = config.columns
        self.assertEqual(first.label, "Directories")
        self.assertEqual(first.matchers.children, (TypeMatcher(kind="directory"),))
        self.assertEqual(first.sort, SortSpec("deep_modification_time", descending=True))
        self.assertEqual(second.matchers.children, (GitChangedMatcher(),))
        self.assertFalse(second.git_changes_first)
        self.assertFalse(second.include_hidden)
        self.assertEqual(third.matchers.children, (AnyMatcher(),))
        self.assertTrue(third.include_hidden)
        self.assertEqual(third.max_name_width, 20)

        self.assertEqual(config.grid.max_rows, 15)
        self.assertEqual(config.collector.timeout, 10.0)
        self.assertFalse(config.collector.disk_usage)
        self.assertTrue(config.collector.git_diff)

        self.assertEqual(config.colors.when, COLORS_ALWAYS)
        self.assertEqual(config.colors.column_label, parse_style("bold"))
        self.assertEqual(config.colors.diff_added, parse_style("green"))
        (rule,) = config.colors.styles
        self.assertEqual(rule.color, parse_style("red"))
        self.assertEqual(rule.indicator.text, "*")
        self.assertEqual(rule.indicator.color, parse_style("yellow"))

        self.assertEqual(config.info.left.text, "%p")
        self.assertIsNone(config.info.left.color)
        self.assertEqual(config.info.right.color, parse_style("dim"))
        self.assertIsNone(config.info.column)
        self.assertEqual(set(config.info.variables), {"dirs"})

    def test_empty_document_means_defaults(self) -> None:
        self.assertEqual(loader.config_from_data(None), Config())

    def test_global_hidden_setting_reaches_default_columns(self) -> None:
        config = loader.config_from_data({"include_hidden": True})

        self.assertEqual(config.columns, default_columns(include_hidden=True))
        self.assertTrue(config.columns[0].include_hidden)

    def test_invalid_values(self) -> None:
        cases = [
            ({"colums": []}, "unknown key(s): colums"),
            ({"columns": [{"label": "x"}]}, "columns[0]: missing required key: matchers"),
            ({"columns": [{"matchers": [{"glob": 3}]}]}, "columns[0].matchers"),
            ({"columns": [{"matchers": "any", "sort": "size sideways"}]}, "columns[0].sort"),
            ({"grid": {"max_rows": 0}}, "grid.max_rows"),
            ({"collector": {"timeout": "soon"}}, "collector.timeout"),
            ({"colors": {"when": "sometimes"}}, "colors.when"),
            ({"colors": {"diff_added": "chartreuse"}}, "colors.diff_added"),
            ({"info": {"variables": ["dirs"]}}, "info.variables"),
        ]
        for data, fragment in cases:
            with self.subTest(data=data):
                with self.assertRaises(ConfigError) as caught:
                    loader.config_from_data(data)
                self.assertIn(fragment, str(caught.exception))


class LoadConfigTests(unittest.TestCase):
    def test_style_files_are_relative_to_the_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "extra.yaml").write_text("- matchers: [{glob: '*.md'}]\n  color: blue\n", encoding="utf-8")
            config_path = root / "config.yaml"
            config_path.write_text(
                "colors:\n"
                "  styles:\n"
                "    - matchers: [{glob: '*.txt'}]\n"
                "      color: red\n"
                "  style_files: [extra.yaml]\n",
                encoding="utf-8",
            )

            config = loader.load_config(config_path)

        self.assertEqual([rule.color for rule in config.colors.styles], [parse_style("red"), parse_style("blue")])

    def test_errors_name_the_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.yaml"
            config_path.write_text("grid:\n  max_rows: -1\n", encoding="utf-8")

            with self.assertRaises(ConfigError) as caught:
                loader.load_config(config_path)

        self.assertTrue(str(caught.exception).startswith(str(config_path)))

    def test_yaml_syntax_error_points_at_the_problem(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.yaml"
            config_path.write_text("grid: max_rows: 3\n", encoding="utf-8")

            with self.assertRaises(ConfigError) as caught:
                loader.load_config(config_path)

        message = str(caught.exception)
        self.assertIn("error: cannot parse configuration file.", message)
        self.assertIn(f"   --> {config_path}", message)
        self.assertIn("  1 | grid: max_rows: 3", message)
        self.assertIn("^", message)
        self.assertIn("at line 1", message)

    def test_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigError):
                loader.load_config(Path(tmp) / "nope.yaml")

    def test_default_path_missing_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("summer.config.loader.DEFAULT_CONFIG_PATH", Path(tmp) / "config.yaml"):
                self.assertEqual(loader.load_default_config(), Config())

    def test_default_path_is_read_when_present(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.yaml"
            config_path.write_text("grid:\n  max_rows: 7\n", encoding="utf-8")
            with mock.patch("summer.config.loader.DEFAULT_CONFIG_PATH", config_path):
                self.assertEqual(loader.load_default_config().grid.max_rows, 7)


class DumpConfigTests(unittest.TestCase):
    def test_dumped_configuration_loads_back(self) -> None:
        loaded = loader.config_from_data(yaml.safe_load(SAMPLE_CONFIG))

        reloaded = loader.config_from_data(yaml.safe_load(loader.dump_config(loaded)))

        self.assertEqual(reloaded.columns, loaded.columns)
        self.assertEqual(reloaded.colors, loaded.colors)
        self.assertEqual(reloaded.grid, loaded.grid)
        self.assertEqual(reloaded.collector, loaded.collector)
        self.assertEqual(reloaded.info, loaded.info)

    def test_default_dump_is_yaml_mapping(self) -> None:
        data = yaml.safe_load(loader.dump_config(Config()))

        self.assertEqual(data["columns"][0]["matchers"], [{"type": "directory"}])
        self.assertEqual(data["collector"]["timeout"], "100ms")
        self.assertEqual(data["colors"]["diff_added"], "green")


if __name__ == "__main__":
    unittest.main()
