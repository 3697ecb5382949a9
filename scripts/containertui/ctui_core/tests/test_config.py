from __future__ import annotations

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from ctui_core.config import DEFAULT_REFRESH_SECONDS, load_user_config, parse_colors, resolve_config  # noqa: E402
from ctui_core.theme import DEFAULT_COLORS, Theme, ThemeConfig  # noqa: E402


class ConfigTests(unittest.TestCase):
    def test_missing_explicit_path_fails(self):
        with self.assertRaisesRegex(ValueError, "config path not found"):
            load_user_config("/nonexistent/containertui.json")

    def test_missing_default_path_is_empty(self):
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.dict(os.environ, {"XDG_CONFIG_HOME": tmp}):
                self.assertEqual(load_user_config(None), {})

    def test_default_path_is_read(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg_dir = Path(tmp) / "containertui"
            cfg_dir.mkdir()
            (cfg_dir / "config.json").write_text(json.dumps({"no_nerd_fonts": True}))
            with mock.patch.dict(os.environ, {"XDG_CONFIG_HOME": tmp}):
                self.assertTrue(resolve_config().no_nerd_fonts)

    def test_invalid_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg_path = Path(tmp) / "cfg.json"
            cfg_path.write_text("{nope")
            with self.assertRaisesRegex(ValueError, "invalid JSON config"):
                load_user_config(str(cfg_path))

    def test_file_then_flags(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg_path = Path(tmp) / "cfg.json"
            cfg_path.write_text(json.dumps({"refresh_seconds": 0, "theme": {"primary": "cyan", "error": "red"}}))
            config = resolve_config(str(cfg_path), no_nerd_fonts=True, colors=["primary=magenta"])
            self.assertTrue(config.no_nerd_fonts)
            self.assertEqual(config.refresh_seconds, 1)
            self.assertEqual(config.theme.primary, "magenta")
            self.assertEqual(config.theme.error, "red")

    def test_unknown_theme_key_in_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg_path = Path(tmp) / "cfg.json"
            cfg_path.write_text(json.dumps({"theme": {"sparkle": "gold"}}))
            with self.assertRaises(ValueError):
                resolve_config(str(cfg_path))

    def test_refresh_seconds_must_be_a_number(self):
        with tempfile.TemporaryDirectory() as tmp:
            cfg_path = Path(tmp) / "cfg.json"
            cfg_path.write_text(json.dumps({"refresh_seconds": "soon"}))
            with self.assertRaisesRegex(ValueError, "refresh_seconds"):
                resolve_config(str(cfg_path))

    def test_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.dict(os.environ, {"XDG_CONFIG_HOME": tmp}):
                config = resolve_config()
        self.assertFalse(config.no_nerd_fonts)
        self.assertEqual(config.refresh_seconds, DEFAULT_REFRESH_SECONDS)


class ParseColorsTests(unittest.TestCase):
    def test_comma_separated_and_repeated(self):
        colors = parse_colors(["primary=#ff0000, muted=grey50", "error=red"])
        self.assertEqual(colors, {"primary": "#ff0000", "muted": "grey50", "error": "red"})

    def test_rejects_bad_pairs(self):
        for bad in ["primary", "=red", "primary=", "primary=red=blue", "sparkle=red"]:
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    parse_colors([bad])

    def test_none(self):
        self.assertEqual(parse_colors(None), {})


class ThemeTests(unittest.TestCase):
    def test_selected_falls_back_to_primary(self):
        theme = Theme.from_config(ThemeConfig(primary="cyan"))
        self.assertEqual(theme.selected, "cyan")
        self.assertEqual(theme.error, DEFAULT_COLORS["error"])

    def test_invalid_color(self):
        with self.assertRaises(ValueError):
            Theme.from_config(ThemeConfig(text="not-a-color"))


if __name__ == "__main__":
    unittest.main()
