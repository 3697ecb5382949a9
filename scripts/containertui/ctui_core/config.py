"""User config loading and command-line overrides."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from ctui_core.theme import THEME_KEYS, ThemeConfig

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_SECONDS = 5


@dataclass
class Config:
    no_nerd_fonts: bool = False
    refresh_seconds: int = DEFAULT_REFRESH_SECONDS
    theme: ThemeConfig = field(default_factory=ThemeConfig)


def default_config_path() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "containertui" / "config.json"


def load_user_config(path: str | None) -> dict:
    """Read the JSON config.

    An explicit path must exist. Without one, the default location is tried
    and a missing file just means no overrides.
    """
    if path:
        config_path = Path(path)
        if not config_path.exists():
            raise ValueError(f"config path not found: {config_path}")
    else:
        config_path = default_config_path()
        if not config_path.exists():
            return {}

    try:
        data = json.loads(config_path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid JSON config: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"config must be a JSON object: {config_path}")
    logger.debug("loaded config from %s", config_path)
    return data


def parse_colors(values: list[str] | None) -> dict[str, str]:
    """Parse ``key=value`` color overrides, comma separated or repeated."""
    colors: dict[str, str] = {}
    for value in values or []:
        for pair in value.split(","):
            pair = pair.strip()
            if not pair:
                continue
            key, sep, color = pair.partition("=")
            key = key.strip()
            color = color.strip()
            if not sep or not key or not color:
                raise ValueError(f"invalid color override (expected key=value): {pair}")
            if "=" in color:
                raise ValueError(f"invalid color override (too many '='): {pair}")
            if key not in THEME_KEYS:
                raise ValueError(f"unknown color key: {key} (expected one of: {', '.join(THEME_KEYS)})")
            colors[key] = color
    return colors


def resolve_config(
    config_path: str | None = None,
    no_nerd_fonts: bool = False,
    colors: list[str] | None = None,
) -> Config:
    user_config = load_user_config(config_path)
    config = Config()

    if "no_nerd_fonts" in user_config:
        config.no_nerd_fonts = bool(user_config["no_nerd_fonts"])
    if no_nerd_fonts:
        config.no_nerd_fonts = True

    if "refresh_seconds" in user_config:
        value = user_config["refresh_seconds"]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("config 'refresh_seconds' must be a number")
        config.refresh_seconds = max(1, int(value))

    theme = user_config.get("theme") or {}
    if not isinstance(theme, dict):
        raise ValueError("config 'theme' must be an object")
    for key, value in theme.items():
        if key not in THEME_KEYS:
            raise ValueError(f"unknown theme key in config: {key}")
        setattr(config.theme, key, str(value))

    for key, value in parse_colors(colors).items():
        setattr(config.theme, key, value)

    return config
