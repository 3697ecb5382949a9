"""Theme color resolution."""

from __future__ import annotations

from dataclasses import dataclass, fields

from rich.color import Color, ColorParseError

THEME_KEYS = ("primary", "border", "text", "muted", "selected", "success", "warning", "error")

DEFAULT_COLORS = {
    "primary": "bright_blue",
    "border": "grey50",
    "text": "white",
    "muted": "grey50",
    "success": "bright_green",
    "warning": "bright_yellow",
    "error": "bright_red",
}


@dataclass
class ThemeConfig:
    """User color overrides. Empty strings fall back to the defaults."""

    primary: str = ""
    border: str = ""
    text: str = ""
    muted: str = ""
    selected: str = ""
    success: str = ""
    warning: str = ""
    error: str = ""

    def to_dict(self) -> dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def validate_color(value: str) -> str:
    try:
        Color.parse(value)
    except ColorParseError as exc:
        raise ValueError(f"invalid color: {value!r}") from exc
    return value


@dataclass(frozen=True)
class Theme:
    primary: str
    border: str
    text: str
    muted: str
    selected: str
    success: str
    warning: str
    error: str

    @classmethod
    def from_config(cls, config: ThemeConfig | None = None) -> Theme:
        overrides = config.to_dict() if config else {}
        resolved: dict[str, str] = {}
        for key in THEME_KEYS:
            value = overrides.get(key) or ""
            if value:
                resolved[key] = validate_color(value)
            elif key == "selected":
                resolved[key] = resolved["primary"]
            else:
                resolved[key] = DEFAULT_COLORS[key]
        return cls(**resolved)

    def for_level(self, level: str) -> str:
        return {"error": self.error, "success": self.success, "warning": self.warning}.get(level, self.primary)
