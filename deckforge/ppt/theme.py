from __future__ import annotations

from dataclasses import dataclass


def _hex_to_rgb(value: str) -> tuple[int, int, int]:
    v = value.strip().lstrip("#")
    if len(v) != 6:
        raise ValueError(f"Invalid hex color: {value}")
    return (int(v[0:2], 16), int(v[2:4], 16), int(v[4:6], 16))


@dataclass(frozen=True)
class Theme:
    """A slide background template, referenced by ``masterName``."""

    name: str = "MASTER_SLIDE"
    background_rgb: tuple[int, int, int] = (255, 255, 255)
    # Linear gradient stops; when set they replace the solid background.
    gradient_rgb: tuple[tuple[int, int, int], ...] = ()
    gradient_angle: float = 0.0


@dataclass(frozen=True)
class StyleDefaults:
    """Fallback typography and colors for fields a slide leaves unset."""

    font_face: str = "Calibri"
    block_font_face: str = "Arial"
    title_color: str = "2D3748"
    content_color: str = "4A5568"
    block_color: str = "333333"
    rule_color: str = "4472C4"
    comparison_left_color: str = "1F4E79"
    comparison_right_color: str = "70AD47"


DEFAULT_STYLE = StyleDefaults()

THEME_PRESETS: dict[str, Theme] = {
    "MASTER_SLIDE": Theme(
        name="MASTER_SLIDE",
        background_rgb=_hex_to_rgb("#FFFFFF"),
    ),
    "DARK_MASTER": Theme(
        name="DARK_MASTER",
        background_rgb=_hex_to_rgb("#1A202C"),
    ),
    "GRADIENT_MASTER": Theme(
        name="GRADIENT_MASTER",
        background_rgb=_hex_to_rgb("#667EEA"),
        gradient_rgb=(_hex_to_rgb("#667EEA"), _hex_to_rgb("#764BA2")),
        gradient_angle=135.0,
    ),
}

THEME_ALIASES: dict[str, str] = {
    "plain": "MASTER_SLIDE",
    "default": "MASTER_SLIDE",
    "dark": "DARK_MASTER",
    "gradient": "GRADIENT_MASTER",
}


def _lookup(name: str | None) -> Theme | None:
    if not name:
        return None
    key = name.strip()
    return THEME_PRESETS.get(THEME_ALIASES.get(key.lower(), key))


def get_theme(name: str | None, fallback: str | None = "MASTER_SLIDE") -> Theme:
    return _lookup(name) or _lookup(fallback) or THEME_PRESETS["MASTER_SLIDE"]


def available_themes() -> list[str]:
    return sorted(THEME_PRESETS.keys())
