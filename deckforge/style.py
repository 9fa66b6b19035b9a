"""Turn computed CSS values into the handful of attributes a slide cares about.

Everything here degrades to a default instead of raising: a malformed style
string on one element must never cost the caller a slide.
"""
from __future__ import annotations

import re
from typing import Mapping

from deckforge.models import NormalizedStyle

BULLET_FONT_SIZE = 18
BODY_FONT_SIZE = 14
DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_ALIGN = "left"

_RGB_RE = re.compile(
    r"^rgba?\(\s*(\d+(?:\.\d+)?)\s*,\s*(\d+(?:\.\d+)?)\s*,\s*(\d+(?:\.\d+)?)\s*(?:,\s*[\d.]+%?\s*)?\)$",
    re.IGNORECASE,
)
_HEX6_RE = re.compile(r"^[0-9a-fA-F]{6}$")
_HEX3_RE = re.compile(r"^[0-9a-fA-F]{3}$")
_SIZE_RE = re.compile(r"^\s*(\d+)")


def parse_font_size(value: str | None, default: int) -> int:
    """Integer numeric prefix of a CSS length ("24px" -> 24)."""
    if not value:
        return default
    m = _SIZE_RE.match(str(value))
    if not m:
        return default
    size = int(m.group(1))
    return size if size > 0 else default


def to_hex_color(value: str | None, fallback: str) -> str:
    if not value:
        return fallback
    v = str(value).strip()
    if v.startswith("#"):
        return v[1:]
    m = _RGB_RE.match(v)
    if m:
        channels = [max(0, min(255, int(float(c)))) for c in m.groups()]
        return "".join(f"{c:02X}" for c in channels)
    if _HEX6_RE.match(v):
        return v
    return fallback


def coerce_hex(value: str | None, fallback: str) -> str:
    """Like to_hex_color, but only ever returns something RGBColor can load."""
    v = to_hex_color(value, fallback)
    if _HEX6_RE.match(v):
        return v.upper()
    if _HEX3_RE.match(v):
        return "".join(ch * 2 for ch in v).upper()
    return fallback


def is_bold(weight: str | None) -> bool:
    if not weight:
        return False
    w = str(weight).strip()
    if w == "bold":
        return True
    try:
        return int(float(w)) >= 700
    except ValueError:
        return False


def normalize_style(
    raw: Mapping[str, str] | None,
    *,
    font_size_default: int = BULLET_FONT_SIZE,
    color_default: str = "333333",
) -> NormalizedStyle:
    raw = raw or {}
    return NormalizedStyle(
        font_size=parse_font_size(raw.get("font-size"), font_size_default),
        color=to_hex_color(raw.get("color"), color_default),
        font_family=(raw.get("font-family") or "").strip() or DEFAULT_FONT_FAMILY,
        bold=is_bold(raw.get("font-weight")),
        italic=(raw.get("font-style") or "").strip() == "italic",
        align=(raw.get("text-align") or "").strip() or DEFAULT_ALIGN,
    )
