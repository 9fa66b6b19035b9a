"""Computed style lookup for parsed HTML.

Browsers answer ``getComputedStyle``; here we approximate it for the six
text properties the extractor reads: rules from every ``<style>`` element
(cssutils), matched with soupsieve, ordered by importance, specificity and
source order, then inline ``style=""``, then inheritance from the parent.
Lengths come back in px and colors as ``rgb(r, g, b)``, the same shape a
browser reports. Unset properties come back as ``""``.
"""
from __future__ import annotations

import logging
import re

import cssutils
from bs4 import BeautifulSoup, Tag
from PIL import ImageColor
from soupsieve import SelectorSyntaxError

logger = logging.getLogger(__name__)

TRACKED_PROPERTIES = (
    "font-size",
    "color",
    "font-family",
    "font-weight",
    "font-style",
    "text-align",
)

ROOT_FONT_PX = 16.0

_KEYWORD_SIZES = {
    "xx-small": 9.0,
    "x-small": 10.0,
    "small": 13.0,
    "medium": 16.0,
    "large": 18.0,
    "x-large": 24.0,
    "xx-large": 32.0,
    "xxx-large": 48.0,
}

_LENGTH_RE = re.compile(r"^(-?\d*\.?\d+)\s*(px|pt|em|rem|%)?$", re.IGNORECASE)

# Inline declarations beat any selector.
_INLINE_SPECIFICITY = (1, 0, 0, 0)


def _px_value(value: str | None) -> float | None:
    if not value:
        return None
    m = _LENGTH_RE.match(value.strip())
    if not m or (m.group(2) or "px").lower() != "px":
        return None
    return float(m.group(1))


def _format_px(px: float) -> str:
    return f"{round(px, 4):g}px"


def resolve_font_size(value: str, parent_px: float) -> str:
    v = value.strip().lower()
    if v in _KEYWORD_SIZES:
        return _format_px(_KEYWORD_SIZES[v])
    if v == "larger":
        return _format_px(parent_px * 1.2)
    if v == "smaller":
        return _format_px(parent_px / 1.2)
    m = _LENGTH_RE.match(v)
    if not m:
        return value
    number = float(m.group(1))
    unit = (m.group(2) or "px").lower()
    if unit == "pt":
        number = number * 4.0 / 3.0
    elif unit == "em":
        number = number * parent_px
    elif unit == "rem":
        number = number * ROOT_FONT_PX
    elif unit == "%":
        number = number / 100.0 * parent_px
    return _format_px(number)


def resolve_color(value: str, parent_color: str) -> str:
    v = value.strip()
    if v.lower() == "currentcolor":
        return parent_color
    try:
        rgb = ImageColor.getrgb(v)
    except ValueError:
        return value
    return f"rgb({rgb[0]}, {rgb[1]}, {rgb[2]})"


def resolve_font_weight(value: str, parent_weight: str) -> str:
    v = value.strip().lower()
    if v == "normal":
        return "400"
    if v == "bold":
        return "700"
    if v in ("bolder", "lighter"):
        try:
            base = int(float(parent_weight or "400"))
        except ValueError:
            base = 400
        if v == "bolder":
            return "700" if base < 600 else "900"
        return "400" if base >= 600 else "100"
    return value


class StyleResolver:
    def __init__(self, soup: BeautifulSoup):
        cssutils.log.setLevel(logging.ERROR)
        # id(tag) -> [((important, specificity, order), property, value)]
        self._declared: dict[int, list[tuple[tuple, str, str]]] = {}
        self._computed: dict[int, dict[str, str]] = {}
        self._collect_rules(soup)

    def _collect_rules(self, soup: BeautifulSoup) -> None:
        order = 0
        for style_tag in soup.find_all("style"):
            css_text = style_tag.get_text() or ""
            if not css_text.strip():
                continue
            sheet = cssutils.parseString(css_text)
            for rule in sheet:
                if rule.type != rule.STYLE_RULE:
                    continue
                decls = [
                    (prop.name.lower(), prop.value, prop.priority == "important")
                    for prop in rule.style
                    if prop.name.lower() in TRACKED_PROPERTIES
                ]
                if not decls:
                    continue
                for selector in rule.selectorList:
                    order += 1
                    try:
                        matched = soup.select(selector.selectorText)
                    except (SelectorSyntaxError, NotImplementedError) as e:
                        logger.debug("skipping selector %r: %s", selector.selectorText, e)
                        continue
                    for el in matched:
                        bucket = self._declared.setdefault(id(el), [])
                        for name, value, important in decls:
                            bucket.append(((important, tuple(selector.specificity), order), name, value))

    def _cascade(self, element: Tag) -> dict[str, str]:
        entries = list(self._declared.get(id(element), []))
        inline = element.get("style")
        if inline:
            for decl in str(inline).split(";"):
                if ":" not in decl:
                    continue
                name, value = decl.split(":", 1)
                name = name.strip().lower()
                if name not in TRACKED_PROPERTIES:
                    continue
                value = value.strip()
                important = value.lower().endswith("!important")
                if important:
                    value = value[: -len("!important")].strip()
                entries.append(((important, _INLINE_SPECIFICITY, float("inf")), name, value))

        winners: dict[str, str] = {}
        for _, name, value in sorted(entries, key=lambda e: e[0]):
            winners[name] = value
        return winners

    def computed(self, element: Tag) -> dict[str, str]:
        """Computed values of the tracked properties for ``element``."""
        key = id(element)
        cached = self._computed.get(key)
        if cached is not None:
            return dict(cached)

        parent = element.parent
        if isinstance(parent, Tag) and not isinstance(parent, BeautifulSoup):
            parent_style = self.computed(parent)
        else:
            parent_style = {prop: "" for prop in TRACKED_PROPERTIES}

        declared = self._cascade(element)
        style: dict[str, str] = {}
        for prop in TRACKED_PROPERTIES:
            value = (declared.get(prop) or "").strip()
            keyword = value.lower()
            if not value or keyword in ("inherit", "unset"):
                # All tracked properties inherit.
                style[prop] = parent_style.get(prop, "")
            elif keyword == "initial":
                style[prop] = ""
            elif prop == "font-size":
                parent_px = _px_value(parent_style.get("font-size")) or ROOT_FONT_PX
                style[prop] = resolve_font_size(value, parent_px)
            elif prop == "color":
                style[prop] = resolve_color(value, parent_style.get("color", ""))
            elif prop == "font-weight":
                style[prop] = resolve_font_weight(value, parent_style.get("font-weight", ""))
            else:
                style[prop] = keyword if prop in ("font-style", "text-align") else value

        self._computed[key] = style
        return dict(style)
