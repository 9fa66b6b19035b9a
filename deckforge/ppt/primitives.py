"""Positioned, paintable elements emitted by the layout catalog.

Geometry is in inches on a 10 x 5.625 slide, colors are 6-digit hex without
``#`` and font sizes are points. A slide's primitives are painted in list
order, so later ones sit on top.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from deckforge.images.resolver import ImageSource


@dataclass(frozen=True)
class TextBox:
    text: str
    x: float
    y: float
    w: float
    h: float
    font_size: float
    color: str
    font_face: str | None = None
    bold: bool = False
    italic: bool = False
    align: str = "left"
    valign: str | None = None


@dataclass(frozen=True)
class Bullet:
    text: str
    font_size: float
    color: str
    indent_level: int = 0


@dataclass(frozen=True)
class BulletList:
    items: tuple[Bullet, ...]
    x: float
    y: float
    w: float
    h: float
    font_size: float
    font_face: str | None = None
    line_spacing: float | None = None


@dataclass(frozen=True)
class Line:
    x: float
    y: float
    w: float
    h: float
    color: str
    width_pt: float = 1.0


@dataclass(frozen=True)
class Rectangle:
    x: float
    y: float
    w: float
    h: float
    fill: str
    line_color: str | None = None
    line_width_pt: float = 1.0


@dataclass(frozen=True)
class Picture:
    source: ImageSource
    x: float
    y: float
    w: float
    h: float
    # Painted instead of the picture when it cannot be embedded.
    fallback: tuple[Union[TextBox, Rectangle], ...] = ()


Primitive = Union[TextBox, BulletList, Line, Rectangle, Picture]
