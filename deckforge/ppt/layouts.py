"""The fixed layout catalog.

Each layout maps a SlideDescription to an ordered list of primitives. All
geometry is constant per field; nothing is measured, so long text can
overflow its box. Empty strings and empty lists count as absent, and so do
bullet items and text blocks whose text is blank.

Besides its own primitives, every layout except ``title`` and ``comparison``
gets the generic overlay pass (``overlay_primitives``): top-level bullets,
text blocks and the generic image are rendered on top of the layout's own
elements. ``imageWithText`` places ``image`` itself, so the overlay skips the
image there.
"""
from __future__ import annotations

from deckforge.images.resolver import ImageSource
from deckforge.models import BulletItem, Layout, SlideDescription, TextBlock
from deckforge.ppt.primitives import (Bullet, BulletList, Line, Picture,
                                      Primitive, Rectangle, TextBox)
from deckforge.ppt.theme import DEFAULT_STYLE, StyleDefaults
from deckforge.style import BODY_FONT_SIZE, BULLET_FONT_SIZE, coerce_hex

LAYOUT_NAMES: dict[Layout, str] = {
    Layout.TITLE: "Title Slide",
    Layout.TITLE_CONTENT: "Title and Content",
    Layout.TWO_COLUMN: "Two Column",
    Layout.COMPARISON: "Comparison",
    Layout.IMAGE_WITH_TEXT: "Image with Text",
    Layout.DEFAULT: "Default",
}

NO_OVERLAY = frozenset({Layout.TITLE, Layout.COMPARISON})

PLACEHOLDER_CAPTION_COLOR = "666666"
LINE_SPACING_PT = 32


def has_overlay(layout: Layout) -> bool:
    return layout not in NO_OVERLAY


def wants_image(slide: SlideDescription) -> bool:
    """True if rendering this slide will paint ``slide.image``."""
    if slide.image is None or not slide.image.url.strip():
        return False
    layout = slide.resolved_layout
    return layout is Layout.IMAGE_WITH_TEXT or has_overlay(layout)


def font_face(value: str | None, default: str) -> str:
    # CSS font-family lists: keep the first family, unquoted.
    if not value:
        return default
    first = value.split(",", 1)[0].strip().strip("'\"").strip()
    return first or default


def _placeholder(
    x: float,
    y: float,
    w: float,
    h: float,
    *,
    caption: str,
    fill: str,
    border: str,
    caption_size: float,
    caption_h: float,
) -> tuple[Rectangle, TextBox]:
    return (
        Rectangle(x, y, w, h, fill=fill, line_color=border, line_width_pt=1),
        TextBox(
            caption,
            x,
            y + h / 2 - caption_h / 2,
            w,
            caption_h,
            font_size=caption_size,
            color=PLACEHOLDER_CAPTION_COLOR,
            align="center",
        ),
    )


def _title_with_rule(slide: SlideDescription, defaults: StyleDefaults, *, align: str) -> list[Primitive]:
    if not slide.title:
        return []
    return [
        TextBox(
            slide.title,
            0.5,
            0.5,
            9,
            0.8,
            font_size=28,
            color=coerce_hex(slide.title_color, defaults.title_color),
            font_face=font_face(slide.font_family, defaults.font_face),
            bold=True,
            align=align,
        ),
        Line(0.5, 1.3, 9, 0, color=defaults.rule_color, width_pt=2),
    ]


def _column_text(text: str, x: float, h: float, slide: SlideDescription, defaults: StyleDefaults) -> TextBox:
    return TextBox(
        text,
        x,
        1.8,
        4.2,
        h,
        font_size=14,
        color=coerce_hex(slide.content_color, defaults.content_color),
        font_face=font_face(slide.font_family, defaults.font_face),
        align="left",
        valign="top",
    )


def layout_title(slide: SlideDescription, defaults: StyleDefaults = DEFAULT_STYLE, image: ImageSource | None = None) -> list[Primitive]:
    align = "left" if slide.center_align is False else "center"
    face = font_face(slide.font_family, defaults.font_face)
    out: list[Primitive] = []
    if slide.title:
        out.append(
            TextBox(
                slide.title,
                1,
                2.5,
                8,
                1.5,
                font_size=40,
                color=coerce_hex(slide.title_color, defaults.title_color),
                font_face=face,
                bold=True,
                align=align,
            )
        )
    if slide.subtitle:
        out.append(
            TextBox(
                slide.subtitle,
                1,
                4,
                8,
                1,
                font_size=24,
                color=coerce_hex(slide.subtitle_color, defaults.content_color),
                font_face=face,
                align=align,
            )
        )
    return out


def layout_title_content(slide: SlideDescription, defaults: StyleDefaults = DEFAULT_STYLE, image: ImageSource | None = None) -> list[Primitive]:
    # Bullets for this layout come from the overlay pass.
    return _title_with_rule(slide, defaults, align="center" if slide.center_align else "left")


def layout_two_column(slide: SlideDescription, defaults: StyleDefaults = DEFAULT_STYLE, image: ImageSource | None = None) -> list[Primitive]:
    out = _title_with_rule(slide, defaults, align="left")
    if slide.left_content:
        out.append(_column_text(slide.left_content, 0.5, 4, slide, defaults))
    if slide.right_content:
        out.append(_column_text(slide.right_content, 5, 4, slide, defaults))
    return out


def _comparison_column(items: tuple[str, ...], x: float, face: str, defaults: StyleDefaults) -> BulletList | None:
    bullets = tuple(Bullet(text, font_size=16, color=defaults.content_color) for text in items if text.strip())
    if not bullets:
        return None
    return BulletList(
        bullets,
        x,
        2.3,
        4.2,
        3.5,
        font_size=16,
        font_face=face,
        line_spacing=LINE_SPACING_PT,
    )


def layout_comparison(slide: SlideDescription, defaults: StyleDefaults = DEFAULT_STYLE, image: ImageSource | None = None) -> list[Primitive]:
    face = font_face(slide.font_family, defaults.font_face)
    out: list[Primitive] = []
    if slide.title:
        out.append(
            TextBox(
                slide.title,
                0.5,
                0.5,
                9,
                0.8,
                font_size=28,
                color=coerce_hex(slide.title_color, defaults.title_color),
                font_face=face,
                bold=True,
                align="center",
            )
        )
    # Header colors are fixed per side.
    for text, x, color in (
        (slide.left_title, 0.5, defaults.comparison_left_color),
        (slide.right_title, 5, defaults.comparison_right_color),
    ):
        if text:
            out.append(
                TextBox(text, x, 1.5, 4.2, 0.6, font_size=20, color=color, font_face=face, bold=True, align="center")
            )
    for items, x in ((slide.left_bullets, 0.5), (slide.right_bullets, 5)):
        column = _comparison_column(items, x, face, defaults)
        if column is not None:
            out.append(column)
    return out


def layout_image_with_text(slide: SlideDescription, defaults: StyleDefaults = DEFAULT_STYLE, image: ImageSource | None = None) -> list[Primitive]:
    out = _title_with_rule(slide, defaults, align="left")
    if image is not None:
        x, y, w, h = 0.5, 1.8, 4, 3.5
        out.append(
            Picture(
                image,
                x,
                y,
                w,
                h,
                fallback=_placeholder(
                    x, y, w, h,
                    caption="Image Placeholder",
                    fill="E0E0E0",
                    border="999999",
                    caption_size=14,
                    caption_h=0.5,
                ),
            )
        )
    if slide.text:
        out.append(_column_text(slide.text, 5, 3.5, slide, defaults))
    return out


def _bullet_text(item: str | BulletItem) -> str:
    return item if isinstance(item, str) else item.text


def _bullet(item: str | BulletItem, slide: SlideDescription, defaults: StyleDefaults) -> Bullet:
    if isinstance(item, str):
        return Bullet(item, font_size=BULLET_FONT_SIZE, color=coerce_hex(slide.bullet_color, defaults.content_color))
    color = slide.bullet_color or item.color
    return Bullet(
        item.text,
        font_size=item.font_size or BULLET_FONT_SIZE,
        color=coerce_hex(color, defaults.content_color),
        indent_level=item.indent_level,
    )


def _text_block(block: TextBlock, defaults: StyleDefaults) -> TextBox:
    return TextBox(
        block.text,
        block.x or 0.5,
        block.y or 2,
        block.width or 9,
        block.height or 1,
        font_size=block.font_size or BODY_FONT_SIZE,
        color=coerce_hex(block.color, defaults.block_color),
        font_face=font_face(block.font_family, defaults.block_font_face),
        bold=bool(block.bold),
        italic=bool(block.italic),
        align=block.align or "left",
    )


def overlay_primitives(slide: SlideDescription, defaults: StyleDefaults = DEFAULT_STYLE, image: ImageSource | None = None) -> list[Primitive]:
    """Generic bullets / text blocks / image, layered after the layout's own output."""
    layout = slide.resolved_layout
    if not has_overlay(layout):
        return []

    out: list[Primitive] = []
    bullets = tuple(_bullet(b, slide, defaults) for b in slide.bullets if _bullet_text(b).strip())
    if bullets:
        out.append(
            BulletList(
                bullets,
                0.5,
                1.8 if slide.title else 1.0,
                9,
                4.5,
                font_size=BULLET_FONT_SIZE,
                font_face=font_face(slide.font_family, defaults.font_face),
                line_spacing=LINE_SPACING_PT,
            )
        )

    for block in slide.text_blocks:
        if not block.text.strip():
            continue
        out.append(_text_block(block, defaults))

    if image is not None and slide.image is not None and layout is not Layout.IMAGE_WITH_TEXT:
        ref = slide.image
        x = ref.x or 1
        y = ref.y or 3
        w = ref.width or 3
        h = ref.height or 2
        out.append(
            Picture(
                image,
                x,
                y,
                w,
                h,
                fallback=_placeholder(
                    x, y, w, h,
                    caption="Image Error",
                    fill="F0F0F0",
                    border="CCCCCC",
                    caption_size=12,
                    caption_h=0.4,
                ),
            )
        )
    return out


def layout_primitives(slide: SlideDescription, defaults: StyleDefaults = DEFAULT_STYLE, image: ImageSource | None = None) -> list[Primitive]:
    layout = slide.resolved_layout
    if layout is Layout.TITLE:
        return layout_title(slide, defaults, image)
    if layout is Layout.TWO_COLUMN:
        return layout_two_column(slide, defaults, image)
    if layout is Layout.COMPARISON:
        return layout_comparison(slide, defaults, image)
    if layout is Layout.IMAGE_WITH_TEXT:
        return layout_image_with_text(slide, defaults, image)
    # titleContent and anything unrecognized
    return layout_title_content(slide, defaults, image)


def slide_primitives(slide: SlideDescription, defaults: StyleDefaults = DEFAULT_STYLE, image: ImageSource | None = None) -> list[Primitive]:
    """Everything painted on one slide, in paint order."""
    return layout_primitives(slide, defaults, image) + overlay_primitives(slide, defaults, image)
