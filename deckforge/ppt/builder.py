from __future__ import annotations

import base64
import logging
import os
import re
from datetime import datetime, timezone
from io import BytesIO
from typing import Iterable

from lxml import etree
from PIL import Image
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_AUTO_SHAPE_TYPE, MSO_CONNECTOR
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.util import Emu, Inches, Pt

from deckforge.config import Settings, settings as default_settings
from deckforge.images.resolver import EMBEDDED, PATH, ImageResolver, ImageSource
from deckforge.models import ConvertOptions, SlideDescription
from deckforge.ppt.layouts import slide_primitives, wants_image
from deckforge.ppt.primitives import (BulletList, Line, Picture, Primitive,
                                      Rectangle, TextBox)
from deckforge.ppt.theme import DEFAULT_STYLE, StyleDefaults, Theme, get_theme

logger = logging.getLogger(__name__)

# 16:9, the geometry every layout is written against.
SLIDE_WIDTH_IN = 10.0
SLIDE_HEIGHT_IN = 5.625

_EXTENDED_PROPS_NS = "http://schemas.openxmlformats.org/officeDocument/2006/extended-properties"

_ALIGN = {
    "left": PP_ALIGN.LEFT,
    "start": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
    "end": PP_ALIGN.RIGHT,
    "justify": PP_ALIGN.JUSTIFY,
}

_VALIGN = {
    "top": MSO_ANCHOR.TOP,
    "middle": MSO_ANCHOR.MIDDLE,
    "bottom": MSO_ANCHOR.BOTTOM,
}

# Formats python-pptx embeds as-is; anything else is re-encoded to PNG.
_NATIVE_FORMATS = {"PNG", "JPEG", "GIF", "BMP", "TIFF"}

_BULLET_MARGIN = Inches(0.375)
_BULLET_LEVEL_STEP = Inches(0.5)


def _safe_filename(name: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("_")
    return cleaned or "deck"


def _set_rgb(color_format, hex_value: str) -> None:
    color_format.rgb = RGBColor.from_string(hex_value)


def _set_bg(slide, theme: Theme) -> None:
    fill = slide.background.fill
    if theme.gradient_rgb:
        fill.gradient()
        fill.gradient_angle = theme.gradient_angle
        for stop, rgb in zip(fill.gradient_stops, theme.gradient_rgb):
            stop.color.rgb = RGBColor(rgb[0], rgb[1], rgb[2])
        return
    fill.solid()
    fill.fore_color.rgb = RGBColor(theme.background_rgb[0], theme.background_rgb[1], theme.background_rgb[2])


def _style_font(font, *, size: float, color: str, face: str | None, bold: bool = False, italic: bool = False) -> None:
    font.size = Pt(size)
    _set_rgb(font.color, color)
    if face:
        font.name = face
    font.bold = bold
    font.italic = italic


def _set_bullet(paragraph, level: int) -> None:
    level = max(0, min(level, 8))
    paragraph.level = level
    pPr = paragraph._p.get_or_add_pPr()
    pPr.set("marL", str(int(_BULLET_MARGIN + level * _BULLET_LEVEL_STEP)))
    pPr.set("indent", str(-int(_BULLET_MARGIN)))
    bu = etree.SubElement(pPr, qn("a:buChar"))
    bu.set("char", "•")


def paint_text(slide, p: TextBox) -> None:
    tb = slide.shapes.add_textbox(Inches(p.x), Inches(p.y), Inches(p.w), Inches(p.h))
    tf = tb.text_frame
    tf.word_wrap = True
    if p.valign:
        tf.vertical_anchor = _VALIGN.get(p.valign, MSO_ANCHOR.TOP)
    for i, line in enumerate(p.text.split("\n")):
        para = tf.paragraphs[0] if i == 0 else tf.add_paragraph()
        para.alignment = _ALIGN.get(p.align.lower(), PP_ALIGN.LEFT)
        run = para.add_run()
        run.text = line
        _style_font(run.font, size=p.font_size, color=p.color, face=p.font_face, bold=p.bold, italic=p.italic)


def paint_bullets(slide, p: BulletList) -> None:
    tb = slide.shapes.add_textbox(Inches(p.x), Inches(p.y), Inches(p.w), Inches(p.h))
    tf = tb.text_frame
    tf.word_wrap = True
    for i, item in enumerate(p.items):
        para = tf.paragraphs[0] if i == 0 else tf.add_paragraph()
        _set_bullet(para, item.indent_level)
        if p.line_spacing:
            para.line_spacing = Pt(p.line_spacing)
        run = para.add_run()
        run.text = item.text
        _style_font(run.font, size=item.font_size or p.font_size, color=item.color, face=p.font_face)


def paint_line(slide, p: Line) -> None:
    conn = slide.shapes.add_connector(
        MSO_CONNECTOR.STRAIGHT,
        Inches(p.x),
        Inches(p.y),
        Inches(p.x + p.w),
        Inches(p.y + p.h),
    )
    _set_rgb(conn.line.color, p.color)
    conn.line.width = Pt(p.width_pt)


def paint_rectangle(slide, p: Rectangle) -> None:
    shape = slide.shapes.add_shape(
        MSO_AUTO_SHAPE_TYPE.RECTANGLE, Inches(p.x), Inches(p.y), Inches(p.w), Inches(p.h)
    )
    shape.fill.solid()
    _set_rgb(shape.fill.fore_color, p.fill)
    if p.line_color:
        _set_rgb(shape.line.color, p.line_color)
        shape.line.width = Pt(p.line_width_pt)
    else:
        shape.line.fill.background()


def _image_bytes(source: ImageSource) -> bytes:
    if source.kind == EMBEDDED and source.data is not None:
        return source.data
    if source.kind == PATH and source.path:
        path = source.path
        if path.startswith("file://"):
            path = path[len("file://"):]
        with open(path, "rb") as f:
            return f.read()
    raise ValueError(source.reason or "no image data")


def _contain(img_w: int, img_h: int, p: Picture) -> tuple[int, int, int, int]:
    """Fit the image inside the box, aspect preserved, centered."""
    box_w, box_h = Inches(p.w), Inches(p.h)
    if img_w <= 0 or img_h <= 0 or box_w <= 0 or box_h <= 0:
        return Inches(p.x), Inches(p.y), box_w, box_h
    scale = min(box_w / img_w, box_h / img_h)
    width, height = int(img_w * scale), int(img_h * scale)
    left = Inches(p.x) + (box_w - width) // 2
    top = Inches(p.y) + (box_h - height) // 2
    return Emu(left), Emu(top), Emu(width), Emu(height)


def paint_picture(slide, p: Picture) -> None:
    try:
        data = _image_bytes(p.source)
        img = Image.open(BytesIO(data))
        size = img.size
        if img.format not in _NATIVE_FORMATS:
            buf = BytesIO()
            img.convert("RGBA").save(buf, format="PNG")
            data = buf.getvalue()
        left, top, width, height = _contain(size[0], size[1], p)
        slide.shapes.add_picture(BytesIO(data), left, top, width=width, height=height)
    except Exception as e:
        logger.warning("image could not be embedded (%s: %s); painting placeholder", type(e).__name__, e)
        paint_all(slide, p.fallback)


def paint(slide, primitive: Primitive) -> None:
    if isinstance(primitive, TextBox):
        paint_text(slide, primitive)
    elif isinstance(primitive, BulletList):
        paint_bullets(slide, primitive)
    elif isinstance(primitive, Line):
        paint_line(slide, primitive)
    elif isinstance(primitive, Rectangle):
        paint_rectangle(slide, primitive)
    elif isinstance(primitive, Picture):
        paint_picture(slide, primitive)
    else:
        raise TypeError(f"Unknown primitive: {type(primitive).__name__}")


def paint_all(slide, primitives: Iterable[Primitive]) -> None:
    for primitive in primitives:
        paint(slide, primitive)


def _set_company(prs, company: str) -> None:
    # python-pptx has no API for docProps/app.xml; edit the raw part.
    for part in prs.part.package.iter_parts():
        if str(part.partname) != "/docProps/app.xml":
            continue
        root = etree.fromstring(part.blob)
        node = root.find(f"{{{_EXTENDED_PROPS_NS}}}Company")
        if node is None:
            node = etree.SubElement(root, f"{{{_EXTENDED_PROPS_NS}}}Company")
        node.text = company
        part._blob = etree.tostring(root, xml_declaration=True, encoding="UTF-8", standalone=True)
        return


def _set_metadata(prs, options: ConvertOptions, cfg: Settings) -> None:
    props = prs.core_properties
    props.author = options.author or cfg.default_author
    props.title = options.title or "Presentation"
    props.subject = options.subject or "Converted Presentation"
    props.revision = options.revision or 1
    company = options.company if options.company is not None else cfg.default_company
    if company:
        _set_company(prs, company)


def build_presentation(
    slides: Iterable[SlideDescription],
    options: ConvertOptions | None = None,
    *,
    resolver: ImageResolver,
    defaults: StyleDefaults = DEFAULT_STYLE,
    cfg: Settings | None = None,
):
    cfg = cfg or default_settings
    options = options or ConvertOptions()

    prs = Presentation()
    prs.slide_width = Inches(SLIDE_WIDTH_IN)
    prs.slide_height = Inches(SLIDE_HEIGHT_IN)
    _set_metadata(prs, options, cfg)

    blank_layout = prs.slide_layouts[6]
    deck_theme = options.theme or cfg.default_theme

    for desc in slides:
        slide = prs.slides.add_slide(blank_layout)
        _set_bg(slide, get_theme(desc.master_name, fallback=deck_theme))

        image = resolver.resolve(desc.image.url) if wants_image(desc) else None
        primitives = slide_primitives(desc, defaults, image)
        logger.debug(
            "slide layout=%s primitives=%d image=%s",
            desc.resolved_layout.value,
            len(primitives),
            image.kind if image else None,
        )
        paint_all(slide, primitives)

    return prs


def to_bytes(prs) -> bytes:
    buf = BytesIO()
    prs.save(buf)
    return buf.getvalue()


def to_base64(prs) -> str:
    return base64.b64encode(to_bytes(prs)).decode("ascii")


def save_pptx(prs, output_dir: str, title: str | None = None) -> str:
    os.makedirs(output_dir, exist_ok=True)
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    filename = f"{_safe_filename(title or 'presentation')}_{ts}.pptx"
    out_path = os.path.join(output_dir, filename)
    prs.save(out_path)
    return out_path
