from __future__ import annotations

import logging
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from deckforge.html.css import StyleResolver
from deckforge.models import BulletItem, ImageRef, SlideDescription, TextBlock
from deckforge.style import BODY_FONT_SIZE, BULLET_FONT_SIZE, normalize_style

logger = logging.getLogger(__name__)

SLIDE_SELECTOR = ".slide"
TITLE_SELECTOR = "h1, h2, .slide-title"
BULLET_SELECTOR = "ul li, ol li, .bullet-point"
IMAGE_SELECTOR = "img"
TEXT_BLOCK_SELECTOR = "p, .text-block"

BULLET_COLOR = "4A5568"
BODY_COLOR = "333333"

# Extracted images have no layout information; park them mid-slide.
EXTRACTED_IMAGE_GEOMETRY = {"x": 3.0, "y": 3.0, "width": 4.0, "height": 3.0}


def _text_of(el: Tag) -> str:
    return el.get_text().strip()


def extract_slide(slide_el: Tag, styles: StyleResolver, *, base_url: str | None = None) -> SlideDescription:
    title = ""
    title_styles = None
    title_el = slide_el.select_one(TITLE_SELECTOR)
    if title_el is not None:
        title = _text_of(title_el)
        title_styles = normalize_style(styles.computed(title_el))

    bullets: list[BulletItem] = []
    for li in slide_el.select(BULLET_SELECTOR):
        st = normalize_style(
            styles.computed(li),
            font_size_default=BULLET_FONT_SIZE,
            color_default=BULLET_COLOR,
        )
        bullets.append(
            BulletItem(text=_text_of(li), font_size=st.font_size, color=st.color, indent_level=0)
        )

    image = None
    img_el = slide_el.select_one(IMAGE_SELECTOR)
    if img_el is not None:
        src = (img_el.get("src") or "").strip()
        if src:
            if base_url:
                src = urljoin(base_url, src)
            image = ImageRef(url=src, **EXTRACTED_IMAGE_GEOMETRY)

    text_blocks: list[TextBlock] = []
    for p in slide_el.select(TEXT_BLOCK_SELECTOR):
        st = normalize_style(
            styles.computed(p),
            font_size_default=BODY_FONT_SIZE,
            color_default=BODY_COLOR,
        )
        text_blocks.append(
            TextBlock(
                text=_text_of(p),
                font_size=st.font_size,
                color=st.color,
                font_family=st.font_family,
                align=st.align,
                bold=st.bold,
                italic=st.italic,
            )
        )

    return SlideDescription(
        title=title,
        title_styles=title_styles,
        bullets=tuple(bullets),
        text_blocks=tuple(text_blocks),
        image=image,
    )


def extract_slides(html: str, *, base_url: str | None = None) -> list[SlideDescription]:
    """One SlideDescription per ``.slide`` element, in document order."""
    soup = BeautifulSoup(html, "lxml")
    styles = StyleResolver(soup)
    slides = [extract_slide(el, styles, base_url=base_url) for el in soup.select(SLIDE_SELECTOR)]
    logger.info("extracted %d slide(s) from %d bytes of markup", len(slides), len(html))
    return slides
