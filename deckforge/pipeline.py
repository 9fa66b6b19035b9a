from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from deckforge.config import Settings, settings as default_settings
from deckforge.errors import ConversionError, InvalidInputError
from deckforge.html.extractor import extract_slides
from deckforge.images.resolver import ImageResolver
from deckforge.models import ConvertOptions, SlideDescription
from deckforge.ppt.builder import build_presentation, save_pptx, to_base64

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionResult:
    data: str
    filename: str


def coerce_slides(slides: Any) -> list[SlideDescription]:
    if slides is None or not isinstance(slides, (list, tuple)):
        raise InvalidInputError("Invalid slides data", "slides must be a list")
    try:
        return [s if isinstance(s, SlideDescription) else SlideDescription.model_validate(s) for s in slides]
    except ValidationError as e:
        raise InvalidInputError("Invalid slides data", str(e)) from e


def coerce_options(options: Any) -> ConvertOptions:
    if options is None:
        return ConvertOptions()
    if isinstance(options, ConvertOptions):
        return options
    try:
        return ConvertOptions.model_validate(options)
    except ValidationError as e:
        raise InvalidInputError("Invalid options", str(e)) from e


def _render(slides: Any, options: Any, resolver: ImageResolver | None, cfg: Settings | None):
    cfg = cfg or default_settings
    descs = coerce_slides(slides)
    opts = coerce_options(options)
    resolver = resolver or ImageResolver.from_settings(cfg)
    try:
        prs = build_presentation(descs, opts, resolver=resolver, cfg=cfg)
    except Exception as e:
        logger.exception("Conversion error")
        raise ConversionError("Failed to convert slides to PPTX", e) from e
    logger.info("rendered %d slide(s)", len(descs))
    return prs, opts


def convert_slides(
    slides: Any,
    options: Any = None,
    *,
    resolver: ImageResolver | None = None,
    cfg: Settings | None = None,
) -> ConversionResult:
    """Render a slide list to a base64 encoded .pptx."""
    prs, _ = _render(slides, options, resolver, cfg)
    try:
        data = to_base64(prs)
    except Exception as e:
        logger.exception("Serialization error")
        raise ConversionError("Failed to convert slides to PPTX", e) from e
    return ConversionResult(data=data, filename=f"presentation_{int(time.time() * 1000)}.pptx")


def render_to_file(
    slides: Any,
    options: Any = None,
    *,
    output_dir: str | None = None,
    resolver: ImageResolver | None = None,
    cfg: Settings | None = None,
) -> str:
    cfg = cfg or default_settings
    prs, opts = _render(slides, options, resolver, cfg)
    return save_pptx(prs, output_dir or cfg.output_dir, opts.title)


def extract(html: Any, *, base_url: str | None = None) -> list[SlideDescription]:
    if not html or not isinstance(html, str) or not html.strip():
        raise InvalidInputError("HTML content is required")
    try:
        return extract_slides(html, base_url=base_url)
    except Exception as e:
        logger.exception("HTML parsing error")
        raise ConversionError("Failed to parse HTML", e) from e
