from __future__ import annotations

from enum import Enum
from typing import Any, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Layout(str, Enum):
    TITLE = "title"
    TITLE_CONTENT = "titleContent"
    TWO_COLUMN = "twoColumn"
    COMPARISON = "comparison"
    IMAGE_WITH_TEXT = "imageWithText"
    DEFAULT = "default"

    @classmethod
    def resolve(cls, value: Any) -> "Layout":
        """Map a raw layout value onto the catalog; anything unknown is DEFAULT."""
        if isinstance(value, Layout):
            return value
        if not isinstance(value, str):
            return cls.DEFAULT
        try:
            return cls(value.strip())
        except ValueError:
            return cls.DEFAULT


def _to_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float, bool)):
        return str(value)
    return value


def _to_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


# Point sizes python-pptx accepts; anything else counts as unset.
MIN_FONT_PT = 1.0
MAX_FONT_PT = 4000.0


def _to_font_size(value: Any) -> float | None:
    n = _to_number(value)
    if n is None or not MIN_FONT_PT <= n <= MAX_FONT_PT:
        return None
    return n


def _to_list(value: Any) -> Any:
    if value is None:
        return ()
    return value


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python, immutable once built."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class NormalizedStyle(WireModel):
    font_size: int = 18
    color: str = "333333"
    font_family: str = "Arial"
    bold: bool = False
    italic: bool = False
    align: str = "left"


class BulletItem(WireModel):
    text: str = ""
    font_size: float | None = None
    color: str | None = None
    indent_level: int = 0

    @field_validator("text", "color", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _to_text(v)

    @field_validator("font_size", mode="before")
    @classmethod
    def coerce_size(cls, v: Any) -> float | None:
        return _to_font_size(v)

    @field_validator("indent_level", mode="before")
    @classmethod
    def coerce_indent(cls, v: Any) -> int:
        n = _to_number(v)
        return max(0, int(n)) if n is not None else 0


class TextBlock(WireModel):
    text: str = ""
    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None
    font_size: float | None = None
    color: str | None = None
    align: str | None = None
    bold: bool | None = None
    italic: bool | None = None
    font_family: str | None = None

    @field_validator("text", "color", "align", "font_family", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _to_text(v)

    @field_validator("x", "y", "width", "height", mode="before")
    @classmethod
    def coerce_numbers(cls, v: Any) -> float | None:
        return _to_number(v)

    @field_validator("font_size", mode="before")
    @classmethod
    def coerce_size(cls, v: Any) -> float | None:
        return _to_font_size(v)


class ImageRef(WireModel):
    url: str = ""
    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None

    @field_validator("url", mode="before")
    @classmethod
    def coerce_url(cls, v: Any) -> Any:
        return "" if v is None else _to_text(v)

    @field_validator("x", "y", "width", "height", mode="before")
    @classmethod
    def coerce_numbers(cls, v: Any) -> float | None:
        return _to_number(v)


class SlideDescription(WireModel):
    layout: str | None = None
    index: int | None = None

    title: str | None = None
    subtitle: str | None = None
    text: str | None = None
    title_styles: NormalizedStyle | None = None

    bullets: tuple[Union[str, BulletItem], ...] = ()
    text_blocks: tuple[TextBlock, ...] = ()
    image: ImageRef | None = None

    # twoColumn / comparison
    left_content: str | None = None
    right_content: str | None = None
    left_title: str | None = None
    right_title: str | None = None
    left_bullets: tuple[str, ...] = ()
    right_bullets: tuple[str, ...] = ()

    # Per-slide style overrides
    title_color: str | None = None
    subtitle_color: str | None = None
    content_color: str | None = None
    bullet_color: str | None = None
    font_family: str | None = None
    center_align: bool | None = None

    master_name: str | None = Field(
        default=None,
        alias="masterName",
        validation_alias=AliasChoices("masterName", "theme", "master_name"),
    )

    @field_validator(
        "layout",
        "title",
        "subtitle",
        "text",
        "left_content",
        "right_content",
        "left_title",
        "right_title",
        "title_color",
        "subtitle_color",
        "content_color",
        "bullet_color",
        "font_family",
        "master_name",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _to_text(v)

    @field_validator("index", mode="before")
    @classmethod
    def coerce_index(cls, v: Any) -> int | None:
        n = _to_number(v)
        return int(n) if n is not None else None

    @field_validator("bullets", mode="before")
    @classmethod
    def coerce_bullets(cls, v: Any) -> Any:
        v = _to_list(v)
        if not isinstance(v, (list, tuple)):
            return v
        return [_to_text(b) for b in v if b is not None]

    @field_validator("left_bullets", "right_bullets", mode="before")
    @classmethod
    def coerce_plain_bullets(cls, v: Any) -> Any:
        v = _to_list(v)
        if not isinstance(v, (list, tuple)):
            return v
        out = []
        for b in v:
            if isinstance(b, dict):
                b = b.get("text")
            if b is None:
                continue
            out.append(_to_text(b))
        return out

    @field_validator("text_blocks", mode="before")
    @classmethod
    def coerce_blocks(cls, v: Any) -> Any:
        v = _to_list(v)
        if not isinstance(v, (list, tuple)):
            return v
        return [{"text": b} if isinstance(b, str) else b for b in v if b is not None]

    @field_validator("image", mode="before")
    @classmethod
    def coerce_image(cls, v: Any) -> Any:
        if isinstance(v, str):
            return {"url": v}
        return v

    @property
    def resolved_layout(self) -> Layout:
        return Layout.resolve(self.layout)


class ConvertOptions(WireModel):
    author: str | None = None
    company: str | None = None
    title: str | None = None
    subject: str | None = None
    revision: int | None = None
    theme: str | None = None

    @field_validator("author", "company", "title", "subject", "theme", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _to_text(v)

    @field_validator("revision", mode="before")
    @classmethod
    def coerce_revision(cls, v: Any) -> int | None:
        # "1.0.0" style strings keep their major number.
        if isinstance(v, str):
            v = v.strip().split(".", 1)[0]
        n = _to_number(v)
        return max(1, int(n)) if n is not None else None


class ConvertRequest(WireModel):
    slides: list[SlideDescription]
    options: ConvertOptions = Field(default_factory=ConvertOptions)


class ConvertResponse(WireModel):
    success: bool = True
    data: str
    filename: str


class ParseHtmlRequest(WireModel):
    html: str = ""
    base_url: str | None = None


class ParseHtmlResponse(WireModel):
    success: bool = True
    slides: list[SlideDescription]


class ErrorResponse(WireModel):
    error: str
    details: str | None = None
