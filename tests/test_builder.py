"""
End-to-end rendering tests: convert, then read the deck back with python-pptx.
"""

import base64
from io import BytesIO

import pytest
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.dml import MSO_FILL
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pptx.util import Inches, Pt

from deckforge.errors import ConversionError, InvalidInputError
from deckforge.images.resolver import ImageResolver
from deckforge.pipeline import convert_slides, extract, render_to_file
from deckforge.ppt import builder

from conftest import FakeResponse, FakeSession


def _load(result):
    return Presentation(BytesIO(base64.b64decode(result.data)))


def _texts(slide):
    return [shape.text_frame.text for shape in slide.shapes if shape.has_text_frame]


class TestConvertSlides:
    """The whole pipeline, read back from the produced bytes."""

    def test_title_slide_has_two_shapes(self, resolver):
        result = convert_slides([{"layout": "title", "title": "Hello", "subtitle": "World"}], resolver=resolver)
        assert result.filename.startswith("presentation_")
        assert result.filename.endswith(".pptx")
        prs = _load(result)
        assert prs.slide_width == Inches(10)
        assert prs.slide_height == Inches(5.625)
        slide = prs.slides[0]
        assert len(slide.shapes) == 2
        assert all(shape.shape_type == MSO_SHAPE_TYPE.TEXT_BOX for shape in slide.shapes)
        assert _texts(slide) == ["Hello", "World"]

    def test_comparison_columns(self, resolver):
        result = convert_slides(
            [{"layout": "comparison", "leftBullets": ["A"], "rightBullets": ["B"]}],
            resolver=resolver,
        )
        shapes = list(_load(result).slides[0].shapes)
        assert len(shapes) == 2
        by_text = {shape.text_frame.text: shape for shape in shapes}
        assert set(by_text) == {"A", "B"}
        assert by_text["A"].left == Inches(0.5)
        assert by_text["B"].left == Inches(5)
        assert len(by_text["A"].text_frame.paragraphs) == 1

    def test_bullets_are_native(self, resolver):
        result = convert_slides([{"title": "T", "bullets": ["one", "two"]}], resolver=resolver)
        slide = _load(result).slides[0]
        bullet_box = [s for s in slide.shapes if s.has_text_frame and s.text_frame.text.startswith("one")][0]
        paragraphs = bullet_box.text_frame.paragraphs
        assert [p.text for p in paragraphs] == ["one", "two"]
        pPr = paragraphs[0]._p.pPr
        assert pPr is not None
        assert any(child.tag.endswith("}buChar") for child in pPr)

    def test_one_slide_per_description(self, resolver):
        result = convert_slides([{"title": "a"}, {"title": "b"}, {}], resolver=resolver)
        assert len(_load(result).slides) == 3

    def test_empty_list(self, resolver):
        assert len(_load(convert_slides([], resolver=resolver)).slides) == 0

    def test_metadata(self, resolver):
        result = convert_slides(
            [{"title": "x"}],
            {"author": "Ada", "title": "Deck", "revision": "2.0.0"},
            resolver=resolver,
        )
        props = _load(result).core_properties
        assert props.author == "Ada"
        assert props.title == "Deck"
        assert props.subject == "Converted Presentation"
        assert props.revision == 2

    def test_metadata_defaults(self, resolver):
        props = _load(convert_slides([{}], resolver=resolver)).core_properties
        assert props.author == "HTML to PPTX Converter"
        assert props.title == "Presentation"
        assert props.revision == 1


class TestMalformedSizes:
    """Unusable font sizes fall back to defaults instead of failing the deck."""

    def test_out_of_range_sizes_render(self, resolver):
        result = convert_slides(
            [
                {
                    "bullets": [{"text": "neg", "fontSize": -4}, {"text": "huge", "fontSize": 5000}],
                    "textBlocks": [{"text": "tiny", "fontSize": 0.5}],
                }
            ],
            resolver=resolver,
        )
        shapes = list(_load(result).slides[0].shapes)
        bullets, block = shapes
        sizes = [p.runs[0].font.size for p in bullets.text_frame.paragraphs]
        assert sizes == [Pt(18), Pt(18)]
        assert block.text_frame.paragraphs[0].runs[0].font.size == Pt(14)


class TestThemes:
    """Per-slide and per-deck backgrounds."""

    def test_dark_slide(self, resolver):
        slide = _load(convert_slides([{"masterName": "DARK_MASTER"}], resolver=resolver)).slides[0]
        fill = slide.background.fill
        assert fill.type == MSO_FILL.SOLID
        assert fill.fore_color.rgb == RGBColor(0x1A, 0x20, 0x2C)

    def test_deck_theme_and_alias(self, resolver):
        slide = _load(convert_slides([{}], {"theme": "gradient"}, resolver=resolver)).slides[0]
        assert slide.background.fill.type == MSO_FILL.GRADIENT

    def test_unknown_theme_is_white(self, resolver):
        slide = _load(convert_slides([{"masterName": "NOPE"}], resolver=resolver)).slides[0]
        assert slide.background.fill.fore_color.rgb == RGBColor(0xFF, 0xFF, 0xFF)


class TestImages:
    """Embedding, fitting and placeholders."""

    def test_embedded_image_is_fitted(self, resolver, png_data_uri):
        result = convert_slides([{"image": png_data_uri}], resolver=resolver)
        shapes = list(_load(result).slides[0].shapes)
        assert len(shapes) == 1
        pic = shapes[0]
        assert pic.shape_type == MSO_SHAPE_TYPE.PICTURE
        # 40x20 px into a 3x2 in box: full width, centered vertically.
        assert pic.left == Inches(1)
        assert pic.width == Inches(3)
        assert pic.height == Inches(1.5)
        assert pic.top == Inches(3) + Inches(0.25)

    def test_remote_image_is_downloaded(self, png_bytes):
        url = "https://example.com/a.png"
        session = FakeSession({url: FakeResponse(200, png_bytes, {"content-type": "image/png"})})
        resolver = ImageResolver(session)
        result = convert_slides([{"layout": "twoColumn", "image": url}], resolver=resolver)
        shapes = list(_load(result).slides[0].shapes)
        assert [s.shape_type for s in shapes] == [MSO_SHAPE_TYPE.PICTURE]
        assert len(session.calls) == 1

    def test_failed_fetch_paints_placeholder_in_same_box(self, resolver):
        result = convert_slides(
            [{"image": {"url": "https://example.com/missing.png", "x": 2, "y": 1, "width": 4, "height": 3}}],
            resolver=resolver,
        )
        shapes = list(_load(result).slides[0].shapes)
        assert len(shapes) == 2
        rect, caption = shapes
        assert rect.shape_type == MSO_SHAPE_TYPE.AUTO_SHAPE
        assert (rect.left, rect.top, rect.width, rect.height) == (Inches(2), Inches(1), Inches(4), Inches(3))
        assert caption.text_frame.text == "Image Error"

    def test_missing_local_file_for_image_with_text(self, resolver, temp_dir):
        result = convert_slides(
            [{"layout": "imageWithText", "text": "Body", "image": str(temp_dir / "nope.png")}],
            resolver=resolver,
        )
        texts = _texts(_load(result).slides[0])
        assert "Image Placeholder" in texts
        assert "Body" in texts

    def test_local_file(self, resolver, temp_dir, png_bytes):
        path = temp_dir / "pic.png"
        path.write_bytes(png_bytes)
        result = convert_slides([{"image": str(path)}], resolver=resolver)
        assert _load(result).slides[0].shapes[0].shape_type == MSO_SHAPE_TYPE.PICTURE

    def test_title_slide_never_fetches(self, resolver, fake_session):
        convert_slides([{"layout": "title", "image": "https://example.com/a.png"}], resolver=resolver)
        assert fake_session.calls == []


class TestErrors:
    """Validation happens before any rendering."""

    @pytest.mark.parametrize("slides", [None, "nope", {"title": "x"}, 3])
    def test_slides_must_be_a_list(self, resolver, monkeypatch, slides):
        def boom(*args, **kwargs):
            raise AssertionError("rendered despite invalid input")

        monkeypatch.setattr("deckforge.pipeline.build_presentation", boom)
        with pytest.raises(InvalidInputError) as exc:
            convert_slides(slides, resolver=resolver)
        assert exc.value.message == "Invalid slides data"

    def test_render_failure_is_wrapped(self, resolver, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("kaboom")

        monkeypatch.setattr(builder, "slide_primitives", boom)
        with pytest.raises(ConversionError) as exc:
            convert_slides([{"title": "x"}], resolver=resolver)
        assert exc.value.message == "Failed to convert slides to PPTX"
        assert exc.value.details == "kaboom"


class TestRoundTrip:
    """HTML -> slides -> pptx."""

    def test_extract_then_convert(self, resolver):
        slides = extract('<div class="slide"><h1>Title</h1><ul><li>One</li><li>Two</li></ul></div>')
        slide = _load(convert_slides(slides, resolver=resolver)).slides[0]
        texts = _texts(slide)
        assert "Title" in texts
        assert "One\nTwo" in texts

    def test_extract_requires_html(self):
        for html in (None, "", "   "):
            with pytest.raises(InvalidInputError):
                extract(html)

    def test_render_to_file(self, resolver, temp_dir):
        path = render_to_file([{"title": "x"}], {"title": "My Deck"}, output_dir=str(temp_dir), resolver=resolver)
        assert path.startswith(str(temp_dir))
        assert "My_Deck_" in path
        assert len(Presentation(path).slides) == 1
