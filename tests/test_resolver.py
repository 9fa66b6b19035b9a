"""
Tests for image resolution.
"""

import base64
from io import BytesIO

import requests
from pptx import Presentation

from deckforge.images.resolver import (EMBEDDED, PATH, PLACEHOLDER,
                                       ImageResolver, decode_data_uri)
from deckforge.pipeline import convert_slides

from conftest import FakeResponse, FakeSession


class TestDataUri:
    """Inline data: URIs never touch the network."""

    def test_base64_with_whitespace(self, resolver, fake_session, png_bytes):
        encoded = base64.b64encode(png_bytes).decode("ascii")
        wrapped = "\n".join(encoded[i:i + 20] for i in range(0, len(encoded), 20))
        src = resolver.resolve(" data:image/png;base64,\n" + wrapped + "\n")
        assert src.kind == EMBEDDED
        assert src.data == png_bytes
        assert src.content_type == "image/png"
        assert fake_session.calls == []

    def test_percent_encoded(self):
        src = decode_data_uri("data:text/plain,hello%20world")
        assert src.kind == EMBEDDED
        assert src.data == b"hello world"

    def test_bad_payload_is_placeholder(self):
        assert decode_data_uri("data:image/png;base64,@@@").kind == PLACEHOLDER
        assert decode_data_uri("data:image/png;base64,").kind == PLACEHOLDER


class TestRemoteFetch:
    """http(s) references are downloaded and embedded."""

    def test_success(self, png_bytes):
        url = "https://example.com/a.png"
        session = FakeSession({url: FakeResponse(200, png_bytes, {"content-type": "image/png; charset=binary"})})
        src = ImageResolver(session, timeout=3, user_agent="tests").resolve(url)
        assert src.kind == EMBEDDED
        assert src.data == png_bytes
        assert src.content_type == "image/png"
        assert session.calls[0]["timeout"] == 3
        assert session.calls[0]["headers"] == {"User-Agent": "tests"}
        assert session.calls[0]["stream"] is True

    def test_missing_content_type_defaults_to_jpeg(self):
        url = "http://example.com/a"
        session = FakeSession({url: FakeResponse(200, b"abc")})
        src = ImageResolver(session).resolve(url)
        assert src.content_type == "image/jpeg"

    def test_http_error_keeps_given_reference(self, resolver):
        url = "https://example.com/missing.png"
        src = resolver.resolve(url)
        assert src.kind == PATH
        assert src.path == url
        assert "404" in src.reason

    def test_transport_error_keeps_given_reference(self):
        url = "https://unreachable.invalid/a.png"
        session = FakeSession({url: requests.ConnectionError("refused")})
        src = ImageResolver(session).resolve(url)
        assert src.kind == PATH
        assert src.path == url

    def test_scheme_is_case_insensitive(self, resolver, fake_session):
        resolver.resolve("HTTPS://example.com/x.png")
        assert len(fake_session.calls) == 1


class TestDownloadCap:
    """Oversized downloads are abandoned."""

    def test_streamed_body_over_cap(self):
        url = "https://example.com/huge.png"
        response = FakeResponse(200, b"x" * (300 * 1024), {"content-type": "image/png"})
        session = FakeSession({url: response})
        src = ImageResolver(session, max_bytes=100 * 1024).resolve(url)
        assert src.kind == PLACEHOLDER
        assert "102400" in src.reason
        # Reading stops at the first chunk past the cap.
        assert response.read < len(response.content)
        assert response.closed is True

    def test_declared_length_over_cap(self):
        url = "https://example.com/huge.png"
        response = FakeResponse(200, b"x" * 10, {"content-length": "999999"})
        src = ImageResolver(FakeSession({url: response}), max_bytes=1000).resolve(url)
        assert src.kind == PLACEHOLDER
        assert response.read == 0

    def test_body_at_cap_is_kept(self):
        url = "https://example.com/ok.png"
        session = FakeSession({url: FakeResponse(200, b"x" * 1000)})
        src = ImageResolver(session, max_bytes=1000).resolve(url)
        assert src.kind == EMBEDDED
        assert len(src.data) == 1000

    def test_oversized_image_paints_placeholder(self):
        url = "https://example.com/huge.png"
        session = FakeSession({url: FakeResponse(200, b"x" * 5000)})
        resolver = ImageResolver(session, max_bytes=1000)
        result = convert_slides([{"image": url}], resolver=resolver)
        prs = Presentation(BytesIO(base64.b64decode(result.data)))
        texts = [s.text_frame.text for s in prs.slides[0].shapes if s.has_text_frame]
        assert "Image Error" in texts


class TestLocalReference:
    """Anything else is passed through as a path."""

    def test_local_path(self, resolver, fake_session):
        src = resolver.resolve("images/logo.png")
        assert src.kind == PATH
        assert src.path == "images/logo.png"
        assert fake_session.calls == []
