"""
Pytest configuration and shared fixtures.
"""

import base64
import sys
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from deckforge.images.resolver import ImageResolver  # noqa: E402


class FakeResponse:
    def __init__(self, status_code=200, content=b"", headers=None):
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}
        self.read = 0
        self.closed = False

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self.content), chunk_size):
            chunk = self.content[start:start + chunk_size]
            self.read += len(chunk)
            yield chunk

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True


class FakeSession:
    """Stands in for requests.Session; maps URL -> FakeResponse or exception."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    def get(self, url, timeout=None, headers=None, stream=False):
        self.calls.append({"url": url, "timeout": timeout, "headers": headers, "stream": stream})
        outcome = self.responses.get(url)
        if outcome is None:
            return FakeResponse(status_code=404)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def png_bytes() -> bytes:
    """A 40x20 red PNG."""
    buf = BytesIO()
    Image.new("RGB", (40, 20), (255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_data_uri(png_bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def resolver(fake_session) -> ImageResolver:
    return ImageResolver(fake_session, timeout=3)


@pytest.fixture
def temp_dir(tmp_path) -> Path:
    return tmp_path
