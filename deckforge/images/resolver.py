from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from urllib.parse import unquote_to_bytes

import requests
from requests import RequestException

from deckforge.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

EMBEDDED = "embedded"
PATH = "path"
PLACEHOLDER = "placeholder"

DEFAULT_CONTENT_TYPE = "image/jpeg"

_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ImageSource:
    """Where the document builder should take an image's pixels from.

    ``embedded`` carries the bytes, ``path`` a reference the builder opens
    itself (local file, or a remote URL whose fetch failed), ``placeholder``
    means there is nothing usable and the placeholder gets painted.
    """

    kind: str
    data: bytes | None = None
    content_type: str | None = None
    path: str | None = None
    reason: str | None = None


def decode_data_uri(ref: str) -> ImageSource:
    cleaned = _WS_RE.sub("", ref)
    header, sep, payload = cleaned.partition(",")
    if not sep or not payload:
        return ImageSource(kind=PLACEHOLDER, reason="empty data URI")

    meta = header[len("data:"):]
    content_type = meta.split(";", 1)[0] or DEFAULT_CONTENT_TYPE
    try:
        if ";base64" in meta.lower():
            data = base64.b64decode(payload, validate=True)
        else:
            data = unquote_to_bytes(payload)
    except (binascii.Error, ValueError) as e:
        return ImageSource(kind=PLACEHOLDER, reason=f"bad data URI: {e}")
    return ImageSource(kind=EMBEDDED, data=data, content_type=content_type)


class ImageResolver:
    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        timeout: float = 15.0,
        user_agent: str = "deckforge/1.0",
        max_bytes: int = 50 * 1024 * 1024,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout
        self.user_agent = user_agent
        self.max_bytes = max_bytes

    @classmethod
    def from_settings(cls, cfg: Settings | None = None) -> "ImageResolver":
        cfg = cfg or default_settings
        return cls(
            timeout=cfg.image_fetch_timeout,
            user_agent=cfg.image_user_agent,
            max_bytes=cfg.image_max_bytes,
        )

    def resolve(self, ref: str) -> ImageSource:
        ref = (ref or "").strip()
        lowered = ref.lower()
        if lowered.startswith("data:"):
            return decode_data_uri(ref)
        if lowered.startswith(("http://", "https://")):
            return self.fetch(ref)
        return ImageSource(kind=PATH, path=ref)

    def _read_capped(self, r) -> bytes | None:
        """Body bytes, or None once more than ``max_bytes`` arrive."""
        length = r.headers.get("content-length")
        if length and length.isdigit() and int(length) > self.max_bytes:
            return None
        buf = bytearray()
        for chunk in r.iter_content(chunk_size=64 * 1024):
            buf.extend(chunk)
            if len(buf) > self.max_bytes:
                return None
        return bytes(buf)

    def fetch(self, url: str) -> ImageSource:
        logger.debug("[images] fetching url='%s'", url[:200])
        try:
            with self.session.get(
                url,
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
                stream=True,
            ) as r:
                if not 200 <= r.status_code < 300:
                    raise RequestException(f"HTTP error! status: {r.status_code}", response=r)
                content_type = (r.headers.get("content-type") or "").split(";", 1)[0].strip() or DEFAULT_CONTENT_TYPE
                data = self._read_capped(r)
        except RequestException as e:
            logger.warning("[images] fetch failed url='%s' err=%s: %s", url[:200], type(e).__name__, e)
            # Best effort: hand the builder the reference as given.
            return ImageSource(kind=PATH, path=url, reason=str(e))

        if data is None:
            logger.warning("[images] too large url='%s' limit=%d bytes", url[:200], self.max_bytes)
            return ImageSource(kind=PLACEHOLDER, reason=f"larger than {self.max_bytes} bytes")

        logger.debug("[images] ok url='%s' bytes=%d type=%s", url[:200], len(data), content_type)
        return ImageSource(kind=EMBEDDED, data=data, content_type=content_type)
