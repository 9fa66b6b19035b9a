from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from deckforge.config import configure_logging, settings
from deckforge.errors import ConversionError, InvalidInputError
from deckforge.images.resolver import ImageResolver
from deckforge.models import (ConvertRequest, ConvertResponse, ErrorResponse,
                              ParseHtmlRequest, ParseHtmlResponse)
from deckforge.pipeline import convert_slides, extract
from deckforge.ppt.layouts import LAYOUT_NAMES
from deckforge.ppt.theme import available_themes

logger = logging.getLogger(__name__)

app = FastAPI(title="HTML to PPTX API")

_resolver = ImageResolver.from_settings(settings)


def get_resolver() -> ImageResolver:
    return _resolver


def _error(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


class BodySizeLimit:
    """Reject request bodies over ``max_bytes`` with 413, chunked uploads included.

    The body is buffered here and replayed to the app, so the limit holds
    whether or not the client sent Content-Length.
    """

    def __init__(self, app, max_bytes: int) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def _reject(self, scope, receive, send) -> None:
        response = _error(413, "Request entity too large", f"limit is {self.max_bytes} bytes")
        await response(scope, receive, send)

    async def __call__(self, scope, receive, send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers") or [])
        length = headers.get(b"content-length", b"").decode("latin-1")
        if length.isdigit() and int(length) > self.max_bytes:
            await self._reject(scope, receive, send)
            return

        body = bytearray()
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            body.extend(message.get("body", b""))
            if len(body) > self.max_bytes:
                logger.warning("rejected %s body over %d bytes", scope.get("path"), self.max_bytes)
                await self._reject(scope, receive, send)
                return
            more_body = message.get("more_body", False)

        replayed = False

        async def replay():
            nonlocal replayed
            if replayed:
                return await receive()
            replayed = True
            return {"type": "http.request", "body": bytes(body), "more_body": False}

        await self.app(scope, replay, send)


# CORS added last so it wraps every response, 413s included.
app.add_middleware(BodySizeLimit, max_bytes=settings.max_body_bytes)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    if request.url.path.endswith("/parse-html"):
        return _error(400, "HTML content is required", str(exc.errors()))
    return _error(400, "Invalid slides data", str(exc.errors()))


@app.exception_handler(InvalidInputError)
async def _invalid_input(request: Request, exc: InvalidInputError) -> JSONResponse:
    return _error(400, exc.message, exc.details)


@app.exception_handler(ConversionError)
async def _conversion_error(request: Request, exc: ConversionError) -> JSONResponse:
    return _error(500, exc.message, exc.details)


@app.get("/api/health")
def health() -> dict:
    return {"status": "ok", "message": "HTML to PPTX API is running"}


@app.get("/api/layouts")
def layouts() -> dict:
    return {"layouts": [{"id": layout.value, "name": name} for layout, name in LAYOUT_NAMES.items()]}


@app.get("/api/themes")
def themes() -> dict:
    return {"themes": available_themes()}


@app.post("/api/convert", response_model=ConvertResponse)
def convert(req: ConvertRequest, resolver: ImageResolver = Depends(get_resolver)) -> ConvertResponse:
    result = convert_slides(req.slides, req.options, resolver=resolver)
    return ConvertResponse(data=result.data, filename=result.filename)


@app.post("/api/parse-html", response_model=ParseHtmlResponse, response_model_exclude_none=True)
def parse_html(req: ParseHtmlRequest) -> ParseHtmlResponse:
    slides = extract(req.html, base_url=req.base_url)
    return ParseHtmlResponse(slides=slides)


@app.on_event("startup")
def _startup() -> None:
    configure_logging()
    logger.info("API endpoints: GET /api/health, POST /api/convert, POST /api/parse-html")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
