"""API route definitions for the URL conversion service."""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Iterator, Optional

import anyio
import httpx
import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from ..conversion import MarkdownConverter
from ..errors import EmptyUpstreamBodyError, ServiceError, StreamAbortedError, error_boundary
from ..fetcher import FetchOutcome, fetch_page
from ..monitoring import record_conversion
from ..validation import validate_url
from .schemas import ConversionRequest, ConversionResponse, ErrorResponse

logger = structlog.get_logger(__name__)
router = APIRouter()

STREAM = "stream"
BUFFERED = "buffered"

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid URL, or non-HTML upstream"},
    404: {"model": ErrorResponse, "description": "Upstream status relayed as-is"},
    500: {"model": ErrorResponse, "description": "Fetch, conversion or unexpected failure"},
}


def http_client_dependency(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def converter_dependency(request: Request) -> MarkdownConverter:
    return request.app.state.converter


def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@contextmanager
def _tracked(mode: str, url: Optional[str]) -> Iterator[None]:
    try:
        with error_boundary(mode):
            yield
    except ServiceError as exc:
        record_conversion(mode, exc.code)
        if exc.http_status >= 500:
            logger.error("conversion_rejected", mode=mode, url=url, code=exc.code, detail=exc.message)
        else:
            logger.info("conversion_rejected", mode=mode, url=url, code=exc.code, status=exc.http_status)
        raise


async def _close_shielded(page: FetchOutcome) -> None:
    with anyio.CancelScope(shield=True):
        await page.aclose()


async def _first_chunk(chunks: AsyncIterator[bytes]) -> Optional[bytes]:
    async for chunk in chunks:
        if chunk:
            return chunk
    return None


async def _prepend(first: bytes, rest: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    yield first
    async for chunk in rest:
        yield chunk


async def _relay(
    converter: MarkdownConverter,
    page: FetchOutcome,
    chunks: AsyncIterator[bytes],
    *,
    origin: str,
    url: str,
) -> AsyncIterator[str]:
    """Yield Markdown chunks to the client; failures here happen after headers were sent."""

    emitted = 0
    try:
        async for piece in converter.stream(chunks, origin=origin, encoding=page.encoding):
            if not piece:
                continue
            emitted += 1
            yield piece
    except (asyncio.CancelledError, GeneratorExit):
        # GeneratorExit when the server closes the body iterator early.
        logger.info("client_disconnected", url=url, chunks=emitted)
        record_conversion(STREAM, "disconnected")
        raise
    except Exception as exc:
        logger.exception("stream_aborted", url=url, chunks=emitted)
        record_conversion(STREAM, "aborted")
        raise StreamAbortedError(str(exc) or exc.__class__.__name__) from exc
    else:
        record_conversion(STREAM, "success")
    finally:
        await _close_shielded(page)


@router.post(
    "/convert",
    response_class=StreamingResponse,
    responses={200: {"content": {"text/plain": {}}, "description": "Markdown streamed in chunks"}, **ERROR_RESPONSES},
)
async def convert_streaming(
    payload: Optional[ConversionRequest] = None,
    client: httpx.AsyncClient = Depends(http_client_dependency),
    converter: MarkdownConverter = Depends(converter_dependency),
) -> StreamingResponse:
    url = payload.url if payload else None
    with _tracked(STREAM, url):
        target = validate_url(url)
        logger.info("conversion_requested", mode=STREAM, url=url)
        page = await fetch_page(client, target)
        try:
            chunks = page.iter_bytes()
            first = await _first_chunk(chunks)
            if first is None:
                raise EmptyUpstreamBodyError()
        except BaseException:
            await _close_shielded(page)
            raise

    return StreamingResponse(
        _relay(converter, page, _prepend(first, chunks), origin=target.origin, url=target.href),
        media_type="text/plain; charset=utf-8",
        background=BackgroundTask(page.aclose),
    )


@router.post("/convert-simple", response_model=ConversionResponse, responses=ERROR_RESPONSES)
async def convert_buffered(
    payload: Optional[ConversionRequest] = None,
    client: httpx.AsyncClient = Depends(http_client_dependency),
    converter: MarkdownConverter = Depends(converter_dependency),
) -> JSONResponse:
    url = payload.url if payload else None
    with _tracked(BUFFERED, url):
        target = validate_url(url)
        logger.info("conversion_requested", mode=BUFFERED, url=url)
        page = await fetch_page(client, target)
        try:
            html = await page.read_text()
        finally:
            await page.aclose()
        markdown = await converter.convert(html, origin=target.origin)

    record_conversion(BUFFERED, "success")
    response = ConversionResponse(
        url=url,
        markdown=markdown,
        content_type=page.content_type,
        timestamp=_utc_timestamp(),
    )
    return JSONResponse(content=response.model_dump(by_alias=True))
