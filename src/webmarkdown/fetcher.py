"""Outbound HTTP fetch of the page to convert."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx

from .config import FetchSettings
from .errors import FetchTransportError, UnsupportedContentTypeError, UpstreamStatusError
from .monitoring import record_upstream_failure
from .validation import ValidatedUrl

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPE = "text/html"


@dataclass
class FetchOutcome:
    """An upstream response whose body has not been read yet."""

    status: int
    status_text: str
    content_type: str
    encoding: str
    response: httpx.Response

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def iter_bytes(self) -> AsyncIterator[bytes]:
        return self.response.aiter_bytes()

    async def read_text(self) -> str:
        await self.response.aread()
        return self.response.text

    async def aclose(self) -> None:
        await self.response.aclose()


def build_client(settings: FetchSettings, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=transport,
        timeout=settings.timeout_sec,
        follow_redirects=settings.follow_redirects,
        headers={"User-Agent": settings.user_agent},
    )


def _describe(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


async def fetch_page(client: httpx.AsyncClient, url: ValidatedUrl) -> FetchOutcome:
    """GET ``url`` and check it answered successfully with HTML.

    The User-Agent comes from the client built by ``build_client``.
    The returned outcome owns an open streaming response; callers must
    ``aclose`` it once the body has been consumed.
    """

    try:
        request = client.build_request("GET", url.href)
        response = await client.send(request, stream=True)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.warning("Fetching %s failed: %s", url.href, _describe(exc))
        record_upstream_failure("transport")
        raise FetchTransportError(_describe(exc)) from exc

    outcome = FetchOutcome(
        status=response.status_code,
        status_text=response.reason_phrase,
        content_type=response.headers.get("content-type", ""),
        encoding=response.encoding or "utf-8",
        response=response,
    )

    if not outcome.ok:
        await outcome.aclose()
        logger.info("Upstream %s answered HTTP %s", url.href, outcome.status)
        record_upstream_failure("status")
        raise UpstreamStatusError(outcome.status, outcome.status_text)

    if HTML_CONTENT_TYPE not in outcome.content_type:
        await outcome.aclose()
        logger.info("Upstream %s returned unsupported content type %r", url.href, outcome.content_type)
        record_upstream_failure("content_type")
        raise UnsupportedContentTypeError(outcome.content_type)

    return outcome
