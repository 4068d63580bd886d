"""Tests for the upstream page fetcher."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from webmarkdown.config import FetchSettings
from webmarkdown.errors import FetchTransportError, UnsupportedContentTypeError, UpstreamStatusError
from webmarkdown.fetcher import build_client, fetch_page
from webmarkdown.validation import validate_url

PAGE = "https://example.com/article"


@pytest.fixture()
def failures(monkeypatch):
    reasons: list[str] = []
    monkeypatch.setattr("webmarkdown.fetcher.record_upstream_failure", reasons.append)
    return reasons


def test_fetch_page_returns_html_outcome(upstream, http_client, test_settings):
    upstream.html(PAGE, "<p>hello</p>")

    async def _run():
        page = await fetch_page(http_client, validate_url(PAGE))
        try:
            return page, await page.read_text()
        finally:
            await page.aclose()

    page, text = asyncio.run(_run())

    assert page.ok
    assert page.status == 200
    assert page.content_type == "text/html; charset=utf-8"
    assert page.encoding == "utf-8"
    assert text == "<p>hello</p>"
    assert upstream.requests[0].method == "GET"
    assert upstream.requests[0].headers["user-agent"] == test_settings.fetch.user_agent
    assert upstream.requests[0].headers.get_list("user-agent") == [test_settings.fetch.user_agent]


def test_fetch_page_streams_body_bytes(upstream, http_client):
    upstream.html(PAGE, b"<p>streamed</p>")

    async def _run():
        page = await fetch_page(http_client, validate_url(PAGE))
        try:
            return b"".join([chunk async for chunk in page.iter_bytes()])
        finally:
            await page.aclose()

    assert asyncio.run(_run()) == b"<p>streamed</p>"


def test_fetch_page_rejects_error_status(upstream, http_client, failures):
    upstream.respond(PAGE, 404)

    with pytest.raises(UpstreamStatusError) as exc:
        asyncio.run(fetch_page(http_client, validate_url(PAGE)))

    assert exc.value.http_status == 404
    assert exc.value.message == "HTTP 404: Not Found"
    assert failures == ["status"]


def test_fetch_page_rejects_non_html(upstream, http_client, failures):
    upstream.respond(PAGE, 200, content_type="application/json", body="{}")

    with pytest.raises(UnsupportedContentTypeError) as exc:
        asyncio.run(fetch_page(http_client, validate_url(PAGE)))

    assert exc.value.content_type == "application/json"
    assert failures == ["content_type"]


def test_fetch_page_treats_missing_content_type_as_empty(upstream, http_client):
    upstream.routes[PAGE] = lambda request: httpx.Response(200, content=b"<p>x</p>")

    with pytest.raises(UnsupportedContentTypeError) as exc:
        asyncio.run(fetch_page(http_client, validate_url(PAGE)))

    assert exc.value.content_type == ""


def test_fetch_page_wraps_transport_errors(upstream, http_client, failures):
    upstream.fail(PAGE, httpx.ConnectError("connection refused"))

    with pytest.raises(FetchTransportError) as exc:
        asyncio.run(fetch_page(http_client, validate_url(PAGE)))

    assert exc.value.http_status == 500
    assert exc.value.message == "An unexpected error occurred: connection refused"
    assert failures == ["transport"]


def test_fetch_page_rejects_unsupported_scheme_at_fetch_time(failures):
    async def _run():
        async with build_client(FetchSettings()) as client:
            await fetch_page(client, validate_url("file:///etc/hosts"))

    with pytest.raises(FetchTransportError):
        asyncio.run(_run())
    assert failures == ["transport"]


def test_build_client_applies_settings():
    client = build_client(FetchSettings(user_agent="ua/2", timeout_sec=7, follow_redirects=False))

    assert client.headers["user-agent"] == "ua/2"
    assert client.timeout.read == 7
    assert client.follow_redirects is False
