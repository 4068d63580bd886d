"""Shared pytest fixtures for the conversion service tests."""

from __future__ import annotations

from typing import Callable, Dict

import httpx
import pytest

from webmarkdown.config import FetchSettings, LoggingSettings, MonitoringSettings, Settings
from webmarkdown.fetcher import build_client

ARTICLE_HTML = """<!DOCTYPE html>
<html>
<head><title>Sample article</title><style>body { color: red; }</style></head>
<body>
<nav class="nav"><a href="/home">Home navigation</a></nav>
<div class="header">Site header banner</div>
<main>
<article>
<h1>Hello Markdown</h1>
<p>This is the first paragraph of the article, and it is long enough, with commas, to be kept.</p>
<p>The second paragraph points to a <a href="/docs/page">relative link</a> inside the site, café included.</p>
<p>A third paragraph closes the article with some more words so the content clearly wins.</p>
</article>
</main>
<div class="sidebar">Sidebar links</div>
<div class="social-share">Share this on every network</div>
<div class="footer">Footer copyright text</div>
<script>console.log("tracking");</script>
</body>
</html>
"""


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        service_name="webmarkdown-test",
        environment="test",
        port=3100,
        fetch=FetchSettings(user_agent="webmarkdown-test/1.0 (HTML to Markdown Converter)", timeout_sec=5),
        logging=LoggingSettings(level="DEBUG"),
        monitoring=MonitoringSettings(enabled=False),
    )


class Upstream:
    """Programmable fake upstream served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []

    def html(self, url: str, body: str | bytes, content_type: str = "text/html; charset=utf-8") -> None:
        self.routes[url] = lambda request: httpx.Response(
            200, headers={"content-type": content_type}, content=body
        )

    def respond(self, url: str, status_code: int, *, content_type: str = "text/html", body: str = "") -> None:
        self.routes[url] = lambda request: httpx.Response(
            status_code, headers={"content-type": content_type}, content=body
        )

    def fail(self, url: str, exc: Exception) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc

        self.routes[url] = _raise

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(str(request.url))
        if handler is None:
            return httpx.Response(404, headers={"content-type": "text/html"}, content=b"missing")
        return handler(request)


@pytest.fixture()
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture()
def http_client(upstream: Upstream, test_settings: Settings) -> httpx.AsyncClient:
    return build_client(test_settings.fetch, transport=httpx.MockTransport(upstream.handle))


@pytest.fixture()
def article_html() -> str:
    return ARTICLE_HTML
