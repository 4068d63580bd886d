"""Default engine: readability extraction followed by markdownify."""

from __future__ import annotations

import codecs
import logging
import re
from typing import AsyncIterator, Iterator, Optional

import lxml.html
from bs4 import BeautifulSoup, Tag
from fastapi.concurrency import run_in_threadpool
from lxml import etree
from markdownify import markdownify as html_to_markdown
from readability import Document
from readability.readability import Unparseable

from ..errors import ConversionError
from .base import MarkdownConverter, ReadabilityOptions
from .registry import REGISTRY

logger = logging.getLogger(__name__)

MAIN_CONTENT_SELECTORS = ("main", '[role="main"]', "article")

_BLOCK_RE = re.compile(r".+?(?:\n{2,}|\Z)", re.S)
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_TRAILING_SPACE_RE = re.compile(r"[ \t]+\n")


class _PermissiveDocument(Document):
    """readability Document whose pruning follows ReadabilityOptions."""

    def __init__(self, html: str, *, thresholds: ReadabilityOptions, url: Optional[str] = None) -> None:
        super().__init__(
            html,
            url=url,
            min_text_length=thresholds.min_content_length,
            retry_length=thresholds.min_content_length,
        )
        self._thresholds = thresholds

    def remove_unlikely_candidates(self):
        if self._thresholds.remove_unlikely_content:
            super().remove_unlikely_candidates()

    def select_best_candidate(self, candidates):
        best = super().select_best_candidate(candidates)
        if best is not None and best["content_score"] < self._thresholds.min_score:
            # Falls back to the whole body.
            return None
        return best


def split_blocks(markdown: str) -> Iterator[str]:
    """Yield consecutive blocks of ``markdown``; their concatenation is the input."""

    for match in _BLOCK_RE.finditer(markdown):
        block = match.group(0)
        if block:
            yield block


class _TreeBuilder:
    """Feeds decoded HTML into lxml's push parser as it arrives."""

    def __init__(self) -> None:
        # Text is re-encoded as UTF-8, so in-document charset declarations are ignored.
        self._parser = lxml.html.HTMLParser(encoding="utf-8")
        self._fed = False

    def feed(self, text: str) -> None:
        if not text:
            return
        try:
            self._parser.feed(text.encode("utf-8"))
        except etree.LxmlError as exc:
            raise ConversionError(str(exc) or exc.__class__.__name__) from exc
        self._fed = True

    def close(self) -> str:
        """Finish parsing and serialize the tree; element-less input gives ``""``."""

        if not self._fed:
            return ""
        try:
            root = self._parser.close()
        except (etree.ParserError, etree.XMLSyntaxError):
            return ""
        if root is None:
            return ""
        return lxml.html.tostring(root, encoding="unicode")


class ReadabilityMarkdownConverter(MarkdownConverter):
    slug = "readability"

    def render(self, html: str, origin: str) -> str:
        if not html.strip():
            return ""
        builder = _TreeBuilder()
        builder.feed(html)
        return self.render_markup(builder.close(), origin)

    def render_markup(self, markup: str, origin: str) -> str:
        """Convert HTML already normalized by ``_TreeBuilder``."""

        if not markup.strip():
            return ""

        soup = BeautifulSoup(markup, "lxml")
        self._drop_excluded(soup)
        if soup.find(True) is None or not (soup.get_text(strip=True) or soup.find("img")):
            return ""
        fragment = self._isolate(soup) if self.options.isolate_main else None
        source = str(fragment) if fragment is not None else str(soup)

        base_url = origin if origin and origin != "null" else None
        document = _PermissiveDocument(source, thresholds=self.options.readability, url=base_url)
        try:
            article = document.summary(html_partial=True)
        except Unparseable as exc:
            logger.warning("Page has no extractable document: %s", exc)
            return ""

        markdown = html_to_markdown(article, heading_style="ATX", bullets="-")
        return self._normalize(markdown)

    def _drop_excluded(self, soup: BeautifulSoup) -> None:
        for selector in self.options.exclude:
            for element in soup.select(selector):
                if not element.decomposed:
                    element.decompose()

    @staticmethod
    def _isolate(soup: BeautifulSoup) -> Optional[Tag]:
        for selector in MAIN_CONTENT_SELECTORS:
            element = soup.select_one(selector)
            if element is not None and element.get_text(strip=True):
                return element
        return None

    @staticmethod
    def _normalize(markdown: str) -> str:
        text = _TRAILING_SPACE_RE.sub("\n", markdown)
        text = _BLANK_RUN_RE.sub("\n\n", text).strip()
        return f"{text}\n" if text else ""

    async def convert(self, html: str, *, origin: str) -> str:
        return await self._in_threadpool(self.render, html, origin)

    async def stream(self, chunks: AsyncIterator[bytes], *, origin: str, encoding: str) -> AsyncIterator[str]:
        # Parsing keeps pace with the network; readability then scores the
        # finished tree before any Markdown is produced.
        decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        builder = _TreeBuilder()
        async for chunk in chunks:
            builder.feed(decoder.decode(chunk))
        builder.feed(decoder.decode(b"", final=True))
        markup = builder.close()

        markdown = await self._in_threadpool(self.render_markup, markup, origin)
        for block in split_blocks(markdown):
            yield block

    @staticmethod
    async def _in_threadpool(func, *args) -> str:
        try:
            return await run_in_threadpool(func, *args)
        except ConversionError:
            raise
        except Exception as exc:
            raise ConversionError(str(exc) or exc.__class__.__name__) from exc


REGISTRY.register(ReadabilityMarkdownConverter)
