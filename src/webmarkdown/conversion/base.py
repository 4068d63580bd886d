"""Converter interface and the fixed conversion configuration."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, Tuple


@dataclass(frozen=True)
class ReadabilityOptions:
    min_content_length: int = 10
    min_score: float = -50
    remove_unlikely_content: bool = False


@dataclass(frozen=True)
class ConversionOptions:
    isolate_main: bool = True
    exclude: Tuple[str, ...] = ()
    readability: ReadabilityOptions = ReadabilityOptions()


DEFAULT_EXCLUDE: Tuple[str, ...] = (
    "script",
    "style",
    "nav",
    ".nav",
    "#nav",
    ".header",
    ".footer",
    ".sidebar",
    ".advertisement",
    '[class*="ad-"]',
    '[class*="social"]',
    '[class*="share"]',
    'iframe[src*="facebook"]',
    'img[src*="facebook.com/tr"]',
)

DEFAULT_OPTIONS = ConversionOptions(
    isolate_main=True,
    exclude=DEFAULT_EXCLUDE,
    readability=ReadabilityOptions(min_content_length=10, min_score=-50, remove_unlikely_content=False),
)


class MarkdownConverter(ABC):
    slug: str = ""

    def __init__(self, options: ConversionOptions = DEFAULT_OPTIONS) -> None:
        self.options = options

    @abstractmethod
    async def convert(self, html: str, *, origin: str) -> str:
        """Convert a complete HTML document and return the Markdown text."""

    @abstractmethod
    def stream(self, chunks: AsyncIterator[bytes], *, origin: str, encoding: str) -> AsyncIterator[str]:
        """Consume an HTML byte stream and yield non-empty Markdown chunks in order."""

    def describe(self) -> dict[str, str]:
        return {"slug": self.slug, "engine": type(self).__name__}
