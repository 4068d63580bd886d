"""Markdown conversion engines and convenience loaders."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import DEFAULT_OPTIONS, ConversionOptions, MarkdownConverter, ReadabilityOptions
from .registry import DEFAULT_CONVERTER_MODULES, REGISTRY, load_converters

if TYPE_CHECKING:  # pragma: no cover - import guard for type checkers
	from webmarkdown.config import Settings


def converter_from_settings(settings: "Settings") -> MarkdownConverter:
	"""Load the built-in engines and instantiate the configured one."""

	load_converters()
	return REGISTRY.get(settings.converter, DEFAULT_OPTIONS)


__all__ = [
	"DEFAULT_OPTIONS",
	"ConversionOptions",
	"MarkdownConverter",
	"ReadabilityOptions",
	"REGISTRY",
	"DEFAULT_CONVERTER_MODULES",
	"converter_from_settings",
	"load_converters",
]
