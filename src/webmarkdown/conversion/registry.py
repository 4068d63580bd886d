"""Registry of available Markdown conversion engines."""

from __future__ import annotations

from importlib import import_module
from typing import Dict, Iterable, List, Sequence, Type

from .base import DEFAULT_OPTIONS, ConversionOptions, MarkdownConverter


DEFAULT_CONVERTER_MODULES: Sequence[str] = (
    "webmarkdown.conversion.readability_markdown",
)


class ConverterRegistry:
    def __init__(self) -> None:
        self._registry: Dict[str, Type[MarkdownConverter]] = {}

    def register(self, converter_cls: Type[MarkdownConverter]) -> None:
        key = converter_cls.slug.lower()
        if not key:
            raise ValueError(f"{converter_cls.__name__} does not declare a slug")
        if key in self._registry:
            raise ValueError(f"Converter already registered for {key}")
        self._registry[key] = converter_cls

    def get(self, slug: str, options: ConversionOptions = DEFAULT_OPTIONS) -> MarkdownConverter:
        key = slug.lower()
        if key not in self._registry:
            raise KeyError(f"No converter registered for {slug}")
        return self._registry[key](options)

    def slugs(self) -> List[str]:
        return sorted(self._registry)


REGISTRY = ConverterRegistry()


def load_converters(module_names: Iterable[str] | None = None) -> None:
    """Import converter modules and trigger their registration side-effects."""

    modules = list(module_names or DEFAULT_CONVERTER_MODULES)
    for module in modules:
        import_module(module)


__all__ = ["REGISTRY", "DEFAULT_CONVERTER_MODULES", "ConverterRegistry", "load_converters"]
