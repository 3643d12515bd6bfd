"""Contracts shared by module resolution strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from bs4 import BeautifulSoup, Tag

from ..document import class_names, inner_html, text_of
from ..models import Module, ModuleType


@dataclass
class Resolution:
    """A module located in a parsed document."""

    element: Tag
    strategy: str


@dataclass
class ResolutionContext:
    """Inputs every strategy sees for one resolution attempt."""

    module: Module
    tree: BeautifulSoup
    index: Optional[int] = None
    snippets: Mapping[str, str] = field(default_factory=dict)
    occurrences: Mapping[str, int] = field(default_factory=dict)


class ResolutionStrategy(ABC):
    """One link in the resolver chain."""

    name: str = ""

    @abstractmethod
    def candidates(self, context: ResolutionContext) -> Iterable[Tag]:
        """Yield matching elements in order of preference (possibly none)."""


_HEADER_WORDS = ("logo", "brand", "company")
_HERO_WORDS = ("welcome", "introducing", "discover", "main")
_FOOTER_WORDS = ("unsubscribe", "privacy", "contact", "copyright", "©")
_CONTENT_TAGS = {"section", "article", "div", "td", "tr"}


def should_be_module(element: Tag, module: Module) -> bool:
    """Return True when ``element`` plausibly holds a module of ``module.type``."""
    text = text_of(element).lower()
    if len(text.strip()) < 10:
        return False

    markup = inner_html(element).lower()
    tag = (element.name or "").lower()
    has_image = "<img" in markup or element.find("img") is not None
    identity = f"{element.get('id') or ''} {class_names(element)}".lower()

    module_type = module.type
    if module_type is ModuleType.HEADER:
        return (
            tag == "header"
            or any(word in text for word in _HEADER_WORDS)
            or has_image
            or "header" in identity
        )
    if module_type is ModuleType.HERO:
        return (
            has_image
            or any(word in text for word in _HERO_WORDS)
            or (len(text) > 100 and "<a" in markup)
        )
    if module_type is ModuleType.FOOTER:
        return (
            tag == "footer"
            or any(word in text for word in _FOOTER_WORDS)
            or "footer" in identity
        )
    if module_type is ModuleType.CONTENT:
        return len(text) > 20 and tag in _CONTENT_TAGS
    return len(text) > 15


__all__ = [
    "Resolution",
    "ResolutionContext",
    "ResolutionStrategy",
    "should_be_module",
]
