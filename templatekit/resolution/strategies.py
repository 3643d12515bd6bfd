"""Built-in resolver strategies, listed in chain order."""

from __future__ import annotations

import re
from typing import Iterable

from bs4 import Tag
from soupsieve import SelectorSyntaxError

from ..document import body_of, child_elements, has_element_children, iter_elements, outer_html, text_of
from ..logging import get_logger
from .base import ResolutionContext, ResolutionStrategy, should_be_module

_LINE_MODULE_PATTERN = re.compile(r"line-module-(\d+)")
_SNIPPET_PREFIX = 120

logger = get_logger("resolution")


class IdStrategy(ResolutionStrategy):
    """Element whose ``id`` attribute equals the module id."""

    name = "id"

    def candidates(self, context: ResolutionContext) -> Iterable[Tag]:
        return context.tree.find_all(attrs={"id": context.module.id})


class DataModuleIdStrategy(ResolutionStrategy):
    """Element annotated with ``data-module-id``."""

    name = "data-module-id"

    def candidates(self, context: ResolutionContext) -> Iterable[Tag]:
        return context.tree.find_all(attrs={"data-module-id": context.module.id})


class SelectorStrategy(ResolutionStrategy):
    """CSS selector declared on the module."""

    name = "selector"

    def candidates(self, context: ResolutionContext) -> Iterable[Tag]:
        selector = context.module.selector
        if not selector:
            return []
        try:
            return context.tree.select(selector)
        except SelectorSyntaxError as exc:
            logger.debug("Ignoring invalid selector %r for %s: %s", selector, context.module.id, exc)
            return []


class SnippetStrategy(ResolutionStrategy):
    """Element matching the last-known outerHTML for the module."""

    name = "snippet"

    def candidates(self, context: ResolutionContext) -> Iterable[Tag]:
        snippet = (context.snippets.get(context.module.id) or "").strip()
        if not snippet:
            return
        elements = iter_elements(context.tree)
        exact = [element for element in elements if outer_html(element) == snippet]
        owned = context.occurrences.get(context.module.id, 0)
        if owned < len(exact):
            # The module's own occurrence first when several modules share markup.
            exact.insert(0, exact.pop(owned))
        yield from exact
        prefix = snippet[:_SNIPPET_PREFIX]
        for element in elements:
            html = outer_html(element)
            if html != snippet and html.startswith(prefix):
                yield element


class LineModuleStrategy(ResolutionStrategy):
    """n-th substantial direct child of <body> for ``line-module-{n}`` ids."""

    name = "line-module"

    def candidates(self, context: ResolutionContext) -> Iterable[Tag]:
        match = _LINE_MODULE_PATTERN.search(context.module.id)
        if not match:
            return []
        position = int(match.group(1)) - 1
        children = [
            child
            for child in child_elements(body_of(context.tree))
            if len(text_of(child).strip()) > 15
        ]
        if 0 <= position < len(children):
            return [children[position]]
        return []


class TagStrategy(ResolutionStrategy):
    """Elements of the module's declared tag that look like the module type."""

    name = "tag"

    def candidates(self, context: ResolutionContext) -> Iterable[Tag]:
        tag = context.module.tag
        if not tag:
            return []
        return [
            element
            for element in context.tree.find_all(tag)
            if should_be_module(element, context.module)
        ]


class DivStrategy(ResolutionStrategy):
    """Div-based layouts whose module ids carry a ``div-`` marker."""

    name = "div"

    def candidates(self, context: ResolutionContext) -> Iterable[Tag]:
        if "div-" not in context.module.id:
            return []
        return [
            element
            for element in context.tree.find_all("div")
            if should_be_module(element, context.module)
        ]


class PositionStrategy(ResolutionStrategy):
    """Leaf text element at the module's position in the module list."""

    name = "position"

    def candidates(self, context: ResolutionContext) -> Iterable[Tag]:
        index = context.index
        if index is None or index < 0:
            return []
        leaves = [
            element
            for element in iter_elements(context.tree)
            if len(text_of(element).strip()) > 10 and not has_element_children(element)
        ]
        if index < len(leaves):
            return [leaves[index]]
        return []


__all__ = [
    "DataModuleIdStrategy",
    "DivStrategy",
    "IdStrategy",
    "LineModuleStrategy",
    "PositionStrategy",
    "SelectorStrategy",
    "SnippetStrategy",
    "TagStrategy",
]
