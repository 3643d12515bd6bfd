"""HTML document model backed by BeautifulSoup's lenient html.parser backend."""

from __future__ import annotations

from typing import Iterable, List, Optional

from bs4 import BeautifulSoup, Tag

from .errors import DocumentParseError

_PARSER = "html.parser"


def parse(html: str) -> BeautifulSoup:
    """Parse raw HTML into a traversable tree.

    Unclosed tags and stray entities are recovered by the parser; only input the
    backend refuses outright raises ``DocumentParseError``.
    """
    if not isinstance(html, str):
        raise DocumentParseError(
            f"Expected HTML text, got {type(html).__name__}", received=type(html).__name__
        )
    try:
        return BeautifulSoup(html, _PARSER)
    except Exception as exc:  # pragma: no cover - defensive guard
        raise DocumentParseError(f"Failed to parse document: {exc}", cause=str(exc)) from exc


def serialize(tree: Tag) -> str:
    """Serialise a tree (or a single element) back to markup."""
    return str(tree)


def normalize(html: str) -> str:
    """Return ``html`` in the byte form the serialiser produces for it."""
    return serialize(parse(html))


def parse_fragment(markup: str) -> Optional[Tag]:
    """Return the first element of ``markup`` or None when it holds no element."""
    return parse(markup).find(True)


def outer_html(element: Tag) -> str:
    return str(element)


def inner_html(element: Tag) -> str:
    return element.decode_contents()


def text_of(element: Tag) -> str:
    return element.get_text()


def class_names(element: Tag) -> str:
    """Return the class attribute as one space separated string."""
    value = element.get("class")
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return " ".join(value)


def body_of(tree: BeautifulSoup) -> Tag:
    """Return the <body> element, or the tree root for body-less fragments."""
    body = tree.body
    return body if body is not None else tree


def iter_elements(root: Tag) -> List[Tag]:
    """Return every descendant element of ``root`` in document order."""
    return list(root.find_all(True))


def child_elements(element: Tag) -> List[Tag]:
    return [child for child in element.children if isinstance(child, Tag)]


def has_element_children(element: Tag) -> bool:
    return element.find(True) is not None


def contains_any(element: Tag, others: Iterable[Tag]) -> bool:
    """Return True when ``element`` is, or is an ancestor of, any of ``others``."""
    for other in others:
        if other is element:
            return True
        if any(parent is element for parent in other.parents):
            return True
    return False


def overlaps(element: Tag, others: Iterable[Tag]) -> bool:
    """True when ``element`` is, contains, or sits inside any of ``others``."""
    others = list(others)
    if contains_any(element, others):
        return True
    return any(parent is other for parent in element.parents for other in others)


def occurrence_of(element: Tag, root: Tag) -> int:
    """Position of ``element`` among elements of ``root`` with identical markup."""
    outer = outer_html(element)
    twins = [candidate for candidate in iter_elements(root) if outer_html(candidate) == outer]
    for position, candidate in enumerate(twins):
        if candidate is element:
            return position
    return 0


def find_nth(text: str, fragment: str, occurrence: int = 0) -> int:
    """Return the offset of the ``occurrence``-th (0-based) match of ``fragment``, or -1."""
    if not fragment or occurrence < 0:
        return -1
    start = text.find(fragment)
    while start != -1 and occurrence > 0:
        start = text.find(fragment, start + len(fragment))
        occurrence -= 1
    return start


def replace_nth(text: str, old: str, new: str, occurrence: int = 0) -> Optional[str]:
    """Replace one specific occurrence of ``old``; None when it does not exist."""
    start = find_nth(text, old, occurrence)
    if start == -1:
        return None
    return text[:start] + new + text[start + len(old):]


__all__ = [
    "body_of",
    "child_elements",
    "class_names",
    "contains_any",
    "find_nth",
    "has_element_children",
    "inner_html",
    "iter_elements",
    "normalize",
    "occurrence_of",
    "outer_html",
    "overlaps",
    "parse",
    "parse_fragment",
    "replace_nth",
    "serialize",
    "text_of",
]
