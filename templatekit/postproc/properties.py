"""Property extraction and editor-friendly views of module markup."""

from __future__ import annotations

import html
from typing import Any, Dict, List

from bs4 import Tag

from ..document import inner_html, iter_elements, outer_html, parse_fragment, text_of
from ..models import EditMode

# Elements with more descendants than this get a simplified visual view.
COMPLEX_ELEMENT_THRESHOLD = 5

_HEADINGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


def parse_properties(snippet: str) -> Dict[str, Any]:
    """Return the root attributes, text, first image and first link of a snippet."""
    props: Dict[str, Any] = {}
    element = parse_fragment(snippet)
    if element is None:
        return props
    for name, value in element.attrs.items():
        props[name] = " ".join(value) if isinstance(value, list) else value
    props["text"] = text_of(element)
    image = element if element.name == "img" else element.find("img")
    if image is not None:
        props["img"] = {"src": image.get("src"), "alt": image.get("alt")}
    link = element if element.name == "a" else element.find("a")
    if link is not None:
        props["href"] = link.get("href")
    return props


def simplify_for_editing(element: Tag) -> str:
    """Flatten a complex element into headings, paragraphs, links and images."""
    parts: List[str] = []
    for heading in element.find_all(_HEADINGS):
        text = heading.get_text().strip()
        if text:
            parts.append(f"<{heading.name}>{html.escape(text, quote=False)}</{heading.name}>")
    for paragraph in element.find_all("p"):
        text = paragraph.get_text().strip()
        if text:
            parts.append(f"<p>{html.escape(text, quote=False)}</p>")
    for link in element.find_all("a"):
        text = link.get_text().strip()
        if text:
            href = html.escape(link.get("href") or "#")
            parts.append(f'<a href="{href}">{html.escape(text, quote=False)}</a>')
    for image in element.find_all("img"):
        src = image.get("src")
        if src:
            alt = html.escape(image.get("alt") or "")
            parts.append(
                f'<img src="{html.escape(src)}" alt="{alt}" style="max-width: 100%; height: auto;" />'
            )
    if not parts:
        return inner_html(element)
    return "\n\n".join(parts)


def editor_content(element: Tag, mode: EditMode) -> str:
    """Return what an editor in ``mode`` shows for ``element``."""
    if mode is EditMode.CODE:
        return outer_html(element)
    if len(iter_elements(element)) > COMPLEX_ELEMENT_THRESHOLD:
        return simplify_for_editing(element)
    return inner_html(element)


__all__ = [
    "COMPLEX_ELEMENT_THRESHOLD",
    "editor_content",
    "parse_properties",
    "simplify_for_editing",
]
