"""Elements library: ready-made snippets inserted into module content."""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from .constants import ELEMENT_CATEGORIES, ELEMENTS


def list_elements(category: str | None = None) -> Dict[str, str]:
    """Return ``name -> html`` for one category, or for every category."""
    if category is not None:
        if category not in ELEMENTS:
            raise KeyError(f"Unknown element category: {category}")
        return dict(ELEMENTS[category])
    merged: Dict[str, str] = {}
    for name in ELEMENT_CATEGORIES:
        merged.update(ELEMENTS[name])
    return merged


def get_element(name: str) -> Optional[str]:
    """Look an element up by name, ignoring case."""
    wanted = name.strip().lower()
    for element_name, markup in list_elements().items():
        if element_name.lower() == wanted:
            return markup
    return None


def insert_at(content: str, markup: str, selection: Optional[Tuple[int, int]] = None) -> str:
    """Insert ``markup`` over ``selection`` (start, end), or append when None."""
    if selection is None:
        return content + markup
    start, end = selection
    start = max(0, min(start, len(content)))
    end = max(start, min(end, len(content)))
    return content[:start] + markup + content[end:]


__all__ = ["ELEMENTS", "ELEMENT_CATEGORIES", "get_element", "insert_at", "list_elements"]
