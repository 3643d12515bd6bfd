"""Selection marker utilities for scoping an external edit to one module."""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Optional

from ..document import occurrence_of, outer_html, replace_nth, serialize
from ..logging import get_logger
from ..models import Document, Module
from ..resolution import ModuleRegistry

_ANY_MARKER = re.compile(r"\n?<!--\s*END_SELECTED_.+?\s*-->|<!--\s*START_SELECTED_.+?\s*-->\n?")
_START_ANY = re.compile(r"<!--\s*START_SELECTED_(?P<key>.+?)\s*-->")


class MarkerStatus(str, Enum):
    """Presence of a module's marker pair in a document."""

    PAIRED = "paired"
    MISMATCH = "mismatch"
    ABSENT = "absent"


class MarkerManager:
    """Builds, finds and removes START/END selection markers."""

    START_FMT = "<!--START_SELECTED_{key}-->"
    END_FMT = "<!--END_SELECTED_{key}-->"

    def start(self, key: str) -> str:
        return self.START_FMT.format(key=key)

    def end(self, key: str) -> str:
        return self.END_FMT.format(key=key)

    def wrap(self, key: str, body: str) -> str:
        """Wrap ``body`` with the marker pair for ``key``."""
        return f"{self.start(key)}\n{body}\n{self.end(key)}"

    def status(self, html: str, key: str) -> MarkerStatus:
        has_start = _token(key, "START").search(html) is not None
        has_end = _token(key, "END").search(html) is not None
        if has_start and has_end:
            return MarkerStatus.PAIRED
        if has_start or has_end:
            return MarkerStatus.MISMATCH
        return MarkerStatus.ABSENT

    def replace(self, html: str, key: str, new_body: str) -> str:
        """Replace everything between the markers for ``key``; markers are kept."""
        pattern = re.compile(
            rf"(?P<start>{_token(key, 'START').pattern}).*?(?P<end>{_token(key, 'END').pattern})",
            re.DOTALL,
        )
        return pattern.sub(
            lambda match: f"{match.group('start')}\n{new_body}\n{match.group('end')}", html
        )

    def extract(self, html: str) -> Dict[str, str]:
        """Return a mapping of module id to the markup between its markers."""
        blocks: Dict[str, str] = {}
        position = 0
        while True:
            start_match = _START_ANY.search(html, position)
            if start_match is None:
                break
            key = start_match.group("key")
            end_match = _token(key, "END").search(html, start_match.end())
            if end_match is None:
                position = start_match.end()
                continue
            body = html[start_match.end():end_match.start()]
            blocks[key] = _trim_newline(body)
            position = end_match.end()
        return blocks

    def strip(self, html: str, key: Optional[str] = None) -> str:
        """Remove markers (all of them, or only ``key``'s) exactly as ``wrap`` added them."""
        if key is None:
            return _ANY_MARKER.sub("", html)
        html = re.sub(_token(key, "START").pattern + r"\n?", "", html)
        return re.sub(r"\n?" + _token(key, "END").pattern, "", html)


class MarkerWrapper:
    """Embeds a module's marker pair into a full document."""

    def __init__(self, registry: ModuleRegistry, markers: MarkerManager | None = None) -> None:
        self.registry = registry
        self.markers = markers or MarkerManager()
        self.logger = get_logger("markers")

    def wrap(self, document: Document, module: Module, *, index: Optional[int] = None) -> Document:
        """Return ``document`` with the module's markup bracketed by markers.

        Unresolvable or already-marked modules leave the document unchanged.
        """
        if self.markers.status(document.raw, module.id) is not MarkerStatus.ABSENT:
            self.logger.debug("Module %s already carries selection markers", module.id)
            return document

        tree = document.tree()
        resolution = self.registry.resolve(module, tree, index=index)
        if resolution is None:
            self.logger.warning("Cannot wrap module %s: not found in document", module.id)
            return document

        outer = outer_html(resolution.element)
        wrapped = self.markers.wrap(module.id, outer)
        occurrence = occurrence_of(resolution.element, tree)
        for source in (document.raw, serialize(tree)):
            marked = replace_nth(source, outer, wrapped, occurrence)
            if marked is not None:
                return Document(raw=marked)
        return document


def _token(key: str, kind: str) -> re.Pattern[str]:
    return re.compile(rf"<!--\s*{kind}_SELECTED_{re.escape(key)}\s*-->")


def _trim_newline(body: str) -> str:
    if body.startswith("\n"):
        body = body[1:]
    if body.endswith("\n"):
        body = body[:-1]
    return body


__all__ = ["MarkerManager", "MarkerStatus", "MarkerWrapper"]
