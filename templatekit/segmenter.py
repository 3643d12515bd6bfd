"""Heuristic segmentation of email templates into header, body parts and footer."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from .config import SegmentationConfig
from .document import body_of, inner_html, iter_elements, outer_html, overlaps, parse, serialize, text_of
from .logging import get_logger
from .models import Document, Module, ModuleType

_SPLIT_PATTERN = re.compile(r"<br\s*/?>|\n\s*\n", re.IGNORECASE)
_FOOTER_TAGS = ["footer", "div", "p"]
_HEADER_TAGS = ["header", "div", "table"]
_TEXT_PREFIX = 20


@dataclass
class SegmentationResult:
    """Modules found in a document plus the markup located for each."""

    modules: List[Module]
    snippets: Dict[str, str] = field(default_factory=dict)
    annotated_snippets: Dict[str, str] = field(default_factory=dict)
    annotated: str = ""


class ModuleSegmenter:
    """Partitions a document into modules when the caller supplies none."""

    def __init__(self, config: SegmentationConfig | None = None) -> None:
        self.config = config or SegmentationConfig()
        self._greeting = re.compile(self.config.greeting_pattern, re.IGNORECASE)
        self._keywords = tuple(keyword.lower() for keyword in self.config.footer_keywords)
        self.logger = get_logger("segmenter")

    def segment(self, document: Document) -> SegmentationResult:
        tree = document.tree()
        header = self.find_header(tree)
        footer = self.find_footer(tree, header=header)
        parts = self.split_body(tree, header, footer)
        modules = self._assemble(header is not None, parts, footer is not None)
        self.logger.debug(
            "Segmented document into %d modules (header=%s, footer=%s, parts=%d)",
            len(modules),
            header is not None,
            footer is not None,
            len(parts),
        )

        positions = {id(element): index for index, element in enumerate(iter_elements(tree))}
        result = SegmentationResult(modules=modules)
        self._annotate(
            document,
            result,
            header_position=positions.get(id(header)) if header is not None else None,
            footer_position=positions.get(id(footer)) if footer is not None else None,
            parts=parts,
        )
        return result

    def find_footer(self, tree: BeautifulSoup, *, header: Optional[Tag] = None) -> Optional[Tag]:
        """Return the last footer-like element that does not overlap the header."""
        candidates = []
        for element in tree.find_all(_FOOTER_TAGS):
            if header is not None and overlaps(element, [header]):
                continue
            text = text_of(element).lower()
            if any(keyword in text for keyword in self._keywords):
                candidates.append(element)
        return candidates[-1] if candidates else None

    def find_header(self, tree: BeautifulSoup) -> Optional[Tag]:
        """Return the first element carrying an image or a short greeting."""
        limit = self.config.header_text_limit
        for element in tree.find_all(_HEADER_TAGS):
            if element.find("img") is not None:
                return element
            text = text_of(element).lower()
            if len(text) < limit and self._greeting.search(text):
                return element
        return None

    def split_body(
        self, tree: BeautifulSoup, header: Optional[Tag], footer: Optional[Tag]
    ) -> List[str]:
        """Cut header and footer out of the body markup and split what remains.

        Removal is textual on purpose: it keeps the whitespace and formatting
        around the remaining segments exactly as serialised.
        """
        markup = inner_html(body_of(tree))
        if header is not None:
            markup = markup.replace(outer_html(header), "", 1)
        if footer is not None:
            markup = markup.replace(outer_html(footer), "", 1)
        parts = (part.strip() for part in _SPLIT_PATTERN.split(markup))
        return [part for part in parts if part]

    @staticmethod
    def _assemble(has_header: bool, parts: Sequence[str], has_footer: bool) -> List[Module]:
        modules: List[Module] = []
        counter = 1
        if has_header:
            modules.append(
                Module(
                    id=f"header-{counter}",
                    name="Header",
                    type=ModuleType.HEADER,
                    description="Top of email",
                )
            )
            counter += 1
        if not parts:
            modules.append(
                Module(
                    id=f"body-{counter}",
                    name="Body",
                    type=ModuleType.CONTENT,
                    description="Main content",
                )
            )
            counter += 1
        else:
            for number in range(1, len(parts) + 1):
                modules.append(
                    Module(
                        id=f"line-module-{number}",
                        name=f"Body part {number}",
                        type=ModuleType.CONTENT,
                        description=f"Segment {number} from HTML split by <br>",
                    )
                )
        if has_footer:
            modules.append(
                Module(
                    id=f"footer-{counter}",
                    name="Footer",
                    type=ModuleType.FOOTER,
                    description="Bottom of email",
                )
            )
        return modules

    def _annotate(
        self,
        document: Document,
        result: SegmentationResult,
        *,
        header_position: Optional[int],
        footer_position: Optional[int],
        parts: Sequence[str],
    ) -> None:
        clone = document.tree()
        elements = iter_elements(clone)
        claimed: List[Tag] = []
        part_index = 0

        for module in result.modules:
            element = clone.find(attrs={"id": module.id})
            part: Optional[str] = None
            if module.type is ModuleType.HEADER:
                if element is None and header_position is not None:
                    element = elements[header_position]
            elif module.type is ModuleType.FOOTER:
                if element is None and footer_position is not None:
                    element = elements[footer_position]
            elif module.id.startswith("line-module-"):
                part = parts[part_index] if part_index < len(parts) else None
                part_index += 1

            if element is not None and overlaps(element, claimed):
                element = None
            if element is None and part is not None:
                element = self._locate_part(elements, part, claimed)
                if element is None:
                    # Bare text between breaks: the span itself is the module.
                    result.snippets[module.id] = part
                    result.annotated_snippets[module.id] = part
                    continue
            if element is None:
                self.logger.debug("Could not locate segmented module %s", module.id)
                continue

            claimed.append(element)
            result.snippets[module.id] = outer_html(element)
            element["data-module-id"] = module.id
            result.annotated_snippets[module.id] = outer_html(element)

        result.annotated = serialize(clone)

    @staticmethod
    def _locate_part(elements: Sequence[Tag], part: str, claimed: Sequence[Tag]) -> Optional[Tag]:
        free = [element for element in elements if not overlaps(element, claimed)]
        for element in free:
            if outer_html(element) == part:
                return element
        part_text = text_of(parse(part)).strip()
        if not part_text:
            return None
        for element in free:
            if text_of(element).strip() == part_text:
                return element
        prefix = part_text[:_TEXT_PREFIX]
        for element in free:
            if text_of(element).strip().startswith(prefix):
                return element
        return None


__all__ = ["ModuleSegmenter", "SegmentationResult"]
