"""Module registry: resolver chain plus the per-module snippet map."""

from __future__ import annotations

from typing import Collection, Dict, Iterable, List, Mapping, Optional

from bs4 import BeautifulSoup, Tag

from ..document import iter_elements, outer_html, overlaps
from ..logging import get_logger
from ..models import Module
from .base import Resolution, ResolutionContext, ResolutionStrategy


class ModuleRegistry:
    """Resolves modules to elements and remembers their last-known markup.

    Identical snippets can belong to several modules, so each snippet is paired
    with the 0-based occurrence of that text in the current document that the
    module owns.
    """

    def __init__(
        self,
        strategies: Optional[Iterable[ResolutionStrategy]] = None,
        snippets: Optional[Mapping[str, str]] = None,
    ) -> None:
        if strategies is None:
            from . import discover_strategies

            strategies = discover_strategies()
        self.strategies: List[ResolutionStrategy] = list(strategies)
        self._snippets: Dict[str, str] = dict(snippets or {})
        self._occurrences: Dict[str, int] = {}
        self.logger = get_logger("registry")

    @property
    def snippets(self) -> Dict[str, str]:
        return dict(self._snippets)

    @property
    def occurrences(self) -> Dict[str, int]:
        return dict(self._occurrences)

    def snippet(self, module_id: str) -> Optional[str]:
        return self._snippets.get(module_id)

    def occurrence(self, module_id: str) -> int:
        return self._occurrences.get(module_id, 0)

    def remember(self, module_id: str, html: str, occurrence: Optional[int] = None) -> None:
        self._snippets[module_id] = html
        if occurrence is not None:
            self._occurrences[module_id] = occurrence

    def place(self, module_id: str, occurrence: int) -> None:
        """Record which occurrence of the module's snippet the module owns."""
        self._occurrences[module_id] = occurrence

    def forget(self, module_id: str) -> None:
        self._snippets.pop(module_id, None)
        self._occurrences.pop(module_id, None)

    def load(self, snippets: Mapping[str, str]) -> None:
        """Replace the whole snippet map; occurrences reset to the first match."""
        self._snippets = dict(snippets)
        self._occurrences = {}

    def resolve(
        self,
        module: Module,
        tree: BeautifulSoup,
        *,
        index: Optional[int] = None,
        exclude: Collection[str] = (),
    ) -> Optional[Resolution]:
        """Walk the strategy chain and return the first usable match.

        ``exclude`` lists ids of modules that already own part of the tree; an
        element that is, contains, or sits inside one of their elements is
        skipped and the chain moves on. Returning None means the module is
        unmapped, which callers must tolerate.
        """
        context = ResolutionContext(
            module=module,
            tree=tree,
            index=index,
            snippets=self._snippets,
            occurrences=self._occurrences,
        )
        owners = self._owners(tree, exclude)
        for strategy in self.strategies:
            for element in strategy.candidates(context):
                if owners and overlaps(element, owners):
                    continue
                self.logger.debug(
                    "Resolved %s via %s to <%s>", module.id, strategy.name, element.name
                )
                return Resolution(element=element, strategy=strategy.name)
        self.logger.debug("No strategy resolved module %s", module.id)
        return None

    def owner(self, module_id: str, tree: BeautifulSoup) -> Optional[Tag]:
        """Return the element holding the module's snippet occurrence, if it is an element."""
        snippet = self._snippets.get(module_id)
        if not snippet:
            return None
        matches = [element for element in iter_elements(tree) if outer_html(element) == snippet]
        if not matches:
            return None
        position = self.occurrence(module_id)
        return matches[position] if position < len(matches) else matches[0]

    def _owners(self, tree: BeautifulSoup, module_ids: Collection[str]) -> List[Tag]:
        owners: List[Tag] = []
        for module_id in module_ids:
            element = self.owner(module_id, tree)
            if element is not None:
                owners.append(element)
        return owners


__all__ = ["ModuleRegistry"]
