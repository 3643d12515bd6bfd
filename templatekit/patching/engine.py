"""Patch engine: merge one module's new markup back into the full document."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ..document import child_elements, parse, replace_nth, serialize
from ..errors import MalformedFragment, MarkerMismatch, ModuleNotFound, TemplateKitError
from ..logging import get_logger
from ..models import Document, Module
from ..postproc.markers import MarkerManager, MarkerStatus
from ..resolution import ModuleRegistry


@dataclass
class PatchRequest:
    """One requested module replacement."""

    document: Document
    module: Module
    new_markup: str
    index: Optional[int] = None


@dataclass
class PatchResult:
    """Outcome of a patch attempt; failures leave ``document`` untouched."""

    document: Document
    applied: bool
    strategy: Optional[str] = None
    changed: bool = False
    warnings: List[TemplateKitError] = field(default_factory=list)
    error: Optional[TemplateKitError] = None

    def to_dict(self) -> dict:
        return {
            "applied": self.applied,
            "changed": self.changed,
            "strategy": self.strategy,
            "warnings": [warning.to_dict() for warning in self.warnings],
            "error": self.error.to_dict() if self.error else None,
        }


class PatchStrategy(ABC):
    """One way of locating and replacing a module's region."""

    name: str = ""

    @abstractmethod
    def apply(self, request: PatchRequest) -> Optional[str]:
        """Return the patched document markup, or None when not applicable."""


class MarkerScopedPatch(PatchStrategy):
    """Replace the span between the module's START/END markers."""

    name = "markers"

    def __init__(self, markers: MarkerManager) -> None:
        self.markers = markers

    def apply(self, request: PatchRequest) -> Optional[str]:
        raw = request.document.raw
        module_id = request.module.id
        status = self.markers.status(raw, module_id)
        if status is MarkerStatus.ABSENT:
            return None
        if status is MarkerStatus.MISMATCH:
            raise MarkerMismatch(
                f"Unpaired selection marker for module {module_id}", module_id=module_id
            )
        return self.markers.replace(raw, module_id, request.new_markup)


class SnippetPatch(PatchStrategy):
    """Replace the module's own occurrence of its remembered snippet."""

    name = "snippet"

    def __init__(self, registry: ModuleRegistry) -> None:
        self.registry = registry

    def apply(self, request: PatchRequest) -> Optional[str]:
        module_id = request.module.id
        snippet = self.registry.snippet(module_id)
        if not snippet:
            return None
        return replace_nth(
            request.document.raw, snippet, request.new_markup, self.registry.occurrence(module_id)
        )


class DomPatch(PatchStrategy):
    """Re-resolve the module in a parsed tree and swap the element out."""

    name = "dom"

    def __init__(self, registry: ModuleRegistry) -> None:
        self.registry = registry

    def apply(self, request: PatchRequest) -> Optional[str]:
        tree = request.document.tree()
        resolution = self.registry.resolve(request.module, tree, index=request.index)
        if resolution is None:
            return None

        fragment = parse(request.new_markup)
        root = fragment.find(True)
        if root is None:
            raise MalformedFragment(
                f"Replacement for module {request.module.id} contains no element",
                module_id=request.module.id,
            )

        target = resolution.element
        if root.name != target.name:
            # A wrapper row keeps its attributes when the new markup is one of its cells.
            child = next(
                (element for element in child_elements(target) if element.name == root.name),
                None,
            )
            if child is not None:
                target = child

        target.replace_with(root)
        return serialize(tree)


class PatchEngine:
    """Tries patch strategies in order; the first applicable one wins."""

    def __init__(
        self,
        registry: ModuleRegistry,
        markers: MarkerManager | None = None,
        strategies: Optional[Iterable[PatchStrategy]] = None,
    ) -> None:
        self.registry = registry
        self.markers = markers or MarkerManager()
        if strategies is None:
            strategies = (
                MarkerScopedPatch(self.markers),
                SnippetPatch(registry),
                DomPatch(registry),
            )
        self.strategies: List[PatchStrategy] = list(strategies)
        self.logger = get_logger("patching")

    def patch(
        self,
        document: Document,
        module: Module,
        new_markup: str,
        *,
        index: Optional[int] = None,
    ) -> PatchResult:
        request = PatchRequest(document=document, module=module, new_markup=new_markup, index=index)
        warnings: List[TemplateKitError] = []
        for strategy in self.strategies:
            try:
                updated = strategy.apply(request)
            except (MarkerMismatch, MalformedFragment) as exc:
                self.logger.warning("Patch strategy %s skipped: %s", strategy.name, exc)
                warnings.append(exc)
                continue
            if updated is None:
                continue
            # A unique replacement is trivially its own first occurrence.
            occurrence = 0 if updated.count(new_markup) <= 1 else None
            self.registry.remember(module.id, new_markup, occurrence)
            self.logger.debug("Patched module %s via %s", module.id, strategy.name)
            return PatchResult(
                document=Document(raw=updated),
                applied=True,
                strategy=strategy.name,
                changed=updated != document.raw,
                warnings=warnings,
            )

        error: TemplateKitError = next(
            (warning for warning in warnings if isinstance(warning, MalformedFragment)),
            ModuleNotFound(f"Could not locate module {module.id}", module_id=module.id),
        )
        self.logger.warning("Patch for module %s had no effect: %s", module.id, error)
        return PatchResult(document=document, applied=False, warnings=warnings, error=error)


__all__ = [
    "DomPatch",
    "MarkerScopedPatch",
    "PatchEngine",
    "PatchRequest",
    "PatchResult",
    "PatchStrategy",
    "SnippetPatch",
]
