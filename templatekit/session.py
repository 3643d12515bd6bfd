"""Editing session: one document, its modules, selection, drafts and history."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from bs4 import BeautifulSoup, Tag

from .config import TemplateKitConfig, default_config
from .document import inner_html, occurrence_of, outer_html, parse
from .errors import MarkerMismatch, ModuleNotFound
from .history import HistoryStack
from .library import get_element, insert_at
from .logging import get_logger
from .models import Document, EditMode, Module, Revision
from .patching import PatchEngine, PatchResult
from .postproc.export import ExportArtifact, TemplateExporter
from .postproc.markers import MarkerManager, MarkerWrapper
from .postproc.properties import editor_content, parse_properties
from .resolution import ModuleRegistry, discover_strategies
from .scheduler import DebouncedCommit
from .segmenter import ModuleSegmenter

Rewriter = Callable[[str, str, str], str]
ModuleInput = Union[Module, Mapping[str, Any]]


@dataclass
class ModuleView:
    """What an editor shows for the selected module."""

    module: Module
    outer_html: str
    editor_html: str
    mapped: bool


class EditingSession:
    """Owns the live document, the snippet map and the undo history.

    Visual edits are debounced; every other operation flushes a pending visual
    edit before it runs. Recoverable failures are reported on ``PatchResult``
    values and logged, never raised.
    """

    def __init__(
        self,
        html_content: str,
        modules: Optional[Iterable[ModuleInput]] = None,
        *,
        config: TemplateKitConfig | None = None,
        registry: ModuleRegistry | None = None,
        segmenter: ModuleSegmenter | None = None,
        markers: MarkerManager | None = None,
        exporter: TemplateExporter | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or default_config()
        self.logger = get_logger("session")
        self.markers = markers or MarkerManager()
        if registry is None:
            registry = ModuleRegistry(discover_strategies(self.config.resolution.strategies or None))
        self.registry = registry
        self.segmenter = segmenter or ModuleSegmenter(self.config.segmentation)
        self.exporter = exporter or TemplateExporter(self.config.export.templates_dir)
        self.engine = PatchEngine(self.registry, self.markers)
        self.wrapper = MarkerWrapper(self.registry, self.markers)
        self._scheduler = DebouncedCommit(self.config.editor.debounce_ms / 1000.0, clock=clock)

        self.mode = EditMode(self.config.editor.default_mode)
        self.selected_id: Optional[str] = None
        self.last_result: Optional[PatchResult] = None
        self._draft: Optional[str] = None
        self._mapped: Set[str] = set()

        document = Document.load(html_content)
        snippets: Dict[str, str] = {}
        supplied = list(modules) if modules is not None else []
        if not supplied:
            segmentation = self.segmenter.segment(document)
            resolved_modules = list(segmentation.modules)
            snippets = dict(segmentation.snippets)
            if self.config.segmentation.annotate:
                document = Document(raw=segmentation.annotated)
                snippets = dict(segmentation.annotated_snippets)
        else:
            resolved_modules = [
                module if isinstance(module, Module) else Module.from_dict(module)
                for module in supplied
            ]

        self._document = document
        self._modules: List[Module] = resolved_modules
        self.registry.load(snippets)
        self._resolve_all()
        self.history: HistoryStack[Revision] = HistoryStack(
            Revision(document=self._document, snippets=self.registry.snippets)
        )
        self.logger.info(
            "Loaded document with %d modules (%d mapped)", len(self._modules), len(self._mapped)
        )

    # ------------------------------------------------------------------ state

    @property
    def document(self) -> Document:
        return self._document

    @property
    def html(self) -> str:
        return self._document.raw

    @property
    def modules(self) -> Tuple[Module, ...]:
        return tuple(self._modules)

    @property
    def snippets(self) -> Dict[str, str]:
        return self.registry.snippets

    @property
    def mapped(self) -> List[str]:
        """Ids of modules with a known location, in module order."""
        return [module.id for module in self._modules if module.id in self._mapped]

    @property
    def history_depth(self) -> int:
        return self.history.depth

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def pending(self) -> bool:
        return self._scheduler.pending

    def module(self, module_id: str) -> Module:
        """Return the known module, or an ad-hoc one for unknown ids."""
        for module in self._modules:
            if module.id == module_id:
                return module
        return Module(id=module_id, name=module_id)

    # -------------------------------------------------------------- selection

    def select(self, module_id: str) -> ModuleView:
        self.flush()
        self.selected_id = module_id
        self._draft = None
        self.logger.debug("Selected module %s", module_id)
        return self.view()

    def view(self) -> Optional[ModuleView]:
        if self.selected_id is None:
            return None
        module = self.module(self.selected_id)
        element = self._locate(module)
        if element is None:
            # Text spans between breaks have no element of their own.
            snippet = self.registry.snippet(module.id) or ""
            return ModuleView(
                module=module,
                outer_html=snippet,
                editor_html=snippet,
                mapped=module.id in self._mapped,
            )
        if self._draft is not None and self.mode is EditMode.VISUAL:
            editor_html = self._draft
        else:
            editor_html = editor_content(element, self.mode)
        return ModuleView(
            module=module,
            outer_html=outer_html(element),
            editor_html=editor_html,
            mapped=True,
        )

    def set_mode(self, mode: Union[str, EditMode]) -> str:
        """Switch editor flavour and return the content the new editor shows."""
        self.flush()
        self.mode = mode if isinstance(mode, EditMode) else EditMode(str(mode).strip().lower())
        view = self.view()
        return view.editor_html if view is not None else ""

    # ---------------------------------------------------------------- editing

    def edit_visual(self, html: str) -> bool:
        """Stage new inner markup for the selected module; commits after the quiet period."""
        module_id = self.selected_id
        if module_id is None:
            self.logger.warning("Visual edit ignored: no module selected")
            return False
        self._draft = html
        self._scheduler.submit(lambda: self._commit_visual(module_id, html))
        return True

    def tick(self) -> bool:
        """Commit a pending visual edit once its quiet period has elapsed."""
        return self._scheduler.poll()

    def flush(self) -> bool:
        return self._scheduler.flush()

    def edit_code(self, html: str) -> Optional[PatchResult]:
        """Replace the selected module's element with ``html`` immediately."""
        self.flush()
        if self.selected_id is None:
            self.logger.warning("Code edit ignored: no module selected")
            return None
        return self._apply(self.module(self.selected_id), html)

    def patch(self, module_id: str, new_markup: str) -> PatchResult:
        self.flush()
        return self._apply(self.module(module_id), new_markup)

    def insert_element(
        self, element: str, selection: Optional[Tuple[int, int]] = None
    ) -> Optional[str]:
        """Insert a library element (by name) or raw markup into the selected module.

        Code mode inserts over ``selection`` in the outer markup; visual mode
        appends to the module's inner markup.
        """
        if self.selected_id is None:
            self.logger.warning("Cannot insert element: no module selected")
            return None
        markup = get_element(element) or element
        module = self.module(self.selected_id)

        if self.mode is EditMode.CODE:
            self.flush()
            located = self._locate(module)
            current = outer_html(located) if located is not None else self.registry.snippet(module.id)
            if current is None:
                self.logger.warning("Cannot insert element: module %s not found", module.id)
                return None
            updated = insert_at(current, markup, selection)
            self.edit_code(updated)
            return updated

        if self._draft is not None:
            current = self._draft
        else:
            located = self._locate(module)
            current = inner_html(located) if located is not None else self.registry.snippet(module.id)
            if current is None:
                self.logger.warning("Cannot insert element: module %s not found", module.id)
                return None
        updated = insert_at(current, markup)
        self.edit_visual(updated)
        return updated

    def undo(self) -> bool:
        self.flush()
        revision = self.history.undo()
        if revision is None:
            self.logger.debug("Nothing to undo")
            return False
        self._document = revision.document
        self.registry.load(revision.snippets)
        self._draft = None
        self._resolve_all()
        self.logger.info("Undo to revision %d of %d", self.history.cursor + 1, self.history.depth)
        return True

    def refresh(self) -> List[str]:
        """Re-resolve every module against the live document and clear selection."""
        self.flush()
        self.selected_id = None
        self._draft = None
        self._resolve_all()
        return self.mapped

    # ------------------------------------------------------- snippets/rewrite

    def extract(self, module_id: str) -> Optional[str]:
        self.flush()
        snippet = self.registry.snippet(module_id)
        if snippet:
            return snippet
        element = self._locate(self.module(module_id))
        return outer_html(element) if element is not None else None

    def parse_properties(self, module_id: str) -> Dict[str, Any]:
        snippet = self.extract(module_id)
        return parse_properties(snippet) if snippet else {}

    def rewrite(self, module_id: str, instruction: str, rewriter: Rewriter) -> PatchResult:
        """Send the module's snippet to ``rewriter`` and patch in what comes back."""
        snippet = self.extract(module_id)
        if snippet is None:
            return self._failed(
                ModuleNotFound(f"Could not locate module {module_id}", module_id=module_id)
            )
        new_markup = rewriter(module_id, snippet, instruction)
        return self._apply(self.module(module_id), new_markup)

    def begin_external_edit(self, module_id: str) -> str:
        """Bracket the module with selection markers in the live document."""
        self.flush()
        module = self.module(module_id)
        self._document = self.wrapper.wrap(self._document, module, index=self._index_of(module_id))
        return self.html

    def apply_marked_response(self, module_id: str, html: str) -> PatchResult:
        """Patch in the marked region of a collaborator's full-document response."""
        self.flush()
        blocks = self.markers.extract(html)
        if module_id not in blocks:
            return self._failed(
                MarkerMismatch(
                    f"Response carries no marked region for module {module_id}",
                    module_id=module_id,
                )
            )
        return self._apply(self.module(module_id), blocks[module_id], unmark=True)

    def clear_markers(self) -> str:
        self.flush()
        self._document = Document(raw=self.markers.strip(self.html))
        return self.html

    def compile(self) -> str:
        """Return the document with the selected module marked, without changing the session."""
        self.flush()
        if self.selected_id is None:
            return self.html
        module = self.module(self.selected_id)
        return self.wrapper.wrap(self._document, module, index=self._index_of(module.id)).raw

    # ----------------------------------------------------------------- export

    def export_document(self, title: str = "Email Template") -> ExportArtifact:
        self.flush()
        return self.exporter.export_document(self.markers.strip(self.html), title)

    def export_module(self, module_id: str) -> Optional[ExportArtifact]:
        self.flush()
        element = self._locate(self.module(module_id))
        if element is not None:
            content = inner_html(element)
        else:
            content = self.registry.snippet(module_id)
        if content is None:
            self.logger.warning("Cannot export module %s: not found", module_id)
            return None
        return self.exporter.export_module(module_id, content)

    # --------------------------------------------------------------- internal

    def _commit_visual(self, module_id: str, html: str) -> PatchResult:
        self._draft = None
        module = self.module(module_id)
        tree = self._document.tree()
        element = self._locate(module, tree)
        if element is None:
            if module.id in self._mapped:
                # Text span: the edited markup replaces the span itself.
                return self._apply(module, html)
            return self._failed(
                ModuleNotFound(f"Could not locate module {module_id}", module_id=module_id)
            )
        element.clear()
        for node in list(parse(html).contents):
            element.append(node)
        return self._apply(module, outer_html(element))

    def _apply(self, module: Module, new_markup: str, *, unmark: bool = False) -> PatchResult:
        result = self.engine.patch(
            self._document, module, new_markup, index=self._index_of(module.id)
        )
        self.last_result = result
        if not result.applied:
            return result

        document = result.document
        baseline = self._document.raw
        if unmark:
            document = Document(raw=self.markers.strip(document.raw, module.id))
            baseline = self.markers.strip(baseline, module.id)
        if document.raw == baseline:
            self.logger.info("Module %s identical; skipping commit", module.id)
            self._document = document
            result.document = document
            result.changed = False
            return result

        result.document = document
        result.changed = True
        self._document = document
        self._resolve_all()
        self.history.commit(Revision(document=document, snippets=self.registry.snippets))
        self.logger.info(
            "Committed patch for %s via %s (history depth %d)",
            module.id,
            result.strategy,
            self.history.depth,
        )
        return result

    def _failed(self, error) -> PatchResult:
        self.logger.warning("%s", error)
        result = PatchResult(document=self._document, applied=False, error=error)
        self.last_result = result
        return result

    def _index_of(self, module_id: str) -> Optional[int]:
        for index, module in enumerate(self._modules):
            if module.id == module_id:
                return index
        return None

    def _locate(self, module: Module, tree: Optional[BeautifulSoup] = None) -> Optional[Tag]:
        """Return the module's element; None for text spans and unresolved modules."""
        if tree is None:
            tree = self._document.tree()
        if module.id in self._mapped and self.registry.snippet(module.id):
            return self.registry.owner(module.id, tree)
        resolution = self.registry.resolve(module, tree, index=self._index_of(module.id))
        return resolution.element if resolution is not None else None

    def _resolve_all(self) -> None:
        """Keep snippets still present verbatim; re-resolve the rest around them."""
        raw = self._document.raw
        mapped: Set[str] = set()
        stale: List[Tuple[int, Module]] = []
        for index, module in enumerate(self._modules):
            snippet = self.registry.snippet(module.id)
            if snippet and snippet in raw:
                mapped.add(module.id)
            else:
                stale.append((index, module))
        self._place(mapped)

        if stale:
            tree = self._document.tree()
            for index, module in stale:
                owned = self._owned_by_others(module.id, mapped)
                resolution = self.registry.resolve(module, tree, index=index, exclude=owned)
                if resolution is None:
                    self.registry.forget(module.id)
                    self.logger.warning("Module %s is unmapped in the current document", module.id)
                    continue
                element = resolution.element
                self.registry.remember(module.id, outer_html(element), occurrence_of(element, tree))
                mapped.add(module.id)
            self._place(mapped)
        self._mapped = mapped

    def _place(self, mapped: Set[str]) -> None:
        """Assign each mapped snippet an occurrence, walking the modules in document order."""
        raw = self._document.raw
        cursor = 0
        for module in self._modules:
            if module.id not in mapped:
                continue
            snippet = self.registry.snippet(module.id)
            if not snippet:
                continue
            start = raw.find(snippet, cursor)
            if start == -1:
                start = raw.find(snippet)
            else:
                cursor = start + len(snippet)
            if start != -1:
                self.registry.place(module.id, raw.count(snippet, 0, start))

    def _owned_by_others(self, module_id: str, mapped: Set[str]) -> Sequence[str]:
        return [other for other in mapped if other != module_id]


__all__ = ["EditingSession", "ModuleView", "Rewriter"]
