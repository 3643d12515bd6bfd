"""Tests for the patch engine strategy chain."""

from __future__ import annotations

from templatekit.errors import MalformedFragment, MarkerMismatch, ModuleNotFound
from templatekit.models import Document, Module
from templatekit.patching import PatchEngine
from templatekit.postproc.markers import MarkerWrapper
from templatekit.resolution import ModuleRegistry
from templatekit.segmenter import ModuleSegmenter
from tests._fixtures.templates import DUPLICATE_TEMPLATE

LINE_ONE = Module(id="line-module-1", name="Body part 1")


def _segmented_registry(document: Document) -> ModuleRegistry:
    registry = ModuleRegistry()
    registry.load(ModuleSegmenter().segment(document).snippets)
    return registry


def test_patch_replaces_only_the_target_module(simple_document: Document) -> None:
    registry = _segmented_registry(simple_document)
    before = registry.snippets
    result = PatchEngine(registry).patch(simple_document, LINE_ONE, "<p>Updated</p>")

    assert result.applied is True
    assert result.changed is True
    assert result.strategy == "snippet"
    assert result.document.raw.count("<p>Updated</p>") == 1
    assert "<p>First part</p>" not in result.document.raw
    assert before["line-module-2"] in result.document.raw
    assert before["footer-2"] in result.document.raw
    assert registry.snippet("line-module-1") == "<p>Updated</p>"
    assert registry.snippet("line-module-2") == before["line-module-2"]


def test_patch_is_idempotent(simple_document: Document) -> None:
    engine = PatchEngine(_segmented_registry(simple_document))
    once = engine.patch(simple_document, LINE_ONE, "<p>Updated</p>")
    twice = engine.patch(once.document, LINE_ONE, "<p>Updated</p>")

    assert twice.applied is True
    assert twice.changed is False
    assert twice.document.raw == once.document.raw


def test_marker_scoped_patch_keeps_markers(simple_document: Document) -> None:
    registry = _segmented_registry(simple_document)
    marked = MarkerWrapper(registry).wrap(simple_document, LINE_ONE)
    result = PatchEngine(registry).patch(marked, LINE_ONE, "<p>Marked</p>")

    assert result.strategy == "markers"
    assert (
        "<!--START_SELECTED_line-module-1-->\n<p>Marked</p>\n<!--END_SELECTED_line-module-1-->"
        in result.document.raw
    )
    assert "<p>First part</p>" not in result.document.raw


def test_lone_marker_falls_through_with_warning(simple_document: Document) -> None:
    registry = _segmented_registry(simple_document)
    broken = Document(
        raw=simple_document.raw.replace(
            "<p>First part</p>", "<!--START_SELECTED_line-module-1--><p>First part</p>"
        )
    )
    result = PatchEngine(registry).patch(broken, LINE_ONE, "<p>Updated</p>")

    assert result.applied is True
    assert result.strategy == "snippet"
    assert len(result.warnings) == 1
    assert isinstance(result.warnings[0], MarkerMismatch)


def test_dom_patch_swaps_matching_child_cell() -> None:
    document = Document.load('<table><tr id="row"><td>Old cell text</td></tr></table>')
    result = PatchEngine(ModuleRegistry()).patch(
        document, Module(id="row", name="Row"), "<td>New cell text</td>"
    )

    assert result.strategy == "dom"
    assert result.document.raw == '<table><tr id="row"><td>New cell text</td></tr></table>'


def test_dom_patch_inserts_only_the_replacement_element() -> None:
    document = Document.load('<table><tr id="row"><td>Old cell text</td></tr></table>')
    result = PatchEngine(ModuleRegistry()).patch(
        document, Module(id="row", name="Row"), "<td>New cell text</td> stray"
    )

    assert result.strategy == "dom"
    assert "stray" not in result.document.raw
    assert result.document.raw == '<table><tr id="row"><td>New cell text</td></tr></table>'


def test_snippet_patch_targets_the_module_occurrence() -> None:
    document = Document.load(DUPLICATE_TEMPLATE)
    registry = ModuleRegistry()
    registry.remember("line-module-1", "<p>Same text</p>")
    registry.remember("line-module-2", "<p>Same text</p>")
    registry.place("line-module-2", 1)
    result = PatchEngine(registry).patch(
        document, Module(id="line-module-2", name="Body part 2"), "<p>Changed second</p>"
    )

    assert result.strategy == "snippet"
    assert "<p>Same text</p><br/><p>Changed second</p>" in result.document.raw
    assert registry.snippet("line-module-1") == "<p>Same text</p>"


def test_fragment_without_element_is_malformed() -> None:
    document = Document.load('<div id="m"><p>Some text content</p></div>')
    result = PatchEngine(ModuleRegistry()).patch(document, Module(id="m", name="M"), "just text")

    assert result.applied is False
    assert isinstance(result.error, MalformedFragment)
    assert result.document is document


def test_missing_module_reports_not_found(simple_document: Document) -> None:
    result = PatchEngine(ModuleRegistry()).patch(
        simple_document, Module(id="ghost", name="Ghost"), "<p>x</p>"
    )

    assert result.applied is False
    assert isinstance(result.error, ModuleNotFound)
    assert result.document.raw == simple_document.raw
    assert result.to_dict()["error"]["code"] == "MODULE_NOT_FOUND"
