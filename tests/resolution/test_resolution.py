"""Tests for the module resolution chain."""

from __future__ import annotations

from typing import List

import pytest

from templatekit import resolution as resolution_module
from templatekit.document import outer_html, parse
from templatekit.models import Module, ModuleType
from templatekit.resolution import (
    ModuleRegistry,
    ResolutionContext,
    ResolutionStrategy,
    discover_strategies,
    should_be_module,
)


def test_id_attribute_wins_over_data_module_id(registry: ModuleRegistry) -> None:
    tree = parse(
        '<div data-module-id="m1"><p>data attribute holder</p></div>'
        '<section id="m1"><p>id attribute holder</p></section>'
    )
    resolution = registry.resolve(Module(id="m1", name="M1"), tree)

    assert resolution is not None
    assert resolution.strategy == "id"
    assert resolution.element.name == "section"


def test_data_module_id_used_when_no_id(registry: ModuleRegistry) -> None:
    tree = parse('<div data-module-id="m1"><p>data attribute holder</p></div>')
    resolution = registry.resolve(Module(id="m1", name="M1"), tree)

    assert resolution is not None
    assert resolution.strategy == "data-module-id"


def test_selector_strategy_uses_declared_selector(registry: ModuleRegistry) -> None:
    tree = parse('<table><tr><td class="promo">Big promo text here</td></tr></table>')
    module = Module(id="promo", name="Promo", selector="td.promo")
    resolution = registry.resolve(module, tree)

    assert resolution is not None
    assert resolution.strategy == "selector"
    assert resolution.element.name == "td"


def test_invalid_selector_is_skipped(registry: ModuleRegistry) -> None:
    tree = parse("<p>Nothing to see in here</p>")
    module = Module(id="broken", name="Broken", selector="td[[")

    assert registry.resolve(module, tree) is None


def test_snippet_strategy_matches_remembered_markup() -> None:
    registry = ModuleRegistry(snippets={"m": "<p>Remembered snippet text</p>"})
    tree = parse("<div><p>Other</p><p>Remembered snippet text</p></div>")
    resolution = registry.resolve(Module(id="m", name="M"), tree)

    assert resolution is not None
    assert resolution.strategy == "snippet"
    assert outer_html(resolution.element) == "<p>Remembered snippet text</p>"


def test_line_module_picks_nth_substantial_body_child(registry: ModuleRegistry) -> None:
    tree = parse(
        "<html><body><div>Short</div>"
        "<div>First long enough block</div>"
        "<div>Second long enough block</div></body></html>"
    )
    resolution = registry.resolve(Module(id="line-module-2", name="Part 2"), tree)

    assert resolution is not None
    assert resolution.strategy == "line-module"
    assert resolution.element.get_text() == "Second long enough block"


def test_div_strategy_uses_type_predicate(registry: ModuleRegistry) -> None:
    tree = parse('<div class="footer">Contact us to unsubscribe today</div>')
    module = Module(id="footer-div-3", name="Footer", type=ModuleType.FOOTER)
    resolution = registry.resolve(module, tree)

    assert resolution is not None
    assert resolution.strategy == "div"


def test_position_strategy_uses_leaf_index(registry: ModuleRegistry) -> None:
    tree = parse("<div><p>Leaf number one text</p><p>Leaf number two text</p></div>")
    resolution = registry.resolve(Module(id="unknown", name="Unknown"), tree, index=1)

    assert resolution is not None
    assert resolution.strategy == "position"
    assert resolution.element.get_text() == "Leaf number two text"


def test_excluded_markup_is_skipped(registry: ModuleRegistry) -> None:
    tree = parse(
        '<p id="a">This paragraph is long enough to count</p>'
        "<p>Another paragraph that is long enough</p>"
    )
    module = Module(id="a", name="A", tag="p")
    registry.remember("owner", '<p id="a">This paragraph is long enough to count</p>')
    resolution = registry.resolve(module, tree, exclude=["owner"])

    assert resolution is not None
    assert resolution.strategy == "tag"
    assert resolution.element.get_text() == "Another paragraph that is long enough"


def test_exclusion_follows_the_owner_element_not_its_text(registry: ModuleRegistry) -> None:
    tree = parse(
        '<div class="box"><p>Long enough shared words</p></div>'
        "<p>Long enough shared words</p>"
    )
    registry.remember("box", '<div class="box"><p>Long enough shared words</p></div>')
    resolution = registry.resolve(Module(id="para", name="Para", tag="p"), tree, exclude=["box"])

    assert resolution is not None
    assert resolution.element.find_parent("div") is None


def test_snippet_strategy_prefers_the_owned_occurrence(registry: ModuleRegistry) -> None:
    tree = parse("<p>Same text</p><br/><p>Same text</p>")
    registry.remember("second", "<p>Same text</p>", 1)
    resolution = registry.resolve(Module(id="second", name="Second"), tree)

    assert resolution is not None
    assert resolution.strategy == "snippet"
    assert resolution.element is tree.find_all("p")[1]
    assert registry.owner("second", tree) is tree.find_all("p")[1]


def test_unresolvable_module_returns_none(registry: ModuleRegistry) -> None:
    tree = parse("<p>Some text here</p>")
    assert registry.resolve(Module(id="ghost", name="Ghost"), tree) is None


def test_should_be_module_rejects_short_text() -> None:
    element = parse("<footer>©</footer>").find("footer")
    assert should_be_module(element, Module(id="f", name="F", type=ModuleType.FOOTER)) is False


def test_should_be_module_content_requires_block_tag() -> None:
    tree = parse(
        "<section>A content section with plenty of words</section>"
        "<span>A content span with plenty of words too</span>"
    )
    module = Module(id="c", name="C", type=ModuleType.CONTENT)
    assert should_be_module(tree.find("section"), module) is True
    assert should_be_module(tree.find("span"), module) is False


def test_discover_strategies_honours_enabled_names() -> None:
    strategies = discover_strategies(["position", "id"])
    assert [strategy.name for strategy in strategies] == ["id", "position"]


def test_discover_strategies_rejects_unknown_names() -> None:
    with pytest.raises(ValueError):
        discover_strategies(["id", "telepathy"])


class _FirstParagraph(ResolutionStrategy):
    name = "first-paragraph"

    def candidates(self, context: ResolutionContext) -> List:
        found = context.tree.find("p")
        return [found] if found is not None else []


class _EntryPoint:
    def __init__(self, name: str, target: object) -> None:
        self.name = name
        self._target = target

    def load(self) -> object:
        return self._target


def test_entry_point_strategies_are_appended(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        resolution_module,
        "_iter_entry_points",
        lambda: [_EntryPoint("first-paragraph", _FirstParagraph)],
    )
    strategies = discover_strategies()

    assert strategies[-1].name == "first-paragraph"
    registry = ModuleRegistry(strategies)
    resolution = registry.resolve(Module(id="x", name="X"), parse("<p>hello</p>"))
    assert resolution is not None
    assert resolution.strategy == "first-paragraph"
