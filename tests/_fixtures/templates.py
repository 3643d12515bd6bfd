"""Sample email templates and test doubles shared across the suite."""

from __future__ import annotations

from typing import List, Tuple

SIMPLE_TEMPLATE = (
    "<header><img src=x>Welcome</header>"
    "<p>First part</p><br><p>Second part</p>"
    "<footer>Unsubscribe here</footer>"
)

TEXT_SPAN_TEMPLATE = (
    "<header><img src=x></header>"
    "First<br>Second"
    "<footer>Unsubscribe</footer>"
)

DUPLICATE_TEMPLATE = (
    "<header><img src=x>Welcome</header>"
    "<p>Same text</p><br><p>Same text</p>"
    "<footer>Unsubscribe here</footer>"
)

TABLE_TEMPLATE = """<html><head><title>Newsletter</title></head><body>
<table>
<tr id="hero-row"><td><h1>Introducing our spring collection</h1><p>Discover fresh styles for the new season.</p></td></tr>
<tr data-module-id="promo"><td><p>Save twenty percent on everything this weekend only.</p></td></tr>
<tr><td><p>Questions? Contact us or unsubscribe at any time.</p></td></tr>
</table>
</body></html>"""

MODULES = [
    {"id": "hero-row", "name": "Hero", "type": "hero"},
    {"id": "promo", "name": "Promo", "type": "content"},
    {"id": "footer-div-1", "name": "Footer", "type": "footer", "tag": "tr"},
]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingRewriter:
    """Rewriter double that records calls and returns a canned snippet."""

    def __init__(self, response: str) -> None:
        self.response = response
        self.calls: List[Tuple[str, str, str]] = []

    def __call__(self, module_id: str, snippet: str, instruction: str) -> str:
        self.calls.append((module_id, snippet, instruction))
        return self.response


__all__ = ["MODULES", "SIMPLE_TEMPLATE", "TABLE_TEMPLATE", "FakeClock", "RecordingRewriter"]
