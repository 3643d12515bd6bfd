from __future__ import annotations

import pytest

from templatekit.models import Document
from templatekit.resolution import ModuleRegistry
from templatekit.session import EditingSession
from tests._fixtures.templates import SIMPLE_TEMPLATE, FakeClock


@pytest.fixture
def clock() -> FakeClock:
    """Provide a manually advanced clock for debounce tests."""
    return FakeClock()


@pytest.fixture
def simple_document() -> Document:
    return Document.load(SIMPLE_TEMPLATE)


@pytest.fixture
def registry() -> ModuleRegistry:
    return ModuleRegistry()


@pytest.fixture
def session(clock: FakeClock) -> EditingSession:
    """Session over the four-module sample template, segmented automatically."""
    return EditingSession(SIMPLE_TEMPLATE, clock=clock)
