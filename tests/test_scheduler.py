"""Tests for the debounced commit scheduler."""

from __future__ import annotations

from typing import List

import pytest

from templatekit.scheduler import DebouncedCommit
from tests._fixtures.templates import FakeClock


def test_poll_waits_for_quiet_period(clock: FakeClock) -> None:
    runs: List[str] = []
    scheduler = DebouncedCommit(0.5, clock=clock)
    scheduler.submit(lambda: runs.append("x"))

    clock.advance(0.2)
    assert scheduler.poll() is False
    clock.advance(0.3)
    assert scheduler.poll() is True
    assert runs == ["x"]
    assert scheduler.pending is False


def test_submit_replaces_pending_task_and_restarts_timer(clock: FakeClock) -> None:
    runs: List[str] = []
    scheduler = DebouncedCommit(0.5, clock=clock)
    scheduler.submit(lambda: runs.append("first"))
    clock.advance(0.4)
    scheduler.submit(lambda: runs.append("second"))
    clock.advance(0.4)

    assert scheduler.poll() is False
    clock.advance(0.1)
    assert scheduler.poll() is True
    assert runs == ["second"]


def test_flush_runs_immediately_and_cancel_discards(clock: FakeClock) -> None:
    runs: List[str] = []
    scheduler = DebouncedCommit(10, clock=clock)

    assert scheduler.flush() is False
    scheduler.submit(lambda: runs.append("flushed"))
    assert scheduler.flush() is True
    scheduler.submit(lambda: runs.append("cancelled"))
    assert scheduler.cancel() is True
    clock.advance(20)
    assert scheduler.poll() is False
    assert runs == ["flushed"]


def test_negative_delay_is_rejected() -> None:
    with pytest.raises(ValueError):
        DebouncedCommit(-1)
