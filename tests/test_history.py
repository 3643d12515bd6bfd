"""Tests for the undo history stack."""

from __future__ import annotations

from templatekit.history import HistoryStack


def test_commit_advances_cursor() -> None:
    history = HistoryStack("a")
    history.commit("b")
    history.commit("c")

    assert history.current == "c"
    assert history.cursor == 2
    assert history.depth == 3
    assert history.can_undo is True


def test_undo_walks_back_to_initial_then_stops() -> None:
    history = HistoryStack("a")
    history.commit("b")

    assert history.undo() == "a"
    assert history.undo() is None
    assert history.current == "a"
    assert history.can_undo is False


def test_commit_after_undo_truncates_future() -> None:
    history = HistoryStack("a")
    history.commit("b")
    history.commit("c")
    history.undo()
    history.undo()
    history.commit("d")

    assert history.snapshots == ("a", "d")
    assert history.current == "d"
