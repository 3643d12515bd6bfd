"""Append-only snapshot log with an undo cursor."""

from __future__ import annotations

from typing import Generic, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class HistoryStack(Generic[T]):
    """Whole-document snapshots plus a cursor at the one currently shown.

    Committing after an undo drops every snapshot past the cursor, so an undone
    edit cannot be brought back once something new is committed.
    """

    def __init__(self, initial: T) -> None:
        self._entries: List[T] = [initial]
        self._cursor = 0

    @property
    def current(self) -> T:
        return self._entries[self._cursor]

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def depth(self) -> int:
        return len(self._entries)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def snapshots(self) -> Tuple[T, ...]:
        return tuple(self._entries)

    def commit(self, snapshot: T) -> None:
        del self._entries[self._cursor + 1:]
        self._entries.append(snapshot)
        self._cursor = len(self._entries) - 1

    def undo(self) -> Optional[T]:
        """Step back one snapshot; None when already at the oldest state."""
        if self._cursor == 0:
            return None
        self._cursor -= 1
        return self._entries[self._cursor]


__all__ = ["HistoryStack"]
