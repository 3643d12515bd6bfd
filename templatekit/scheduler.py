"""Single-slot debounce scheduler for live (visual) edits."""

from __future__ import annotations

import time
from typing import Any, Callable, Optional


class DebouncedCommit:
    """Holds at most one pending commit and runs it after a quiet period.

    Nothing runs in the background: the host calls ``poll`` from its event loop
    (or ``flush`` when it needs the pending edit applied right away).
    """

    def __init__(self, delay: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        if delay < 0:
            raise ValueError("delay must not be negative")
        self.delay = delay
        self._clock = clock
        self._task: Optional[Callable[[], Any]] = None
        self._deadline: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._task is not None

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def submit(self, task: Callable[[], Any]) -> None:
        """Replace any pending task and restart the quiet period."""
        self._task = task
        self._deadline = self._clock() + self.delay

    def due(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    def poll(self) -> bool:
        """Run the pending task if its quiet period has elapsed."""
        if self.pending and self.due():
            return self._run()
        return False

    def flush(self) -> bool:
        """Run the pending task now; False when nothing was pending."""
        if not self.pending:
            return False
        return self._run()

    def cancel(self) -> bool:
        cancelled = self.pending
        self._task = None
        self._deadline = None
        return cancelled

    def _run(self) -> bool:
        task = self._task
        self._task = None
        self._deadline = None
        if task is not None:
            task()
        return True


__all__ = ["DebouncedCommit"]
