"""
Navigation over a built step sequence.

The Stepper owns a cursor into an immutable tuple of steps and tells a
single observer about every effective move:

    on_step_change(current_step, previous_step_or_None, index, total)

Requests that would leave the sequence are clamped or ignored; navigation
never raises.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Sequence

StepCallback = Callable[[Any, Any, int, int], None]


class Stepper:
    """
    Cursor over a step sequence with one change observer.

    Cursor mutation and its notification run under one re-entrant lock, so
    an Animator tick on a timer thread and a user-triggered move cannot
    interleave. The observer may call back into the Stepper.
    """

    def __init__(self, steps: Sequence[Any], on_step_change: StepCallback | None = None):
        self._lock = threading.RLock()
        self._steps = self._check(steps)
        self._current_index = 0
        self._on_step_change = on_step_change

    @staticmethod
    def _check(steps: Sequence[Any]) -> tuple:
        frozen = tuple(steps)
        if not frozen:
            raise ValueError("Stepper needs at least one step")
        return frozen

    def next(self) -> int:
        """Advance one step; no-op at the last step. Returns the index."""
        with self._lock:
            if self._current_index < len(self._steps) - 1:
                self._move_to(self._current_index + 1)
            return self._current_index

    def prev(self) -> int:
        """Go back one step; no-op at the first step. Returns the index."""
        with self._lock:
            if self._current_index > 0:
                self._move_to(self._current_index - 1)
            return self._current_index

    def go_to(self, index: int) -> int:
        """Jump to ``index``, clamped into [0, total - 1]. Returns the index."""
        with self._lock:
            clamped = max(0, min(index, len(self._steps) - 1))
            if clamped != self._current_index:
                self._move_to(clamped)
            return self._current_index

    def reset(self, new_steps: Sequence[Any]) -> None:
        """Replace the sequence and announce its first step."""
        with self._lock:
            self._steps = self._check(new_steps)
            self._current_index = 0
            self._notify(None)

    def start(self) -> None:
        """Announce the current step (index 0 after construction) without moving."""
        with self._lock:
            self._notify(None)

    @property
    def lock(self) -> threading.RLock:
        """Lock guarding the cursor; shared with an attached Animator."""
        return self._lock

    def subscribe(self, on_step_change: StepCallback | None) -> None:
        """Replace the observer (None to detach)."""
        with self._lock:
            self._on_step_change = on_step_change

    def _move_to(self, index: int) -> None:
        previous = self._steps[self._current_index]
        self._current_index = index
        self._notify(previous)

    def _notify(self, previous: Any) -> None:
        if self._on_step_change is not None:
            self._on_step_change(
                self._steps[self._current_index],
                previous,
                self._current_index,
                len(self._steps),
            )

    @property
    def steps(self) -> tuple:
        return self._steps

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_step(self) -> Any:
        return self._steps[self._current_index]

    @property
    def total_steps(self) -> int:
        return len(self._steps)

    @property
    def is_at_start(self) -> bool:
        return self._current_index == 0

    @property
    def is_at_end(self) -> bool:
        return self._current_index == len(self._steps) - 1

    def __repr__(self) -> str:
        return f"Stepper(index={self._current_index}, total={len(self._steps)})"
