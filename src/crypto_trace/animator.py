"""
Timed auto-advance for a Stepper.

The Animator asks a scheduler for one-shot callbacks and re-arms after
every tick. Each armed tick carries a generation token; pause() and
set_speed() bump the token and cancel the pending timer, so a callback
that was already in flight does nothing when it finally runs.

Two schedulers are provided:
- ThreadingScheduler: real time, one threading.Timer per tick
- ManualScheduler:    virtual clock advanced explicitly (tests, or front
                      ends with their own event loop)
"""

from __future__ import annotations

import heapq
import itertools
import threading
from typing import Callable, Protocol

from . import DEFAULT_SPEED_MS
from .stepper import Stepper

StateCallback = Callable[[bool], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...


class ThreadingScheduler:
    """Runs callbacks on daemon threading.Timer threads."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay_ms / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return timer


class _ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Deterministic scheduler driven by advance().

    Callbacks due at the same time run in the order they were scheduled.
    A callback scheduled while advancing runs in the same advance() call
    if it falls due within the advanced window.
    """

    def __init__(self) -> None:
        self._now_ms = 0
        self._seq = itertools.count()
        self._queue: list[tuple[int, int, Callable[[], None], _ManualHandle]] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle()
        heapq.heappush(self._queue, (self._now_ms + delay_ms, next(self._seq), callback, handle))
        return handle

    def advance(self, ms: int) -> int:
        """
        Move the clock forward by ``ms`` and run everything that falls due.

        Returns:
            Number of callbacks run
        """
        target = self._now_ms + ms
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, callback, handle = heapq.heappop(self._queue)
            self._now_ms = due
            if handle.cancelled:
                continue
            callback()
            ran += 1
        self._now_ms = target
        return ran

    @property
    def now_ms(self) -> int:
        return self._now_ms

    @property
    def pending(self) -> int:
        """Number of scheduled, not cancelled callbacks."""
        return sum(1 for entry in self._queue if not entry[3].cancelled)


class Animator:
    """
    Plays a Stepper forward at a fixed period until the last step.

    The observer is called with the new playing flag on every transition,
    including the automatic pause at the end of the sequence and the pause
    forced when the step observer raises during a tick.
    """

    def __init__(
        self,
        stepper: Stepper,
        speed_ms: int = DEFAULT_SPEED_MS,
        on_state_change: StateCallback | None = None,
        scheduler: Scheduler | None = None,
    ):
        self._check_speed(speed_ms)
        self._stepper = stepper
        self._speed_ms = speed_ms
        self._on_state_change = on_state_change
        self._scheduler = scheduler or ThreadingScheduler()
        # Shared with the stepper: one critical section for cursor + playback
        self._lock = stepper.lock
        self._playing = False
        self._timer: TimerHandle | None = None
        self._token = 0

    @staticmethod
    def _check_speed(speed_ms: int) -> None:
        if speed_ms <= 0:
            raise ValueError(f"Speed must be a positive number of ms, got {speed_ms}")

    def play(self) -> None:
        """Start auto-advancing; no-op while already playing."""
        with self._lock:
            if self._playing:
                return
            self._playing = True
            self._arm()
            self._fire_state_change()

    def pause(self) -> None:
        """Stop auto-advancing; no-op while already paused."""
        with self._lock:
            if not self._playing:
                return
            self._playing = False
            self._disarm()
            self._fire_state_change()

    def toggle(self) -> None:
        with self._lock:
            if self._playing:
                self.pause()
            else:
                self.play()

    def set_speed(self, ms: int) -> None:
        """Change the period; restarts the timer immediately when playing."""
        self._check_speed(ms)
        with self._lock:
            self._speed_ms = ms
            if self._playing:
                self.pause()
                self.play()

    def _arm(self) -> None:
        self._token += 1
        token = self._token
        self._timer = self._scheduler.call_later(self._speed_ms, lambda: self._tick(token))

    def _disarm(self) -> None:
        self._token += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _tick(self, token: int) -> None:
        with self._lock:
            if not self._playing or token != self._token:
                return
            self._timer = None
            try:
                self._stepper.next()
            except Exception:
                # No timer is armed any more; report the stop before propagating
                self.pause()
                raise
            # The step observer may have paused or restarted playback
            if not self._playing or token != self._token:
                return
            if self._stepper.is_at_end:
                self.pause()
            else:
                self._arm()

    def _fire_state_change(self) -> None:
        if self._on_state_change is not None:
            self._on_state_change(self._playing)

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def speed(self) -> int:
        return self._speed_ms

    def __repr__(self) -> str:
        return f"Animator(playing={self._playing}, speed_ms={self._speed_ms})"
