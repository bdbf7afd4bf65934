"""
Tests for Animator playback.

Timing is driven by ManualScheduler, so every test is deterministic; one
test exercises the real ThreadingScheduler with a short period.
"""

import threading

import pytest

from crypto_trace.animator import Animator, ManualScheduler, ThreadingScheduler
from crypto_trace.stepper import Stepper


class Harness:
    """Stepper + Animator wired to recording observers."""

    def __init__(self, n_steps: int = 5, speed_ms: int = 100):
        self.moves = []
        self.states = []
        self.scheduler = ManualScheduler()
        self.stepper = Stepper(
            tuple(f"s{i}" for i in range(n_steps)),
            lambda step, prev, index, total: self.moves.append(index),
        )
        self.animator = Animator(
            self.stepper,
            speed_ms=speed_ms,
            on_state_change=self.states.append,
            scheduler=self.scheduler,
        )


class TrackingScheduler(ThreadingScheduler):
    """ThreadingScheduler that keeps its timers so tests can join them."""

    def __init__(self):
        self.timers = []

    def call_later(self, delay_ms, callback):
        timer = super().call_later(delay_ms, callback)
        self.timers.append(timer)
        return timer


@pytest.fixture
def h():
    return Harness()


class TestManualScheduler:
    """The virtual clock itself."""

    def test_runs_due_callbacks_in_order(self) -> None:
        sched = ManualScheduler()
        out = []
        sched.call_later(20, lambda: out.append("b"))
        sched.call_later(10, lambda: out.append("a"))
        sched.call_later(30, lambda: out.append("c"))
        assert sched.advance(25) == 2
        assert out == ["a", "b"]
        assert sched.now_ms == 25
        assert sched.pending == 1

    def test_cancelled_callbacks_skipped(self) -> None:
        sched = ManualScheduler()
        out = []
        handle = sched.call_later(10, lambda: out.append("x"))
        handle.cancel()
        assert sched.advance(100) == 0
        assert out == []

    def test_callback_scheduled_during_advance(self) -> None:
        sched = ManualScheduler()
        out = []

        def first():
            out.append(sched.now_ms)
            sched.call_later(10, lambda: out.append(sched.now_ms))

        sched.call_later(10, first)
        sched.advance(25)
        assert out == [10, 20]


class TestPlayback:
    """play / pause / toggle behaviour."""

    def test_play_advances_one_step_per_period(self, h) -> None:
        h.animator.play()
        assert h.animator.is_playing
        assert h.states == [True]
        h.scheduler.advance(99)
        assert h.moves == []
        h.scheduler.advance(1)
        assert h.moves == [1]
        h.scheduler.advance(100)
        assert h.moves == [1, 2]

    def test_auto_pause_at_end(self, h) -> None:
        h.animator.play()
        h.scheduler.advance(1000)
        assert h.moves == [1, 2, 3, 4]
        assert h.stepper.is_at_end
        assert not h.animator.is_playing
        assert h.states == [True, False]
        assert h.scheduler.pending == 0

    def test_play_is_idempotent(self, h) -> None:
        h.animator.play()
        h.animator.play()
        assert h.states == [True]
        h.scheduler.advance(100)
        assert h.moves == [1]

    def test_pause_cancels_pending_tick(self, h) -> None:
        h.animator.play()
        h.scheduler.advance(150)
        h.animator.pause()
        assert h.states == [True, False]
        assert h.scheduler.pending == 0
        h.scheduler.advance(1000)
        assert h.moves == [1]

    def test_pause_is_idempotent(self, h) -> None:
        h.animator.pause()
        assert h.states == []
        h.animator.play()
        h.animator.pause()
        h.animator.pause()
        assert h.states == [True, False]

    def test_toggle(self, h) -> None:
        h.animator.toggle()
        assert h.animator.is_playing
        h.animator.toggle()
        assert not h.animator.is_playing
        assert h.states == [True, False]

    def test_resume_after_pause(self, h) -> None:
        h.animator.play()
        h.scheduler.advance(100)
        h.animator.pause()
        h.animator.play()
        h.scheduler.advance(100)
        assert h.moves == [1, 2]

    def test_play_at_end_stops_on_first_tick(self, h) -> None:
        h.stepper.go_to(4)
        h.moves.clear()
        h.animator.play()
        h.scheduler.advance(100)
        assert h.moves == []
        assert not h.animator.is_playing
        assert h.states == [True, False]

    def test_manual_navigation_while_playing(self, h) -> None:
        h.animator.play()
        h.stepper.go_to(3)
        h.scheduler.advance(100)
        assert h.moves == [3, 4]
        assert not h.animator.is_playing

    def test_step_observer_can_pause(self) -> None:
        states = []
        sched = ManualScheduler()
        holder = {}

        def on_step(step, prev, index, total):
            if index == 2:
                holder["animator"].pause()

        stepper = Stepper(tuple(range(6)), on_step)
        animator = Animator(stepper, 50, states.append, sched)
        holder["animator"] = animator
        animator.play()
        sched.advance(1000)
        assert stepper.current_index == 2
        assert states == [True, False]


class TestFailingObserver:
    """A step observer that raises during a tick stops playback cleanly."""

    @staticmethod
    def _failing_at(index: int, exc: Exception):
        moves = []

        def on_step(step, prev, i, total):
            moves.append(i)
            if i == index:
                raise exc

        return moves, on_step

    def test_manual_tick_failure_pauses(self) -> None:
        moves, on_step = self._failing_at(2, RuntimeError("render failed"))
        states = []
        sched = ManualScheduler()
        stepper = Stepper(tuple(range(6)), on_step)
        animator = Animator(stepper, 10, states.append, sched)
        animator.play()

        with pytest.raises(RuntimeError, match="render failed"):
            sched.advance(100)

        assert moves == [1, 2]
        assert not animator.is_playing
        assert states == [True, False]
        assert sched.pending == 0

    def test_can_play_again_after_failure(self) -> None:
        moves, on_step = self._failing_at(1, RuntimeError("once"))
        sched = ManualScheduler()
        stepper = Stepper(tuple(range(4)), on_step)
        animator = Animator(stepper, 10, scheduler=sched)
        animator.play()
        with pytest.raises(RuntimeError):
            sched.advance(10)
        animator.play()
        sched.advance(100)
        assert moves == [1, 2, 3]
        assert not animator.is_playing

    def test_threading_tick_failure_reports_pause(self) -> None:
        _, on_step = self._failing_at(2, BrokenPipeError())
        finished = threading.Event()
        stepper = Stepper(tuple(range(10)), on_step)

        def on_state(is_playing):
            if not is_playing:
                finished.set()

        scheduler = TrackingScheduler()
        animator = Animator(stepper, speed_ms=5, on_state_change=on_state,
                            scheduler=scheduler)
        # The timer thread reports the exception through threading.excepthook
        raised = []
        previous_hook = threading.excepthook
        threading.excepthook = lambda args: raised.append(args.exc_type)
        try:
            animator.play()
            assert finished.wait(timeout=5)
            for timer in scheduler.timers:
                timer.join(timeout=5)
        finally:
            threading.excepthook = previous_hook
        assert raised == [BrokenPipeError]
        assert not animator.is_playing
        assert stepper.current_index == 2


class TestSetSpeed:
    """Changing the period."""

    def test_no_tick_at_old_period(self, h) -> None:
        h.animator.play()
        h.scheduler.advance(60)
        h.animator.set_speed(200)
        assert h.animator.speed == 200
        # The old tick would have fired at t=100
        h.scheduler.advance(100)
        assert h.moves == []
        # New period counts from the speed change (t=60 + 200)
        h.scheduler.advance(100)
        assert h.moves == [1]
        h.scheduler.advance(200)
        assert h.moves == [1, 2]

    def test_restart_reported_to_observer(self, h) -> None:
        h.animator.play()
        h.animator.set_speed(50)
        assert h.states == [True, False, True]
        assert h.scheduler.pending == 1

    def test_set_speed_while_paused(self, h) -> None:
        h.animator.set_speed(10)
        assert h.states == []
        assert h.scheduler.pending == 0
        h.animator.play()
        h.scheduler.advance(10)
        assert h.moves == [1]

    @pytest.mark.parametrize("bad", [0, -100])
    def test_invalid_speed(self, h, bad: int) -> None:
        with pytest.raises(ValueError):
            h.animator.set_speed(bad)
        with pytest.raises(ValueError):
            Animator(h.stepper, speed_ms=bad, scheduler=h.scheduler)


class TestThreadingScheduler:
    """Real timers, short period."""

    def test_plays_to_end(self) -> None:
        finished = threading.Event()
        moves = []
        stepper = Stepper(tuple(range(4)), lambda s, p, i, t: moves.append(i))

        def on_state(is_playing):
            if not is_playing:
                finished.set()

        animator = Animator(stepper, speed_ms=5, on_state_change=on_state,
                            scheduler=ThreadingScheduler())
        animator.play()
        assert finished.wait(timeout=5)
        assert moves == [1, 2, 3]
        assert not animator.is_playing

    def test_pause_stops_timer(self) -> None:
        stepper = Stepper(tuple(range(1000)))
        animator = Animator(stepper, speed_ms=1000, scheduler=ThreadingScheduler())
        animator.play()
        animator.pause()
        assert stepper.current_index == 0
        assert not animator.is_playing
