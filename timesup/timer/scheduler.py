"""Tick-based scheduling for the session timer.

The timer only needs four things from its host: run something once after
a delay, run something repeatedly, cancel either by handle, and ask
whether a handle is still waiting to run.  Delays are expressed in
*ticks*; ``ticks_per_second`` converts them to wall-clock time.

``QtScheduler`` backs this with ``QTimer`` objects, so every callback is
delivered by the Qt event loop on the same thread that handles commands.
"""

from __future__ import annotations

from typing import Callable, Protocol

from PyQt6.QtCore import QObject, QTimer


# ── constants ─────────────────────────────────────────────────────────────

TICKS_PER_SECOND = 20

# QTimer intervals are signed 32-bit milliseconds.
_MAX_INTERVAL_MS = 2**31 - 1


class Scheduler(Protocol):
    ticks_per_second: int

    def schedule_once(self, delay: int, callback: Callable[[], None]) -> int: ...

    def schedule_repeating(
        self, initial_delay: int, period: int, callback: Callable[[], None]
    ) -> int: ...

    def cancel(self, handle: int) -> None: ...

    def is_pending(self, handle: int) -> bool: ...


# ── Qt implementation ─────────────────────────────────────────────────────


class _Task:
    """One scheduled callback and the QTimer driving it."""

    def __init__(
        self,
        handle: int,
        timer: QTimer,
        callback: Callable[[], None],
        delay_ms: int,
        period_ms: int | None,
    ) -> None:
        self.handle = handle
        self.timer = timer
        self.callback = callback
        self.period_ms = period_ms
        self.remaining_ms = delay_ms

    @property
    def repeating(self) -> bool:
        return self.period_ms is not None

    def arm(self) -> None:
        """Start the next leg, chaining when the wait exceeds one interval."""
        leg = min(self.remaining_ms, _MAX_INTERVAL_MS)
        self.remaining_ms -= leg
        self.timer.start(leg)


class QtScheduler(QObject):
    """Scheduler driven by the Qt event loop.

    Handles are positive integers and are never reused, so a stale handle
    can be cancelled or queried safely.
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        ticks_per_second: int = TICKS_PER_SECOND,
    ) -> None:
        super().__init__(parent)
        if ticks_per_second <= 0:
            raise ValueError("ticks_per_second must be positive")
        self.ticks_per_second = ticks_per_second
        self._tasks: dict[int, _Task] = {}
        self._next_handle = 1

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC API
    # ══════════════════════════════════════════════════════════════════

    def schedule_once(self, delay: int, callback: Callable[[], None]) -> int:
        return self._add(delay, None, callback)

    def schedule_repeating(
        self, initial_delay: int, period: int, callback: Callable[[], None]
    ) -> int:
        if period <= 0:
            raise ValueError("period must be positive")
        return self._add(initial_delay, period, callback)

    def cancel(self, handle: int) -> None:
        """Stop a task.  Unknown or already-fired handles are ignored."""
        task = self._tasks.pop(handle, None)
        if task is None:
            return
        task.timer.stop()
        task.timer.deleteLater()

    def is_pending(self, handle: int) -> bool:
        return handle in self._tasks

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    def ticks_to_ms(self, ticks: int) -> int:
        return ticks * 1000 // self.ticks_per_second

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _add(
        self, delay: int, period: int | None, callback: Callable[[], None]
    ) -> int:
        if delay < 0:
            raise ValueError("delay must not be negative")

        handle = self._next_handle
        self._next_handle += 1

        timer = QTimer(self)
        timer.setSingleShot(True)
        task = _Task(
            handle,
            timer,
            callback,
            self.ticks_to_ms(delay),
            None if period is None else self.ticks_to_ms(period),
        )
        timer.timeout.connect(lambda: self._on_timeout(handle))
        self._tasks[handle] = task
        task.arm()
        return handle

    def _on_timeout(self, handle: int) -> None:
        task = self._tasks.get(handle)
        if task is None:
            return  # cancelled while the timeout was queued

        if task.remaining_ms > 0:
            task.arm()
            return

        if task.repeating:
            task.remaining_ms = task.period_ms
            task.arm()
        else:
            # A one-shot is no longer pending once its body starts.
            del self._tasks[handle]
            task.timer.deleteLater()

        task.callback()
