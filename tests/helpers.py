"""Shared test helpers for TimesUp."""

from timesup.commands import Sender

CONSOLE = Sender.console()
ALEX = Sender.participant("alex")


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Wall clock in milliseconds that only moves when told to."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance_ms(self, ms: int) -> None:
        self.now_ms += ms

    def advance_minutes(self, minutes: float) -> None:
        self.now_ms += int(minutes * 60_000)


class FakeScheduler:
    """Deterministic scheduler: time only passes through ``advance``.

    Every request is recorded in ``calls`` so tests can assert exactly
    what the timer asked for.  When a clock is attached, advancing the
    scheduler moves the clock by the same amount.
    """

    def __init__(self, clock: FakeClock | None = None, ticks_per_second: int = 20):
        self.ticks_per_second = ticks_per_second
        self.clock = clock
        self.now_ticks = 0
        self.calls: list[tuple] = []
        self.tasks: dict[int, dict] = {}
        self._next_handle = 1

    # ── Scheduler protocol ────────────────────────────────────────────

    def schedule_once(self, delay, callback):
        self.calls.append(("once", delay))
        return self._add(delay, None, callback)

    def schedule_repeating(self, initial_delay, period, callback):
        self.calls.append(("repeating", initial_delay, period))
        return self._add(initial_delay, period, callback)

    def cancel(self, handle):
        self.calls.append(("cancel", handle))
        self.tasks.pop(handle, None)

    def is_pending(self, handle):
        return handle in self.tasks

    # ── test controls ─────────────────────────────────────────────────

    def advance(self, ticks: int) -> None:
        """Move time forward, firing callbacks in due order."""
        target = self.now_ticks + ticks
        while True:
            due = [
                (task["due"], handle)
                for handle, task in self.tasks.items()
                if task["due"] <= target
            ]
            if not due:
                break
            when, handle = min(due)
            self._move_to(when)
            task = self.tasks[handle]
            if task["period"] is None:
                del self.tasks[handle]
            else:
                task["due"] = when + task["period"]
            task["callback"]()
        self._move_to(target)

    def advance_minutes(self, minutes: int) -> None:
        self.advance(minutes * 60 * self.ticks_per_second)

    @property
    def scheduling_calls(self):
        return [c for c in self.calls if c[0] != "cancel"]

    def _add(self, delay, period, callback):
        if delay < 0:
            raise ValueError("delay must not be negative")
        if period is not None and period <= 0:
            raise ValueError("period must be positive")
        handle = self._next_handle
        self._next_handle += 1
        self.tasks[handle] = {
            "due": self.now_ticks + delay,
            "period": period,
            "callback": callback,
        }
        return handle

    def _move_to(self, tick: int) -> None:
        if self.clock is not None:
            self.clock.advance_ms(
                (tick - self.now_ticks) * 1000 // self.ticks_per_second
            )
        self.now_ticks = tick


class FailingRepeatScheduler(FakeScheduler):
    """Accepts one-shots but refuses every repeating callback."""

    def schedule_repeating(self, initial_delay, period, callback):
        self.calls.append(("repeating", initial_delay, period))
        raise ValueError("period must be positive")


def assert_consistent(timer):
    """Fields agree with the reported state."""
    assert (timer.used_minutes is not None) == timer.is_paused
    assert (timer._start_ms is not None) == timer.is_running
    assert (timer._shutdown_handle is not None) == timer.is_running
    assert (timer._notify_handle is not None) == timer.is_running
