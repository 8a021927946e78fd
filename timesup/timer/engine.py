"""Session time-limit state machine for TimesUp.

States
------
IDLE       No timer configured, waiting for the console to ``set`` one.
RUNNING    Shutdown scheduled; players get a reminder every few minutes.
PAUSED     Shutdown cancelled, minutes used so far remembered.

Transitions
-----------
IDLE | RUNNING | PAUSED → RUNNING   (set, console only)
RUNNING → PAUSED                   (pause)
PAUSED → RUNNING                   (resume)
RUNNING → IDLE                     (cancel, console only)
RUNNING → IDLE                     (shutdown callback fires)

Everything here runs on the Qt main thread: commands arrive through the
event loop and so do the scheduler callbacks, which is why no field is
guarded by a lock.  A host that calls in from other threads must hold a
single mutex around each whole operation.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import TYPE_CHECKING, Callable

from PyQt6.QtCore import QObject, pyqtSignal

from ..errors import PrivilegeError, StateError, ValidationError
from .scheduler import Scheduler

if TYPE_CHECKING:
    from ..commands import Sender

logger = logging.getLogger(__name__)


# ── enums ─────────────────────────────────────────────────────────────────


class TimerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


# ── constants ─────────────────────────────────────────────────────────────

CHECK_PERIOD_MINUTES = 5
MS_PER_MINUTE = 60 * 1000

SHUTDOWN_MESSAGE = "SHUTTING DOWN NOW!!!"


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


def minutes_left_message(minutes: int) -> str:
    return f"There are {minutes} minutes left!!!"


# ── engine ────────────────────────────────────────────────────────────────


class SessionTimer(QObject):
    """Play-time limiter with pause/resume and periodic reminders.

    Signals
    -------
    broadcast(message: str)
        Text for everyone in the session.
    message(sender: Sender, text: str)
        Text for a single caller.
    shutdown_requested()
        The limit ran out; the host should terminate.
    state_changed(new_state: TimerState)
        Emitted on every state transition.
    """

    broadcast = pyqtSignal(str)
    message = pyqtSignal(object, str)
    shutdown_requested = pyqtSignal()
    state_changed = pyqtSignal(object)

    def __init__(
        self,
        scheduler: Scheduler,
        parent: QObject | None = None,
        *,
        clock: Callable[[], int] | None = None,
        check_period_minutes: int = CHECK_PERIOD_MINUTES,
    ) -> None:
        super().__init__(parent)
        if check_period_minutes <= 0:
            raise ValueError("check_period_minutes must be positive")

        # ── collaborators ─────────────────────────────────────────────
        self._scheduler = scheduler
        self._clock = clock or _wall_clock_ms
        self._check_period_minutes = check_period_minutes

        # ── timer state ───────────────────────────────────────────────
        self._state: TimerState = TimerState.IDLE
        self._limit_minutes: int = 0
        self._used_minutes: int | None = None  # only while PAUSED
        self._start_ms: int | None = None  # only while RUNNING

        # ── scheduler handles (only while RUNNING) ────────────────────
        self._shutdown_handle: int | None = None
        self._notify_handle: int | None = None

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def limit_minutes(self) -> int:
        """Minutes allotted to the current run (0 when idle)."""
        return self._limit_minutes

    @property
    def used_minutes(self) -> int | None:
        """Minutes consumed before the pause; None unless PAUSED."""
        return self._used_minutes

    @property
    def is_running(self) -> bool:
        return self._state == TimerState.RUNNING

    @property
    def is_paused(self) -> bool:
        return self._state == TimerState.PAUSED

    @property
    def remaining_minutes(self) -> int | None:
        if self._state == TimerState.RUNNING:
            return self._limit_minutes - self._elapsed_minutes()
        if self._state == TimerState.PAUSED:
            return self._limit_minutes - self._used_minutes
        return None

    @property
    def ticks_per_minute(self) -> int:
        return 60 * self._scheduler.ticks_per_second

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def set(self, minutes: int, sender: Sender) -> None:
        """Start a fresh run of ``minutes``.  Console only.

        An active run is replaced once the new callbacks are scheduled,
        and a paused run is discarded.
        """
        if not sender.is_console:
            raise PrivilegeError("timesup only runnable from console!")
        if isinstance(minutes, bool) or not isinstance(minutes, int):
            raise ValidationError("Argument must be numeric!!")
        if minutes < 0:
            raise ValidationError("Argument must be numeric!!")

        if self._state == TimerState.RUNNING:
            logger.info("Replacing running timer (%d minutes left)",
                        self.remaining_minutes)
        self._start(minutes, sender)

    def pause(self, sender: Sender) -> None:
        """Stop the clock and remember how many minutes were used."""
        if self._state != TimerState.RUNNING:
            raise StateError("No timer set. Nothing to do!")

        used = self._elapsed_minutes()
        self._stop_callbacks()
        self._start_ms = None
        self._used_minutes = used
        self.broadcast.emit(
            f"Timer paused with {self._limit_minutes - used} remaining!!!"
        )
        logger.info("Timer paused by %s after %d minutes", sender.name, used)
        self._set_state(TimerState.PAUSED)

    def resume(self, sender: Sender) -> None:
        """Restart a paused run with whatever time it had left."""
        if self._state != TimerState.PAUSED:
            raise StateError("No timer to resume.")

        # Wall-clock jumps (suspend, NTP) can push used past the limit.
        minutes = max(0, self._limit_minutes - self._used_minutes)
        logger.info("Timer resumed by %s with %d minutes", sender.name, minutes)
        self._start(minutes, sender)

    def time_left(self, sender: Sender) -> int:
        """Report the minutes left.

        A participant hears the answer alone; the console's answer is
        broadcast to the whole session.
        """
        if self._state != TimerState.RUNNING:
            raise StateError("No timer set. Nothing to do!")

        minutes_left = self.remaining_minutes
        msg = minutes_left_message(minutes_left)
        if sender.is_console:
            self.broadcast.emit(msg)
        else:
            self.message.emit(sender, msg)
        return minutes_left

    def cancel(self, sender: Sender) -> None:
        """Abort the pending shutdown and forget the run.  Console only."""
        if not sender.is_console:
            raise PrivilegeError("timesup only runnable from console!")
        if self._shutdown_handle is None or not self._scheduler.is_pending(
            self._shutdown_handle
        ):
            raise StateError("No cancellable task found.")

        self._stop_callbacks()
        logger.info("Cancelled timesup timer.")
        self._clear()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: scheduling
    # ══════════════════════════════════════════════════════════════════

    def _start(self, minutes: int, sender: Sender) -> None:
        """Schedule a run of ``minutes``, replacing any running one.

        Nothing is changed unless both callbacks were scheduled.
        """
        delay = minutes * self.ticks_per_minute
        shutdown_handle = None
        try:
            shutdown_handle = self._scheduler.schedule_once(
                delay, self._on_shutdown
            )
            notify_handle = self._scheduler.schedule_repeating(
                1,
                self._check_period_minutes * self.ticks_per_minute,
                self._on_check,
            )
        except ValueError as exc:
            if shutdown_handle is not None:
                self._scheduler.cancel(shutdown_handle)
            logger.error("Could not schedule a %d minute timer: %s", minutes, exc)
            raise StateError(f"Could not schedule timer: {exc}") from exc

        self._stop_callbacks()
        self._shutdown_handle = shutdown_handle
        self._notify_handle = notify_handle
        self._limit_minutes = minutes
        self._used_minutes = None
        self._start_ms = self._clock()

        self.message.emit(sender, f"Setting shutdown to {delay} ticks.")
        self.broadcast.emit(f"Timer started {minutes} minutes left!!!")
        logger.info("Timer started: %d minutes (%d ticks)", minutes, delay)
        self._set_state(TimerState.RUNNING)

    def _stop_callbacks(self) -> None:
        """Cancel both scheduled callbacks, if any."""
        if self._notify_handle is not None:
            self._scheduler.cancel(self._notify_handle)
        if self._shutdown_handle is not None:
            self._scheduler.cancel(self._shutdown_handle)
        self._notify_handle = None
        self._shutdown_handle = None

    def _on_check(self) -> None:
        if self._start_ms is None:
            return
        msg = minutes_left_message(self.remaining_minutes)
        self.broadcast.emit(msg)
        logger.info(msg)

    def _on_shutdown(self) -> None:
        self.broadcast.emit(SHUTDOWN_MESSAGE)
        logger.warning("Time limit of %d minutes reached, shutting down",
                       self._limit_minutes)
        self._stop_callbacks()
        self._clear()
        self.shutdown_requested.emit()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL: state
    # ══════════════════════════════════════════════════════════════════

    def _elapsed_minutes(self) -> int:
        return (self._clock() - self._start_ms) // MS_PER_MINUTE

    def _clear(self) -> None:
        self._limit_minutes = 0
        self._used_minutes = None
        self._start_ms = None
        self._set_state(TimerState.IDLE)

    def _set_state(self, new_state: TimerState) -> None:
        self._state = new_state
        self.state_changed.emit(new_state)
