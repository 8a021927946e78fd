"""Timer package."""

from .engine import (
    SessionTimer,
    TimerState,
    CHECK_PERIOD_MINUTES,
    SHUTDOWN_MESSAGE,
)
from .scheduler import QtScheduler, Scheduler, TICKS_PER_SECOND

__all__ = [
    "SessionTimer",
    "TimerState",
    "CHECK_PERIOD_MINUTES",
    "SHUTDOWN_MESSAGE",
    "QtScheduler",
    "Scheduler",
    "TICKS_PER_SECOND",
]
