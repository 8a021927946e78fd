"""Shared pytest fixtures for TimesUp tests."""

import sys
import pytest

from PyQt6.QtCore import QCoreApplication

from timesup.commands import CommandDispatcher
from timesup.timer.engine import SessionTimer

from helpers import FakeClock, FakeScheduler


@pytest.fixture(scope="session")
def qapp():
    """A single QCoreApplication instance shared across the entire test run."""
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    yield app


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    """Fake scheduler that moves the fake clock as it advances."""
    return FakeScheduler(clock)


@pytest.fixture
def timer(qapp, scheduler, clock):
    """Fresh SessionTimer on fake time (pure state-machine tests)."""
    return SessionTimer(scheduler, parent=None, clock=clock)


@pytest.fixture
def dispatcher(timer):
    return CommandDispatcher(timer)
