"""Line-oriented host: commands in on stdin, messages out on stdout.

Each input line is one command.  A leading ``@name`` token issues it as
participant *name*; anything else comes from the console::

    set 60
    @alex timeleft
    @alex pause
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Callable, TextIO

from PyQt6.QtCore import QCoreApplication, QObject, QSocketNotifier

from .commands import CONSOLE_NAME, CommandDispatcher, Sender
from .timer.engine import SessionTimer

logger = logging.getLogger(__name__)


class ConsoleHost(QObject):
    """Connects a dispatcher and its timer to text streams."""

    def __init__(
        self,
        dispatcher: CommandDispatcher,
        parent: QObject | None = None,
        *,
        output: TextIO | None = None,
        console_name: str = CONSOLE_NAME,
        exit_app: Callable[[int], None] | None = None,
    ) -> None:
        super().__init__(parent)
        self._dispatcher = dispatcher
        self._output = output or sys.stdout
        self._console = Sender.console(console_name)
        self._exit_app = exit_app or QCoreApplication.exit
        self._fd: int | None = None
        self._pending = b""
        self._notifier: QSocketNotifier | None = None

        timer: SessionTimer = dispatcher.timer
        timer.broadcast.connect(self._on_broadcast)
        timer.message.connect(self._on_message)
        timer.shutdown_requested.connect(self._on_shutdown)
        dispatcher.reply.connect(self._on_message)

    @property
    def console(self) -> Sender:
        return self._console

    # ── input ─────────────────────────────────────────────────────────

    def listen(self, stream: TextIO) -> None:
        """Read commands from ``stream`` as the event loop sees data.

        The raw descriptor is read directly so that lines arriving
        together are all dispatched, not left in a Python-side buffer.
        """
        self._fd = stream.fileno()
        self._pending = b""
        self._notifier = QSocketNotifier(self._fd, QSocketNotifier.Type.Read, self)
        self._notifier.activated.connect(self._on_readable)

    def stop_listening(self) -> None:
        if self._notifier is not None:
            self._notifier.setEnabled(False)

    def handle_line(self, line: str) -> bool | None:
        """Dispatch one line.  Blank lines are ignored (returns None)."""
        tokens = line.split()
        if not tokens:
            return None

        sender = self._console
        if tokens[0].startswith("@") and len(tokens[0]) > 1:
            sender = Sender.participant(tokens[0][1:])
            tokens = tokens[1:]
        return self._dispatcher.handle(sender, tokens)

    def _on_readable(self) -> None:
        chunk = os.read(self._fd, 4096)
        if not chunk:
            logger.info("Input closed; timer keeps running")
            self.stop_listening()
            tail, self._pending = self._pending, b""
            if tail:
                self.handle_line(tail.decode("utf-8", errors="replace"))
            return

        *lines, self._pending = (self._pending + chunk).split(b"\n")
        for raw in lines:
            self.handle_line(raw.decode("utf-8", errors="replace"))

    # ── output ────────────────────────────────────────────────────────

    def _write(self, text: str) -> None:
        self._output.write(text + "\n")
        self._output.flush()

    def _on_broadcast(self, text: str) -> None:
        self._write(f"[broadcast] {text}")

    def _on_message(self, sender: Sender, text: str) -> None:
        if sender.is_console:
            self._write(text)
        else:
            self._write(f"[@{sender.name}] {text}")

    def _on_shutdown(self) -> None:
        logger.info("Time is up, leaving the event loop")
        self._exit_app(0)
