"""Textual command surface for the session timer.

Commands look like ``set 30`` or ``timeleft``; the first token is matched
case-insensitively.  ``set`` and ``cancel`` are console-only.

Usage::

    dispatcher = CommandDispatcher(timer)
    ok = dispatcher.handle(Sender.console(), ["set", "30"])
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Sequence

from PyQt6.QtCore import QObject, pyqtSignal

from .errors import PrivilegeError, TimesUpError, ValidationError
from .timer.engine import SessionTimer

logger = logging.getLogger(__name__)

CONSOLE_NAME = "CONSOLE"

SET_COMMAND = "set"
PAUSE_COMMAND = "pause"
RESUME_COMMAND = "resume"
TIMELEFT_COMMAND = "timeleft"
CANCEL_COMMAND = "cancel"

_NUMERIC = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Sender:
    """Whoever issued a command: the operator console or a participant.

    Privilege comes from the channel the host received the command on,
    so a participant named ``CONSOLE`` is still a participant.
    """

    name: str
    is_console: bool = False

    @classmethod
    def console(cls, name: str = CONSOLE_NAME) -> "Sender":
        return cls(name, is_console=True)

    @classmethod
    def participant(cls, name: str) -> "Sender":
        return cls(name, is_console=False)


class CommandDispatcher(QObject):
    """Parses commands, checks privilege, and drives a ``SessionTimer``.

    Rejected commands never touch the timer.  The reason goes back to the
    sender through ``reply`` and ``handle`` answers ``False``.
    """

    reply = pyqtSignal(object, str)

    def __init__(self, timer: SessionTimer, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._timer = timer

    @property
    def timer(self) -> SessionTimer:
        return self._timer

    def handle(self, sender: Sender, args: Sequence[str]) -> bool:
        """Run one command; True when it was carried out."""
        try:
            self._dispatch(sender, list(args))
        except TimesUpError as exc:
            logger.info("Rejected %r from %s: %s", " ".join(args), sender.name, exc)
            self.reply.emit(sender, str(exc))
            return False
        return True

    def _dispatch(self, sender: Sender, args: list[str]) -> None:
        if not args:
            raise ValidationError("Wrong number of arguments!")

        command = args[0].lower()
        if command == SET_COMMAND:
            self._require_console(sender)
            if len(args) != 2:
                raise ValidationError("Wrong number of arguments!")
            if not _NUMERIC.fullmatch(args[1]):
                raise ValidationError("Argument must be numeric!!")
            self._timer.set(int(args[1]), sender)
        elif command == PAUSE_COMMAND:
            self._timer.pause(sender)
        elif command == RESUME_COMMAND:
            self._timer.resume(sender)
        elif command == TIMELEFT_COMMAND:
            self._timer.time_left(sender)
        elif command == CANCEL_COMMAND:
            self._require_console(sender)
            self._timer.cancel(sender)
        else:
            raise ValidationError("Unrecognized argument.")

    @staticmethod
    def _require_console(sender: Sender) -> None:
        if not sender.is_console:
            raise PrivilegeError("timesup only runnable from console!")
