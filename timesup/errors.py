"""Errors raised by the timer and the command dispatcher.

None of these are fatal: the dispatcher reports them back to whoever
issued the command and answers ``False``.
"""


class TimesUpError(Exception):
    """Base class for every rejected command."""


class ValidationError(TimesUpError):
    """Bad argument shape, arity or type."""


class PrivilegeError(TimesUpError):
    """A participant tried a console-only command."""


class StateError(TimesUpError):
    """The command does not apply to the timer's current state."""
