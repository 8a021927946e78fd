"""Allow running TimesUp as a module: python -m timesup."""

import argparse
import logging
import os
import sys
from pathlib import Path

from PyQt6.QtCore import QCoreApplication

from . import __version__
from .commands import CommandDispatcher
from .console import ConsoleHost
from .settings import load_settings
from .timer.engine import SessionTimer
from .timer.scheduler import QtScheduler


def setup_logging(level_name: str) -> None:
    """Configure logging to stderr so stdout stays for session messages."""
    level = os.environ.get("TIMESUP_LOG_LEVEL", level_name).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="timesup",
        description="TimesUp - limit a play session, then shut it down",
    )
    parser.add_argument(
        "--start",
        type=int,
        metavar="MINUTES",
        help="Start a timer right away, as if the console typed 'set MINUTES'",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: from settings, INFO)",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        help="Settings file (default: ~/.config/timesup/settings.json)",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    args = parser.parse_args(argv)
    if args.start is not None and args.start < 0:
        parser.error("--start must not be negative")
    return args


def main(argv=None) -> None:
    args = parse_args(argv)
    settings = load_settings(args.settings)
    setup_logging(args.log_level or settings.log_level)

    app = QCoreApplication(sys.argv[:1])
    app.setApplicationName("TimesUp")

    scheduler = QtScheduler(ticks_per_second=settings.ticks_per_second)
    timer = SessionTimer(
        scheduler, check_period_minutes=settings.check_period_minutes
    )
    dispatcher = CommandDispatcher(timer)
    host = ConsoleHost(dispatcher, console_name=settings.console_name)
    host.listen(sys.stdin)
    logging.info("TimesUp %s ready, reading commands from stdin", __version__)

    if args.start is not None:
        dispatcher.handle(host.console, ["set", str(args.start)])

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
