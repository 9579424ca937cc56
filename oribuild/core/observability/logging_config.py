"""
Logging configuration — central setup for the ``ori`` CLI.

Called once at startup by main.py. Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Console verbosity follows the global flags:

    (default)   warnings and errors, bare messages
    --verbose   pipeline milestones, plus the command line of every
                external tool ori runs (cargo, cross, adb, aapt2, ...)
    --debug     everything, with logger names and timestamps
    --quiet     errors only

Without a flag, ORI_LOG_LEVEL picks the level. ORI_LOG_FILE adds a file
handler with its own level (ORI_LOG_FILE_LEVEL). Compiler diagnostics
are not log records; they go straight to stdout.
"""

from __future__ import annotations

import logging
import sys

# Tool invocations are logged here at DEBUG, one record per command line.
COMMANDS_LOGGER = "oribuild.commands"

_FMT_CONSOLE = "%(message)s"
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s: %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


class _ConsoleFilter(logging.Filter):
    """Let through records at the console level, and tool command lines
    when they were asked for."""

    def __init__(self, level: int, show_commands: bool):
        super().__init__()
        self.level = level
        self.show_commands = show_commands

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno >= self.level:
            return True
        return self.show_commands and record.name == COMMANDS_LOGGER


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    show_commands: bool = False,
) -> None:
    """Configure logging for the process. Safe to call again; handlers
    from an earlier call are replaced.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Level for the log file; defaults to ``level``.
        show_commands: Print external tool command lines on the console
            even below DEBUG.
    """
    numeric_level = parse_level(level)

    console = logging.StreamHandler(sys.stderr)
    console.addFilter(_ConsoleFilter(numeric_level, show_commands))
    if numeric_level <= logging.DEBUG:
        console.setFormatter(logging.Formatter(_FMT_DEBUG, datefmt=_DATEFMT_DEBUG))
    else:
        console.setFormatter(logging.Formatter(_FMT_CONSOLE))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level

    if log_file:
        file_level = parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)
    logging.getLogger(COMMANDS_LOGGER).setLevel(
        logging.DEBUG if show_commands else logging.NOTSET
    )


def parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant (WARNING if unknown)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
