"""
Command runner — the one place the adapters spawn subprocesses.

Two shapes are needed:

    run_command()     run to completion, capture stdout/stderr
    stream_command()  spawn and hand back stdout line by line while
                      the process is still running

A missing executable becomes ``ToolNotInstalledError`` rather than a
bare ``FileNotFoundError``.
Each command line is logged on the ``oribuild.commands`` logger, which
``ori --verbose`` prints.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from oribuild.core.errors import ToolNotInstalledError
from oribuild.core.observability.logging_config import COMMANDS_LOGGER

logger = logging.getLogger(__name__)
command_logger = logging.getLogger(COMMANDS_LOGGER)


def _display(cmd: list[str]) -> str:
    return " ".join(shlex.quote(part) for part in cmd)


def run_command(
    cmd: list[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run ``cmd`` and capture its output as text.

    The return code is not checked; callers decide what failure means.
    """
    command_logger.debug("$ %s", _display(cmd))
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        raise ToolNotInstalledError(cmd[0]) from None

    logger.debug("%s exited with %d", cmd[0], result.returncode)
    return result


def probe(cmd: list[str], timeout: float = 30) -> bool:
    """True when ``cmd`` can be spawned and exits 0. Never raises."""
    try:
        result = subprocess.run(cmd, capture_output=True, timeout=timeout)
    except (OSError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0


class LineStream:
    """Stdout of a running process, readable one line at a time."""

    def __init__(self, proc: subprocess.Popen[str]):
        self._proc = proc
        self.returncode: int | None = None

    def __iter__(self) -> Iterator[str]:
        stdout = self._proc.stdout
        if stdout is None:
            raise ValueError("process was started without a stdout pipe")
        for line in stdout:
            yield line.rstrip("\r\n")


@contextmanager
def stream_command(cmd: list[str], *, cwd: Path | None = None) -> Iterator[LineStream]:
    """Spawn ``cmd`` with stdout piped and yield a :class:`LineStream`.

    Stderr is inherited so progress output reaches the terminal as is.
    On normal exit the process is waited for and ``returncode`` set;
    if the consumer raises, the process is killed first.
    """
    command_logger.debug("$ %s", _display(cmd))
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            text=True,
            bufsize=1,
        )
    except FileNotFoundError:
        raise ToolNotInstalledError(cmd[0]) from None

    stream = LineStream(proc)
    try:
        yield stream
    except BaseException:
        proc.kill()
        raise
    finally:
        if proc.stdout is not None:
            proc.stdout.close()
        stream.returncode = proc.wait()
        logger.debug("%s exited with %d", cmd[0], stream.returncode)
