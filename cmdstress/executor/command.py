from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
import threading
import time

from .types import RunOutcome, RunSpec

logger = logging.getLogger(__name__)


def tokenize_command(cmd: str, *, shell_lex: bool = False) -> tuple[str, ...]:
    """Split a command line into program and arguments.

    The default is a plain whitespace split, so a quoted argument such as
    ``"hello world"`` ends up as two tokens. ``shell_lex=True`` switches to
    POSIX shell lexing.
    """
    if shell_lex:
        return tuple(shlex.split(cmd))
    return tuple(cmd.split())


def _describe_exit(returncode: int) -> str | None:
    if returncode == 0:
        return None
    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            name = str(-returncode)
        return f"terminated by signal {name}"
    return f"exit status {returncode}"


class CommandRunner:
    """Runs one child process per call and keeps track of the live ones."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._live: set[subprocess.Popen[bytes]] = set()
        self._terminating = False

    def run(self, spec: RunSpec, run_index: int) -> RunOutcome:
        start = time.monotonic()
        try:
            proc = subprocess.Popen(
                spec.command,
                cwd=spec.working_dir or None,
                env={**os.environ, **spec.env},
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            return RunOutcome(
                run_index, None, b"", b"", str(exc), time.monotonic() - start
            )

        with self._lock:
            self._live.add(proc)
            if self._terminating:
                proc.terminate()

        try:
            stdout, stderr = proc.communicate()
        finally:
            with self._lock:
                self._live.discard(proc)

        return RunOutcome(
            run_index,
            proc.returncode,
            stdout,
            stderr,
            _describe_exit(proc.returncode),
            time.monotonic() - start,
        )

    def terminate_all(self) -> None:
        with self._lock:
            self._terminating = True
            live = list(self._live)

        for proc in live:
            logger.debug("Terminating pid %d", proc.pid)
            try:
                proc.terminate()
            except ProcessLookupError:
                pass

    def reset(self) -> None:
        with self._lock:
            self._terminating = False
