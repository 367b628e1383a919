"""Process launcher.

Responsibilities:
- Apply an environment diff to the live process (the only place that mutates it).
- Spawn the target program with the inherited environment.
- Forward termination signals to the child and propagate its exit status.
"""

from __future__ import annotations

import os
import signal
import subprocess
import threading
from typing import Callable, MutableMapping, Sequence

from loguru import logger

from .environment.pathlist import is_path_list_variable, normalize
from .errors import ChildWaitFailure, InvocationFailure
from .models.datatypes import EnvironmentDiff

FALLBACK_EXIT_CODE = 127
SIGNAL_EXIT_BASE = 128
FORWARDED_SIGNALS = ("SIGINT", "SIGTERM", "SIGHUP")
_INT32_MAX = 0x7FFFFFFF
_UINT32_RANGE = 1 << 32

Spawner = Callable[[Sequence[str]], "subprocess.Popen[bytes]"]


class ChildProcessSlot:
    """Lock-guarded slot holding the child process for the signal handler.

    Signal handlers run on the main thread between bytecodes, possibly while
    that same thread is inside `set`, so the lock must be reentrant.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._process: subprocess.Popen[bytes] | None = None

    def set(self, process: subprocess.Popen[bytes]) -> None:
        """Store the spawned child."""

        with self._lock:
            self._process = process

    def get(self) -> subprocess.Popen[bytes] | None:
        """Return the spawned child, or `None` before spawn."""

        with self._lock:
            return self._process


def apply_diff(
    diff: EnvironmentDiff,
    environ: MutableMapping[str, str] | None = None,
    list_separator: str = ";",
) -> None:
    """Write every diff entry into the environment, deduplicating path lists."""

    target = os.environ if environ is None else environ
    for name, value in diff.items():
        if is_path_list_variable(name):
            value = normalize(value, list_separator)
        logger.debug("Setting {}={}", name, value)
        target[name] = value


def exit_code_from_returncode(returncode: int, supports_signals: bool | None = None) -> int:
    """Map a `Popen.returncode` to the launcher's own exit code.

    Negative values mean the child died from a signal on POSIX hosts. Elsewhere
    the status is an unsigned 32-bit value (`0xC0000005` for an access
    violation) and is reinterpreted as signed so `sys.exit` accepts it.
    """

    if supports_signals is None:
        supports_signals = os.name == "posix"
    if supports_signals:
        return returncode if returncode >= 0 else SIGNAL_EXIT_BASE - returncode
    if returncode < 0:
        return FALLBACK_EXIT_CODE
    if returncode > _INT32_MAX:
        return returncode - _UINT32_RANGE
    return returncode


def _forwarding_handler(slot: ChildProcessSlot) -> Callable[[int, object], None]:
    """Build a signal handler that relays the received signal to the child."""

    def forward(signum: int, _frame: object = None) -> None:
        process = slot.get()
        if process is None:
            logger.warning("Received signal {} before the program started", signum)
            return
        try:
            process.send_signal(signum)
        except OSError as exc:
            logger.error("Unable to forward signal {} to the program: {}", signum, exc)

    return forward


def install_signal_forwarding(slot: ChildProcessSlot) -> dict[int, object]:
    """Install forwarding handlers and return the previous handlers for restoring.

    On hosts without POSIX signals the console already delivers Ctrl+C to the
    child, so SIGINT is ignored here to keep waiting for it.
    """

    previous: dict[int, object] = {}
    if threading.current_thread() is not threading.main_thread():
        logger.debug("Not on the main thread; signal forwarding disabled")
        return previous

    if os.name != "posix":
        previous[signal.SIGINT] = signal.signal(signal.SIGINT, signal.SIG_IGN)
        return previous

    handler = _forwarding_handler(slot)
    for signal_name in FORWARDED_SIGNALS:
        signum = getattr(signal, signal_name, None)
        if signum is None:
            continue
        previous[signum] = signal.signal(signum, handler)
    return previous


def restore_signal_handlers(previous: dict[int, object]) -> None:
    """Restore handlers returned by `install_signal_forwarding`."""

    for signum, handler in previous.items():
        signal.signal(signum, handler)


def _spawn(command: Sequence[str]) -> subprocess.Popen[bytes]:
    return subprocess.Popen(list(command))


def launch(
    diff: EnvironmentDiff,
    program: str,
    args: Sequence[str] = (),
    list_separator: str = ";",
    environ: MutableMapping[str, str] | None = None,
    spawner: Spawner = _spawn,
) -> int:
    """Apply the diff, run the program, and return the exit code to propagate.

    Raises:
        InvocationFailure: If the program cannot be spawned.
        ChildWaitFailure: If the child's status cannot be obtained.
    """

    apply_diff(diff, environ=environ, list_separator=list_separator)

    command = [program, *args]
    logger.info("Launching: '{}' with args: {}", program, list(args))

    slot = ChildProcessSlot()
    previous_handlers = install_signal_forwarding(slot)
    try:
        try:
            process = spawner(command)
        except OSError as exc:
            raise InvocationFailure(
                stage="launch",
                detail=f"Unable to spawn program `{program}`: {exc}",
                hint="Check the program name and that it is on PATH after configuration.",
            ) from exc
        slot.set(process)

        try:
            returncode = process.wait()
        except OSError as exc:
            raise ChildWaitFailure(
                detail=f"Unable to wait for the program `{program}`: {exc}",
            ) from exc
    finally:
        restore_signal_handlers(previous_handlers)

    logger.info("Program exited with status {}", returncode)
    return exit_code_from_returncode(returncode)
