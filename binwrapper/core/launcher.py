"""
Process launcher for the provisioned binary.

The child inherits the wrapper's stdin, stdout and stderr untouched and its
exit code becomes the wrapper's exit code. On POSIX, termination signals
received by the wrapper while the child runs are forwarded to the child.
"""

import logging
import os
import signal
import subprocess
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Sequence, Union

from binwrapper.core.exceptions import LaunchError

logger = logging.getLogger(__name__)

FORWARDED_SIGNALS = ("SIGINT", "SIGTERM", "SIGHUP")


def run(
    binary_path: Union[str, Path],
    args: Sequence[str],
    forward_signals: bool = True,
) -> int:
    """
    Run a binary with the given arguments and wait for it to exit.

    Args:
        binary_path: Executable to start
        args: Arguments passed through unmodified and in order
        forward_signals: Forward SIGINT/SIGTERM/SIGHUP to the child (POSIX only)

    Returns:
        The child's exit code. A child killed by signal N yields 128 + N.

    Raises:
        LaunchError: If the child cannot be started

    Example:
        >>> run(Path(".bin/plugincheck2"), ["-help"])
        0
    """
    binary_path = Path(binary_path)
    command = [str(binary_path), *args]
    logger.debug(f"Launching {command}")

    try:
        child = subprocess.Popen(command)
    except OSError as e:
        raise LaunchError(f"Failed to start {binary_path}: {e}", binary_path) from e

    if forward_signals and _can_install_handlers():
        with _forward_signals(child):
            returncode = child.wait()
    else:
        returncode = child.wait()

    logger.debug(f"{binary_path.name} exited with {returncode}")
    return exit_code_from_returncode(returncode)


def exit_code_from_returncode(returncode: int) -> int:
    """
    Convert a Popen return code into a process exit code.

    Negative return codes (terminated by signal) follow the shell convention.

    Example:
        >>> exit_code_from_returncode(-15)
        143
    """
    if returncode < 0:
        return 128 - returncode
    return returncode


def _can_install_handlers() -> bool:
    # signal.signal() only works in the main thread of the main interpreter
    return os.name != "nt" and threading.current_thread() is threading.main_thread()


def _shares_process_group(child: subprocess.Popen) -> bool:
    try:
        return os.getpgid(child.pid) == os.getpgrp()
    except ProcessLookupError:
        # Child already gone
        return False


@contextmanager
def _forward_signals(child: subprocess.Popen) -> Iterator[None]:
    """
    Relay termination signals to a child process while the context is active.

    SIGINT is not relayed to a child in the wrapper's own process group: a
    terminal Ctrl-C already reaches the whole foreground group, and a second
    copy would look like a repeated interrupt to the child.
    """

    def relay(signum, frame):
        if signum == signal.SIGINT and _shares_process_group(child):
            logger.debug(f"Skipping signal {signum} for pid {child.pid} (same group)")
            return
        if child.poll() is None:
            logger.debug(f"Forwarding signal {signum} to pid {child.pid}")
            child.send_signal(signum)

    previous = {}
    for name in FORWARDED_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        previous[signum] = signal.signal(signum, relay)

    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler if handler is not None else signal.SIG_DFL)
