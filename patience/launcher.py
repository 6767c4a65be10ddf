"""Start an application under test and wait for its startup notification.

The session port is handed to the application through an environment
variable (PATIENCE_PORT by default). The application is expected to call
`patience.notifier.notify_from_env()` or run `patience-notify` once it is
ready.
"""

import os
import subprocess
from collections.abc import Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from patience.listener import Listener
from patience.protocol import PORT_ENV_VAR

SIGTERM_TIMEOUT = 10  # seconds


@dataclass
class LaunchedProcess:
    """An application that has signaled a successful start."""

    process: subprocess.Popen
    port: int
    startup_time: float


def launch_and_wait(
    args: Sequence[str],
    timeout: float,
    *,
    port_env_var: str = PORT_ENV_VAR,
    env: Optional[Mapping[str, str]] = None,
    **popen_kwargs,
) -> LaunchedProcess:
    """Start `args` and block until it notifies or `timeout` expires.

    Args:
        args: Command line of the application under test.
        timeout: Maximum time to wait for the notification in seconds.
        port_env_var: Environment variable that receives the session port.
        env: Base environment for the process. Defaults to os.environ.
        **popen_kwargs: Passed on to subprocess.Popen.

    Returns:
        LaunchedProcess for the running application.

    Raises:
        NotificationTimeout, InvalidNotification or OSError from the wait.
        The process is stopped before the error propagates.
    """
    listener = Listener()
    try:
        port = listener.port
        child_env = dict(os.environ if env is None else env)
        child_env[port_env_var] = str(port)
        proc = subprocess.Popen(list(args), env=child_env, **popen_kwargs)
    except BaseException:
        listener.close()
        raise

    try:
        startup_time = listener.wait(timeout)
    except BaseException:
        stop_process(proc)
        raise
    return LaunchedProcess(process=proc, port=port, startup_time=startup_time)


def stop_process(proc: subprocess.Popen, grace: float = SIGTERM_TIMEOUT) -> int:
    """Terminate `proc`, killing it if it does not exit within `grace` seconds.

    Returns the exit code.
    """
    if proc.poll() is None:
        try:
            proc.terminate()
        except OSError:
            pass
        try:
            proc.wait(timeout=grace)
        except subprocess.TimeoutExpired:
            proc.kill()
    return proc.wait()


@contextmanager
def launched(
    args: Sequence[str],
    timeout: float,
    *,
    grace: float = SIGTERM_TIMEOUT,
    **kwargs,
) -> Iterator[LaunchedProcess]:
    """Context manager around launch_and_wait that stops the process on exit."""
    app = launch_and_wait(args, timeout, **kwargs)
    try:
        yield app
    finally:
        stop_process(app.process, grace)
