"""Wire constants and error types shared by both sides of the handshake."""

import os
from typing import Mapping, Optional, Union

HOST = "127.0.0.1"
PAYLOAD = b"done"
POLL_INTERVAL = 0.001  # seconds
PORT_ENV_VAR = "PATIENCE_PORT"


class PatienceError(OSError):
    """Base class for failed startup notifications."""


class NotificationTimeout(PatienceError, TimeoutError):
    """No valid startup notification arrived before the timeout."""


class InvalidNotification(PatienceError):
    """A connection was accepted but did not carry the expected payload."""

    def __init__(self, payload: bytes):
        super().__init__(f"wrong startup notification received: {payload[:64]!r}")
        self.payload = payload


class ConfigurationError(ValueError):
    """The session port could not be read from the environment."""


def parse_port(value: Union[str, int], source: str = "port") -> int:
    """Parse a session port, raising ConfigurationError if it is not valid."""
    try:
        port = int(value)
    except ValueError:
        raise ConfigurationError(f"{source} is not a port number: {value!r}") from None
    if not 0 < port < 65536:
        raise ConfigurationError(f"{source} is out of range: {port}")
    return port


def port_from_env(
    env_var: str = PORT_ENV_VAR, environ: Optional[Mapping[str, str]] = None
) -> int:
    """Read the session port handed over through an environment variable.

    Args:
        env_var: Name of the variable holding the port.
        environ: Mapping to read from. Defaults to os.environ.

    Returns:
        The port number.
    """
    if environ is None:
        environ = os.environ
    value = environ.get(env_var)
    if value is None:
        raise ConfigurationError(f"{env_var} is not set")
    return parse_port(value, env_var)
