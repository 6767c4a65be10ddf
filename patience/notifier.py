"""Client side of the handshake, used by the application under test."""

import socket

from patience.protocol import HOST, PAYLOAD, PORT_ENV_VAR, parse_port, port_from_env


def notify(port: int, host: str = HOST) -> None:
    """Notify the waiting listener that the application has started.

    Raises ConfigurationError if `port` is not a valid port number, and
    OSError if the connection cannot be established or the payload
    cannot be written completely.
    """
    port = parse_port(port)
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.connect((host, port))
        sock.sendall(PAYLOAD)


def notify_from_env(env_var: str = PORT_ENV_VAR, host: str = HOST) -> int:
    """Notify the listener whose port is stored in `env_var`.

    Returns the port that was notified.
    """
    port = port_from_env(env_var)
    notify(port, host)
    return port
