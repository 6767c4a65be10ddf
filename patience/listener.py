"""TCP listener that waits for the startup notification of an application.

The test creates a Listener, hands `listener.port` to the application it is
about to start (environment variable, argument, config file), and then calls
`wait`. The application calls `patience.notifier.notify` with that port once
it is ready.

A Listener is single use: `wait` closes the listening socket when it returns,
successfully or not.
"""

import socket
import time
from typing import Optional

from patience.protocol import (
    HOST,
    PAYLOAD,
    POLL_INTERVAL,
    InvalidNotification,
    NotificationTimeout,
)


class Listener:
    """Waiting side of the handshake: a bound socket plus a polling loop."""

    def __init__(self, host: str = HOST):
        """Bind a listening socket to an OS-assigned port on `host`.

        Raises OSError if the socket cannot be bound.
        """
        self._socket: Optional[socket.socket] = socket.socket(
            socket.AF_INET, socket.SOCK_STREAM
        )
        try:
            self._socket.bind((host, 0))
            self._socket.listen(1)
        except OSError:
            self.close()
            raise

    @property
    def port(self) -> int:
        """Port the listener is bound to. Send this to the application."""
        return self._require_socket().getsockname()[1]

    def _require_socket(self) -> socket.socket:
        """Return the listening socket, failing once the listener is consumed."""
        if self._socket is None:
            raise RuntimeError("Listener already consumed")
        return self._socket

    def wait(self, timeout: float) -> float:
        """Block until the application has notified or `timeout` has expired.

        Args:
            timeout: Maximum time to wait in seconds.

        Returns:
            Seconds waited until the notification was received.

        Raises:
            NotificationTimeout: No notification within `timeout`.
            InvalidNotification: The first connection sent something else.
            OSError: Accepting or reading the connection failed.
        """
        sock = self._require_socket()
        try:
            sock.setblocking(False)

            start = time.monotonic()
            while time.monotonic() - start < timeout:
                try:
                    conn, _ = sock.accept()
                except BlockingIOError:
                    time.sleep(POLL_INTERVAL)
                    continue

                with conn:
                    payload = _read_payload(conn, start + timeout)
                if payload != PAYLOAD:
                    raise InvalidNotification(payload)
                return time.monotonic() - start

            raise NotificationTimeout("did not receive startup notification")
        finally:
            self.close()

    def close(self) -> None:
        """Close the listening socket without waiting."""
        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

    def __enter__(self) -> "Listener":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _read_payload(conn: socket.socket, deadline: float) -> bytes:
    """Read `conn` until the peer closes it or `deadline` passes.

    Stops early once more bytes than the payload arrived, since the
    notification is invalid at that point anyway.
    """
    buffer = b""
    try:
        while len(buffer) <= len(PAYLOAD):
            conn.settimeout(max(deadline - time.monotonic(), POLL_INTERVAL))
            data = conn.recv(4096)
            if not data:
                break
            buffer += data
    except socket.timeout:
        raise NotificationTimeout(
            "connection accepted but startup notification was not completed"
        ) from None
    return buffer
