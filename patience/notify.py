"""Command-line notifier for applications that are not written in Python.

Usage: patience-notify [PORT]

Without PORT the session port is read from $PATIENCE_PORT.
"""

import sys
from typing import Optional, Sequence

from patience.notifier import notify
from patience.protocol import (
    PORT_ENV_VAR,
    ConfigurationError,
    parse_port,
    port_from_env,
)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Send the startup notification. Returns the process exit code."""
    if argv is None:
        argv = sys.argv[1:]

    if len(argv) > 1:
        print("Usage: patience-notify [PORT]", file=sys.stderr)
        return 2

    try:
        if argv:
            port = parse_port(argv[0])
        else:
            port = port_from_env(PORT_ENV_VAR)
    except ConfigurationError as e:
        print(f"Invalid session port: {e}", file=sys.stderr)
        return 2

    try:
        notify(port)
    except OSError as e:
        print(f"Failed to send startup notification to port {port}: {e}", file=sys.stderr)
        return 1

    print(f"Sent startup notification to port {port}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
