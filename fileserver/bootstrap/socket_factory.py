"""Listening socket creation."""

import logging
import socket
import sys

from fileserver.domain.connection_id import ConnectionLoggerAdapter

SOCKET_LOGGER = ConnectionLoggerAdapter(logging.getLogger("fileserver.socket"), {})

LISTEN_BACKLOG = 128


def create_listener(host: str, port: int) -> socket.socket:
    """Bind a non-blocking TCP listener, exiting the process when binding fails."""
    try:
        listener = socket.create_server((host, port), backlog=LISTEN_BACKLOG)
    except OSError as error:
        SOCKET_LOGGER.critical(
            "Failed to bind listening socket",
            extra={
                "event": "bind_failed",
                "host": host,
                "port": port,
                "error_type": type(error).__name__,
            },
        )
        sys.exit(1)
    listener.setblocking(False)
    return listener
