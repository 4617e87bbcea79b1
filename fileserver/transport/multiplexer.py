"""Single-threaded accept and poll loop over a bounded set of connections."""

import logging
import selectors
import socket
import time
from typing import Optional

from fileserver.domain.connection_id import ConnectionLoggerAdapter
from fileserver.transport.connection import serve_connection
from fileserver.transport.context import Connection, RequestBuffers, ServerContext

MULTIPLEXER_LOGGER = ConnectionLoggerAdapter(
    logging.getLogger("fileserver.transport.multiplexer"), {}
)


class ConnectionMultiplexer:
    """Accepts sockets and gives every live connection one step per poll pass.

    All sockets are non-blocking. A selector only bounds how long a pass
    waits for something to happen; every live connection is still tried on
    every pass, whether or not it was reported ready.
    """

    def __init__(self, listener: socket.socket, context: ServerContext) -> None:
        self._listener = listener
        self._context = context
        self._config = context.config
        self._buffers = RequestBuffers.allocate(self._config.read_buffer_size)
        self._connections: list[Connection] = []
        self._selector = selectors.DefaultSelector()
        self._selector.register(listener, selectors.EVENT_READ)

    @property
    def live_connections(self) -> list[Connection]:
        return list(self._connections)

    def run(self) -> None:
        """Poll until the lifecycle is stopped, then release every socket."""
        lifecycle = self._context.lifecycle
        MULTIPLEXER_LOGGER.info(
            "Server listening for connections",
            extra={
                "event": "server_listening",
                "host": self._config.host,
                "port": self._config.port,
                "directory": self._config.public_root,
                "max_connections": self._config.max_connections,
            },
        )
        try:
            while lifecycle.is_running():
                self.poll_once()
        finally:
            self.close()
            MULTIPLEXER_LOGGER.info(
                "Server shutdown complete", extra={"event": "server_stopped"}
            )

    def poll_once(self, timeout: Optional[float] = None) -> None:
        """Run one pass: wait briefly, accept at most one socket, serve all."""
        if timeout is None:
            timeout = self._config.poll_interval
        self._selector.select(timeout)
        if not self._context.lifecycle.is_running():
            return
        self._accept_one()
        self._serve_all()
        if self._config.idle_timeout > 0:
            self._evict_idle(time.monotonic())

    def close(self) -> None:
        for connection in self._connections:
            self._forget(connection)
        self._connections.clear()
        self._selector.close()
        self._listener.close()

    def _accept_one(self) -> None:
        try:
            client_socket, client_address = self._listener.accept()
        except BlockingIOError:
            return
        except OSError as error:
            MULTIPLEXER_LOGGER.error(
                "Socket accept failed",
                extra={"event": "accept_error", "error_type": type(error).__name__},
            )
            return

        client = f"{client_address[0]}:{client_address[1]}"
        if len(self._connections) >= self._config.max_connections:
            MULTIPLEXER_LOGGER.warning(
                "Connection limit reached",
                extra={
                    "event": "connection_rejected",
                    "client": client,
                    "reason": "limit",
                    "max_connections": self._config.max_connections,
                },
            )
            client_socket.close()
            return

        try:
            client_socket.setblocking(False)
        except OSError as error:
            MULTIPLEXER_LOGGER.warning(
                "Could not make client socket non-blocking",
                extra={
                    "event": "connection_rejected",
                    "client": client,
                    "reason": "setblocking",
                    "error_type": type(error).__name__,
                },
            )
            client_socket.close()
            return

        connection = Connection(client_socket, client_address)
        self._connections.append(connection)
        self._selector.register(client_socket, selectors.EVENT_READ, connection)
        if MULTIPLEXER_LOGGER.logger.isEnabledFor(logging.DEBUG):
            MULTIPLEXER_LOGGER.debug(
                "Client connection accepted",
                extra={
                    "event": "client_accepted",
                    "client": client,
                    "live_connections": len(self._connections),
                },
            )

    def _serve_all(self) -> None:
        still_live = []
        for connection in self._connections:
            if serve_connection(connection, self._context, self._buffers):
                still_live.append(connection)
            else:
                self._forget(connection)
        self._connections = still_live

    def _evict_idle(self, now: float) -> None:
        idle_timeout = self._config.idle_timeout
        still_live = []
        for connection in self._connections:
            idle_seconds = connection.idle_seconds(now)
            if idle_seconds < idle_timeout:
                still_live.append(connection)
                continue
            MULTIPLEXER_LOGGER.info(
                "Idle connection closed",
                extra={
                    "event": "idle_timeout",
                    "client": connection.client,
                    "idle_seconds": round(idle_seconds, 3),
                },
            )
            self._forget(connection)
        self._connections = still_live

    def _forget(self, connection: Connection) -> None:
        try:
            self._selector.unregister(connection.client_socket)
        except (KeyError, ValueError):
            pass
        connection.close()


def run_server(listener: socket.socket, context: ServerContext) -> None:
    """Serve connections from ``listener`` until the lifecycle is stopped."""
    ConnectionMultiplexer(listener, context).run()
