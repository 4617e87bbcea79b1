"""State shared by the multiplexer and each connection step."""

import socket
import time
from dataclasses import dataclass, field

from fileserver.bootstrap.config import ServerConfig
from fileserver.domain.connection_id import generate_connection_id
from fileserver.lifecycle.state import ServerLifecycle


@dataclass
class ServerContext:
    """Dependencies handed to every connection step."""

    config: ServerConfig
    lifecycle: ServerLifecycle


@dataclass
class RequestBuffers:
    """The one read buffer and one trash buffer reused by every connection."""

    read: bytearray
    trash: bytearray

    @classmethod
    def allocate(cls, size: int) -> "RequestBuffers":
        return cls(bytearray(size), bytearray(size))


@dataclass
class Connection:
    """A live client socket tracked by the multiplexer."""

    client_socket: socket.socket
    address: tuple[str, int]
    connection_id: str = field(default_factory=generate_connection_id)
    accepted_at: float = field(default_factory=time.monotonic)

    @property
    def client(self) -> str:
        return f"{self.address[0]}:{self.address[1]}"

    def idle_seconds(self, now: float) -> float:
        return now - self.accepted_at

    def close(self) -> None:
        """Shut down the write side and release the socket."""
        try:
            self.client_socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass
        self.client_socket.close()
