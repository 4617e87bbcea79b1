"""HTTP response serialization and sending."""

import logging
import socket
from typing import Optional

from fileserver.domain.connection_id import ConnectionLoggerAdapter
from fileserver.domain.http_types import (
    ContentResponse,
    HttpResponse,
    RedirectResponse,
)

IO_LOGGER = ConnectionLoggerAdapter(logging.getLogger("fileserver.io"), {})

CRLF = "\r\n"


def serialize_response(response: HttpResponse) -> bytes:
    """Render a response exactly as it goes on the wire."""
    lines = [f"HTTP/1.1 {response.status_code} {response.reason}"]
    body = b""
    if isinstance(response, RedirectResponse):
        lines.append(f"Location: {response.location}")
    elif isinstance(response, ContentResponse):
        lines.append(f"Content-Length: {len(response.body)}")
        lines.append(f"Content-Type: {response.content_type}")
        body = response.body
    head = CRLF.join(lines) + CRLF + CRLF
    return head.encode() + body


def send_response(
    client_socket: socket.socket,
    response: HttpResponse,
    write_timeout: Optional[float] = None,
) -> bool:
    """Write the whole response once; return False if the write failed.

    A failure is never retried and never raised: the caller drops the
    connection either way.
    """
    payload = serialize_response(response)
    try:
        if write_timeout is not None:
            client_socket.settimeout(write_timeout)
        client_socket.sendall(payload)
    except OSError as error:
        IO_LOGGER.debug(
            "Response write failed",
            extra={
                "event": "write_failed",
                "status_code": response.status_code,
                "error_type": type(error).__name__,
            },
        )
        return False
    if IO_LOGGER.logger.isEnabledFor(logging.DEBUG):
        IO_LOGGER.debug(
            "Sent response",
            extra={
                "event": "response_sent",
                "status_code": response.status_code,
                "bytes_out": len(payload),
            },
        )
    return True
