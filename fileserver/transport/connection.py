"""One read/parse/resolve/respond step for a live connection."""

import logging
from typing import Optional

from fileserver.domain.connection_id import (
    ConnectionLoggerAdapter,
    clear_connection_id,
    set_connection_id,
)
from fileserver.domain.content_types import content_type_for
from fileserver.domain.http_types import BadRequest, HttpResponse, NotFound, Redirect
from fileserver.domain.response_builders import (
    bad_request_response,
    content_response,
    not_found_response,
    redirect_response,
)
from fileserver.lifecycle.state import ServerLifecycle
from fileserver.pipeline.io import send_response
from fileserver.pipeline.parser import BufferLike, parse_request
from fileserver.pipeline.resolver import read_target, resolve_target
from fileserver.transport.context import Connection, RequestBuffers, ServerContext

CONNECTION_LOGGER = ConnectionLoggerAdapter(
    logging.getLogger("fileserver.transport.connection"), {}
)


def _log_dropped(
    connection: Connection, reason: str, error: Optional[OSError] = None
) -> None:
    if not CONNECTION_LOGGER.logger.isEnabledFor(logging.DEBUG):
        return
    extra = {
        "event": "connection_dropped",
        "client": connection.client,
        "reason": reason,
    }
    if error is not None:
        extra["error_type"] = type(error).__name__
    CONNECTION_LOGGER.debug("Connection dropped", extra=extra)


def build_response(data: BufferLike, public_root: str) -> HttpResponse:
    """Turn the leading bytes of a request into exactly one response."""
    try:
        request = parse_request(data)
        target = resolve_target(public_root, request.path)
        if isinstance(target, Redirect):
            CONNECTION_LOGGER.info(
                "Directory requested without trailing slash",
                extra={
                    "event": "redirect",
                    "path": request.path,
                    "location": target.location,
                },
            )
            return redirect_response(target.location)
        content_type = content_type_for(target.filesystem_path)
        body = read_target(target)
    except BadRequest as error:
        CONNECTION_LOGGER.warning(
            "Malformed request rejected",
            extra={"event": "bad_request", "reason": str(error)},
        )
        return bad_request_response()
    except NotFound as error:
        CONNECTION_LOGGER.info(
            "Requested file not served",
            extra={
                "event": "not_found",
                "path": request.path,
                "error_type": type(error).__name__,
            },
        )
        return not_found_response()

    CONNECTION_LOGGER.info(
        "File served",
        extra={
            "event": "file_served",
            "path": request.path,
            "content_type": content_type,
            "bytes_out": len(body),
        },
    )
    return content_response(content_type, body)


def drain_trailing_bytes(
    connection: Connection, lifecycle: ServerLifecycle, trash: bytearray
) -> bool:
    """Discard unread request bytes; return False when the connection must go."""
    while True:
        if not lifecycle.is_running():
            _log_dropped(connection, "shutdown")
            return False
        try:
            received = connection.client_socket.recv_into(trash)
        except BlockingIOError:
            return True
        except OSError as error:
            CONNECTION_LOGGER.debug(
                "Drain read failed, answering with what was read",
                extra={
                    "event": "drain_error",
                    "client": connection.client,
                    "error_type": type(error).__name__,
                },
            )
            return True
        if received == 0:
            _log_dropped(connection, "peer_closed")
            return False


def serve_connection(
    connection: Connection, context: ServerContext, buffers: RequestBuffers
) -> bool:
    """Attempt one request cycle; return True while the connection stays live.

    Nothing has arrived yet: the connection is kept for the next pass. Once a
    request has been read the connection is always dropped, responded to or not.
    """
    set_connection_id(connection.connection_id)
    try:
        try:
            received = connection.client_socket.recv_into(buffers.read)
        except BlockingIOError:
            return True
        except OSError as error:
            _log_dropped(connection, "read_error", error)
            return False
        if received == 0:
            _log_dropped(connection, "peer_closed")
            return False

        if not drain_trailing_bytes(connection, context.lifecycle, buffers.trash):
            return False

        request_bytes = memoryview(buffers.read)[:received]
        response = build_response(request_bytes, context.config.public_root)
        send_response(
            connection.client_socket, response, context.config.write_timeout
        )
        return False
    finally:
        clear_connection_id()
