"""Request-line scanning over the fixed-size read buffer.

Only the request path is extracted. The scan runs byte by byte from the
leading slash and stops at the first space, ``?`` or ``#``; anything after
that point, headers included, is never looked at.
"""

import logging
from typing import Union

from fileserver.domain.connection_id import ConnectionLoggerAdapter
from fileserver.domain.http_types import BadRequest, ParsedRequest

PARSER_LOGGER = ConnectionLoggerAdapter(logging.getLogger("fileserver.parser"), {})

METHOD_PREFIX = b"GET /"
PATH_START = len(b"GET ")
PATH_TERMINATORS = frozenset(b" ?#")
DOT = ord(".")

BufferLike = Union[bytes, bytearray, memoryview]


def find_path_end(data: BufferLike) -> int:
    """Return the offset one past the path, rejecting ``..`` on the way."""
    previous_was_dot = False
    for index in range(PATH_START + 1, len(data)):
        byte = data[index]
        if byte == DOT:
            if previous_was_dot:
                raise BadRequest("path contains '..'")
            previous_was_dot = True
        elif byte in PATH_TERMINATORS:
            return index
        else:
            previous_was_dot = False
    return len(data)


def parse_request(data: BufferLike) -> ParsedRequest:
    """Extract the request path from the bytes of a GET request."""
    view = memoryview(data)
    if view[: len(METHOD_PREFIX)] != METHOD_PREFIX:
        raise BadRequest("request does not start with 'GET /'")

    end = find_path_end(view)
    try:
        path = bytes(view[PATH_START:end]).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise BadRequest("path is not valid UTF-8") from exc

    if PARSER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        PARSER_LOGGER.debug(
            "Request parsed",
            extra={"event": "request_parsed", "path": path, "bytes_in": len(view)},
        )
    return ParsedRequest(path)
