"""Mapping of request paths onto files below the public root."""

import logging
from pathlib import Path
from typing import Union

from fileserver.bootstrap.config import INDEX_DOCUMENT
from fileserver.domain.connection_id import ConnectionLoggerAdapter
from fileserver.domain.http_types import NotFound, Redirect, ResolvedTarget

RESOLVER_LOGGER = ConnectionLoggerAdapter(
    logging.getLogger("fileserver.resolver"), {}
)


def resolve_target(
    public_root: str, request_path: str
) -> Union[ResolvedTarget, Redirect]:
    """Map a parsed request path to a file, or to a redirect for bare directories.

    The root and the path are joined verbatim; ``..`` has already been
    rejected by the parser.
    """
    candidate = Path(public_root + request_path)
    if not candidate.is_dir():
        return ResolvedTarget(candidate)

    if not request_path.endswith("/"):
        return Redirect(request_path + "/")
    return ResolvedTarget(candidate / INDEX_DOCUMENT)


def read_target(target: ResolvedTarget) -> bytes:
    """Return the full content of the target file or raise NotFound."""
    try:
        return target.filesystem_path.read_bytes()
    except (OSError, ValueError) as exc:
        if RESOLVER_LOGGER.logger.isEnabledFor(logging.DEBUG):
            RESOLVER_LOGGER.debug(
                "File could not be read",
                extra={
                    "event": "file_unreadable",
                    "path": target.filesystem_path.as_posix(),
                    "error_type": type(exc).__name__,
                },
            )
        raise NotFound(target.filesystem_path.as_posix()) from exc
