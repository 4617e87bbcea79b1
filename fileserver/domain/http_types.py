"""Shared HTTP type definitions to avoid circular imports."""

from dataclasses import dataclass
from pathlib import Path
from typing import Union


class HttpError(Exception):
    """Base class for failures that are answered with a status-only response."""

    status_code = 500
    reason = "Internal Server Error"


class BadRequest(HttpError):
    """Raised for a malformed method, a traversal attempt, or a non-UTF-8 path."""

    status_code = 400
    reason = "Bad Request"


class NotFound(HttpError):
    """Raised when the requested file cannot be served."""

    status_code = 404
    reason = "Not Found"


class UnsupportedType(NotFound):
    """Raised when a file extension is outside the served allow-list."""


@dataclass(frozen=True)
class ParsedRequest:
    """The only part of a request this server cares about."""

    path: str


@dataclass(frozen=True)
class ResolvedTarget:
    """A filesystem entry selected for a request path."""

    filesystem_path: Path


@dataclass(frozen=True)
class Redirect:
    """Resolution outcome for a directory requested without a trailing slash."""

    location: str


@dataclass(frozen=True)
class StatusResponse:
    """A response carrying only a status line."""

    status_code: int
    reason: str


@dataclass(frozen=True)
class RedirectResponse:
    """A 308 response pointing the client at ``location``."""

    location: str
    status_code: int = 308
    reason: str = "Permanent Redirect"


@dataclass(frozen=True)
class ContentResponse:
    """A 200 response carrying a file body."""

    content_type: str
    body: bytes
    status_code: int = 200
    reason: str = "OK"


HttpResponse = Union[StatusResponse, RedirectResponse, ContentResponse]
