"""Pure HTTP response builders."""

from fileserver.domain.http_types import (
    BadRequest,
    ContentResponse,
    NotFound,
    RedirectResponse,
    StatusResponse,
)


def bad_request_response() -> StatusResponse:
    return StatusResponse(BadRequest.status_code, BadRequest.reason)


def not_found_response() -> StatusResponse:
    """404 for missing, unreadable and unsupported files alike."""
    return StatusResponse(NotFound.status_code, NotFound.reason)


def redirect_response(location: str) -> RedirectResponse:
    """Produce a 308 redirect so relative links resolve against the directory."""
    return RedirectResponse(location)


def content_response(content_type: str, body: bytes) -> ContentResponse:
    return ContentResponse(content_type, body)
