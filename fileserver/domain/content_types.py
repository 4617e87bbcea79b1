"""Extension to MIME type allow-list."""

from pathlib import PurePath
from types import MappingProxyType
from typing import Union

from fileserver.domain.http_types import UnsupportedType

CONTENT_TYPES = MappingProxyType(
    {
        "html": "text/html",
        "css": "text/css",
        "js": "application/javascript",
        "svg": "image/svg+xml",
        "woff2": "font/woff2",
        "ttf": "font/ttf",
    }
)


def content_type_for(path: Union[str, PurePath]) -> str:
    """Return the MIME type for ``path`` or raise UnsupportedType."""
    extension = PurePath(path).suffix[1:]
    try:
        return CONTENT_TYPES[extension]
    except KeyError:
        raise UnsupportedType(extension) from None
