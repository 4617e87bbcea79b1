"""Per-connection log context.

Every accepted socket gets a short ``conn-N`` id. While a connection step
runs, the id sits in a context variable so that records logged anywhere in
the pipeline can be traced back to one client.
"""

import contextvars
import itertools
import logging
from typing import Any, MutableMapping, Optional

_current: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "connection_id", default=None
)
_counter = itertools.count(1)


def generate_connection_id() -> str:
    return f"conn-{next(_counter)}"


def set_connection_id(connection_id: str) -> None:
    _current.set(connection_id)


def clear_connection_id() -> None:
    _current.set(None)


class ConnectionLoggerAdapter(logging.LoggerAdapter):
    """Tag records with the active connection and the emitting component.

    ``component`` is the logger name below the ``fileserver`` package, e.g.
    ``transport.connection``. Outside a connection step the id is ``-``.
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        _, _, component = self.logger.name.partition("fileserver.")
        kwargs["extra"] = {
            **(kwargs.get("extra") or {}),
            "connection_id": _current.get() or "-",
            "component": component or self.logger.name,
        }
        return msg, kwargs
