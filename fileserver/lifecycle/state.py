"""Server lifecycle state management."""

import logging
import threading

from fileserver.domain.connection_id import ConnectionLoggerAdapter

LIFECYCLE_LOGGER = ConnectionLoggerAdapter(
    logging.getLogger("fileserver.lifecycle"), {}
)


class ServerLifecycle:
    """Process-wide running flag, stopped once by a signal handler.

    Backed by a threading.Event so the value written from a signal handler is
    visible to the poll loop without further synchronisation.
    """

    def __init__(self) -> None:
        self._stop_event = threading.Event()

    def is_running(self) -> bool:
        """Return True until a stop has been requested."""
        return not self._stop_event.is_set()

    def request_stop(self, signum: int | None = None) -> None:
        """Ask the multiplexer and any drain loop to stop."""
        if self._stop_event.is_set():
            return
        self._stop_event.set()
        LIFECYCLE_LOGGER.info(
            "Shutdown requested",
            extra={"event": "shutdown_requested", "signal": signum},
        )
