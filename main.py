"""Static file HTTP server entry point."""

import logging
import signal
import sys

from fileserver.bootstrap.config import build_config, parse_cli_args
from fileserver.bootstrap.logging_setup import configure_logging
from fileserver.bootstrap.socket_factory import create_listener
from fileserver.domain.connection_id import ConnectionLoggerAdapter
from fileserver.lifecycle.state import ServerLifecycle
from fileserver.transport.context import ServerContext
from fileserver.transport.multiplexer import run_server

SERVER_LOGGER = ConnectionLoggerAdapter(logging.getLogger("fileserver.server"), {})


def install_signal_handlers(lifecycle: ServerLifecycle) -> None:
    """Stop gracefully on SIGINT and SIGTERM."""

    def shutdown_handler(signum: int, _frame) -> None:
        lifecycle.request_stop(signum)

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)


def main(argv: list[str] | None = None) -> None:
    """Start the server and poll connections until interrupted."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(
        args.log_level, args.log_destination, use_json=args.log_format == "json"
    )
    try:
        config = build_config(args)
    except ValueError as error:
        SERVER_LOGGER.critical(
            "Invalid configuration",
            extra={"event": "invalid_config", "reason": str(error)},
        )
        sys.exit(2)

    lifecycle = ServerLifecycle()
    install_signal_handlers(lifecycle)
    listener = create_listener(config.host, config.port)

    print(config.url, flush=True)
    print(f"Serving files: {config.public_root}", flush=True)

    run_server(listener, ServerContext(config, lifecycle))


if __name__ == "__main__":
    main()
