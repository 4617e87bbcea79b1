"""Server configuration and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value is not None else default


DEFAULT_HOST = os.getenv("FILESERVER_HOST", "localhost")
DEFAULT_PORT = _env_int("FILESERVER_PORT", 8080)
DEFAULT_MAX_CONNECTIONS = _env_int("FILESERVER_MAX_CONNECTIONS", 16)
DEFAULT_READ_BUFFER_SIZE = _env_int("FILESERVER_READ_BUFFER_SIZE", 256)
DEFAULT_POLL_INTERVAL = _env_float("FILESERVER_POLL_INTERVAL", 0.05)
DEFAULT_WRITE_TIMEOUT = _env_float("FILESERVER_WRITE_TIMEOUT", 5.0)
DEFAULT_IDLE_TIMEOUT = _env_float("FILESERVER_IDLE_TIMEOUT", 0.0)

PREFERRED_PUBLIC_DIR = "public"
FALLBACK_PUBLIC_DIR = "."
INDEX_DOCUMENT = "index.html"
LOG_FORMATS = ("json", "text")


@dataclass(frozen=True)
class ServerConfig:
    """Validated runtime settings shared by the listener and every connection."""

    host: str
    port: int
    public_root: str
    max_connections: int
    read_buffer_size: int
    poll_interval: float
    write_timeout: float
    idle_timeout: float

    @property
    def url(self) -> str:
        """Return the URL clients use to reach the server."""
        return f"http://{self.host}:{self.port}"


def choose_public_root(preferred: str = PREFERRED_PUBLIC_DIR) -> str:
    """Use the preferred directory when it exists, otherwise the working directory."""
    if Path(preferred).is_dir():
        return preferred
    return FALLBACK_PUBLIC_DIR


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(description="Static file HTTP server")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument(
        "--directory",
        default=os.getenv("FILESERVER_DIRECTORY"),
        help="Public root (default: ./public if present, else .)",
    )
    parser.add_argument(
        "--max-connections",
        type=int,
        default=DEFAULT_MAX_CONNECTIONS,
        help="Maximum number of live connections",
    )
    parser.add_argument(
        "--read-buffer-size",
        type=int,
        default=DEFAULT_READ_BUFFER_SIZE,
        help="Bytes of each request that are parsed",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=DEFAULT_POLL_INTERVAL,
        help="Seconds to wait for socket readiness per poll pass",
    )
    parser.add_argument(
        "--write-timeout",
        type=float,
        default=DEFAULT_WRITE_TIMEOUT,
        help="Seconds allowed for writing one response",
    )
    parser.add_argument(
        "--idle-timeout",
        type=float,
        default=DEFAULT_IDLE_TIMEOUT,
        help="Close connections idle this many seconds (0 disables)",
    )
    default_log_level = os.getenv("FILESERVER_LOG_LEVEL", "INFO").upper()
    default_destination = os.getenv("FILESERVER_LOG_DESTINATION", "stderr")
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=default_destination,
        help="stderr, stdout or a file path",
    )
    parser.add_argument(
        "--log-format",
        default=os.getenv("FILESERVER_LOG_FORMAT", "json").lower(),
        choices=LOG_FORMATS,
        type=str.lower,
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Validate parsed arguments and freeze them into a ServerConfig."""
    directory: Optional[str] = args.directory
    if directory is None:
        directory = choose_public_root()
    elif not Path(directory).is_dir():
        raise ValueError(f"Public directory does not exist: {directory}")

    if args.max_connections < 1:
        raise ValueError("--max-connections must be at least 1")
    if args.read_buffer_size < len(b"GET /"):
        raise ValueError("--read-buffer-size is too small to hold a request line")
    if args.poll_interval <= 0:
        raise ValueError("--poll-interval must be positive")
    if args.write_timeout <= 0:
        raise ValueError("--write-timeout must be positive")
    if args.idle_timeout < 0:
        raise ValueError("--idle-timeout must not be negative")

    return ServerConfig(
        host=args.host,
        port=args.port,
        public_root=directory,
        max_connections=args.max_connections,
        read_buffer_size=args.read_buffer_size,
        poll_interval=args.poll_interval,
        write_timeout=args.write_timeout,
        idle_timeout=args.idle_timeout,
    )
