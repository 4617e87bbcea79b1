"""Shared fixtures for unit tests."""

import logging
from pathlib import Path

import pytest

from fileserver.bootstrap.config import ServerConfig
from fileserver.lifecycle.state import ServerLifecycle
from fileserver.transport.context import ServerContext


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Ensure logs propagate to root so caplog can catch them."""
    logger = logging.getLogger("fileserver")
    old_propagate = logger.propagate
    old_level = logger.level
    old_handlers = list(logger.handlers)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    yield
    for handler in logger.handlers:
        if handler not in old_handlers:
            handler.close()
    logger.handlers[:] = old_handlers
    logger.setLevel(old_level)
    logger.propagate = old_propagate


@pytest.fixture(name="public_root")
def fixture_public_root(tmp_path: Path) -> Path:
    """A small public directory tree."""
    root = tmp_path / "public"
    root.mkdir()
    (root / "index.html").write_bytes(b"<h1>hi</h1>")
    assets = root / "assets"
    assets.mkdir()
    (assets / "index.html").write_bytes(b"<p>assets</p>")
    (assets / "app.js").write_bytes(b"console.log(1);")
    (root / "empty").mkdir()
    (root / "data.json").write_bytes(b"{}")
    return root


def build_test_config(public_root, **overrides) -> ServerConfig:
    settings = {
        "host": "127.0.0.1",
        "port": 0,
        "public_root": str(public_root),
        "max_connections": 16,
        "read_buffer_size": 256,
        "poll_interval": 0.01,
        "write_timeout": 1.0,
        "idle_timeout": 0.0,
    }
    settings.update(overrides)
    return ServerConfig(**settings)


@pytest.fixture(name="context")
def fixture_context(public_root: Path) -> ServerContext:
    return ServerContext(build_test_config(public_root), ServerLifecycle())


@pytest.fixture(name="make_context")
def fixture_make_context(public_root: Path):
    """Build a ServerContext with selected config values overridden."""

    def _make(**overrides) -> ServerContext:
        return ServerContext(
            build_test_config(public_root, **overrides), ServerLifecycle()
        )

    return _make
