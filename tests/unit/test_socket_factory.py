"""Unit tests for listener creation."""

import logging
import socket

import pytest

from fileserver.bootstrap.socket_factory import create_listener


def test_listener_is_non_blocking():
    listener = create_listener("127.0.0.1", 0)
    try:
        assert listener.getblocking() is False
        assert listener.getsockname()[1] != 0
    finally:
        listener.close()


def test_bind_failure_exits(monkeypatch, caplog):
    caplog.set_level(logging.CRITICAL)

    def refuse(*_args, **_kwargs):
        raise OSError(98, "Address already in use")

    monkeypatch.setattr(socket, "create_server", refuse)
    with pytest.raises(SystemExit) as excinfo:
        create_listener("127.0.0.1", 8080)

    assert excinfo.value.code == 1
    record = next(
        r for r in caplog.records if getattr(r, "event", None) == "bind_failed"
    )
    assert record.port == 8080
    assert record.error_type == "OSError"
