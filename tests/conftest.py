"""Shared pytest fixtures for integration and unit tests."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Generator, TypedDict

import pytest

from tests.utils.http import reserve_port, wait_for_port

if TYPE_CHECKING:
    from _pytest.tmpdir import TempPathFactory

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SERVER_ENTRYPOINT = PROJECT_ROOT / "main.py"

INDEX_BODY = b"<h1>hi</h1>"
ASSETS_INDEX_BODY = b"<link rel=stylesheet href=style.css><p>assets</p>"
STYLE_BODY = b"body { color: #333; }\n"
LARGE_SCRIPT_SIZE = 1024 * 1024


class ServerProcessInfo(TypedDict):
    """Metadata describing a running server fixture instance."""

    base_url: str
    host: str
    port: int
    directory: Path
    process: subprocess.Popen[str]
    log_file: Path


def populate_public_root(root: Path) -> Path:
    """Create the file tree every integration test serves from."""

    root.mkdir(parents=True, exist_ok=True)
    (root / "index.html").write_bytes(INDEX_BODY)
    assets = root / "assets"
    assets.mkdir()
    (assets / "index.html").write_bytes(ASSETS_INDEX_BODY)
    (assets / "style.css").write_bytes(STYLE_BODY)
    (assets / "icons.svg").write_bytes(b"<svg xmlns='http://www.w3.org/2000/svg'/>")
    (assets / "font.woff2").write_bytes(bytes(range(256)) * 4)
    (assets / "large.js").write_bytes(b"x" * LARGE_SCRIPT_SIZE)
    (root / "empty").mkdir()
    (root / "data.json").write_bytes(b'{"secret": true}')
    (root.parent / "secret.txt").write_bytes(b"do not serve")
    return root


def launch_server(
    host: str,
    port: int,
    log_file: Path,
    directory: Path | None = None,
    extra_args: list[str] | None = None,
    cwd: Path = PROJECT_ROOT,
) -> subprocess.Popen[str]:
    """Start main.py in a subprocess and wait until it accepts connections."""

    args = [
        sys.executable,
        str(SERVER_ENTRYPOINT),
        "--host",
        host,
        "--port",
        str(port),
        "--log-destination",
        str(log_file),
        "--log-level",
        "DEBUG",
    ]
    if directory is not None:
        args.extend(["--directory", str(directory)])
    if extra_args:
        args.extend(extra_args)

    process = subprocess.Popen(
        args,
        cwd=cwd,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    try:
        wait_for_port(host, port)
    except Exception:
        process.terminate()
        stdout, stderr = process.communicate(timeout=5)
        print(f"\nServer stdout:\n{stdout}")
        print(f"\nServer stderr:\n{stderr}")
        raise
    return process


def stop_server(process: subprocess.Popen[str]) -> None:
    if process.poll() is None:
        process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait(timeout=5)
    for stream in (process.stdout, process.stderr):
        if stream is not None:
            stream.close()


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Expose the repository root path to tests."""

    return PROJECT_ROOT


@pytest.fixture(name="server_process")
def _server_process(
    tmp_path_factory: "TempPathFactory",
) -> Generator[ServerProcessInfo, None, None]:
    """Launch the file server in a background process for integration tests."""

    host = "127.0.0.1"
    port = reserve_port(host)
    workspace = tmp_path_factory.mktemp("server-files")
    directory = populate_public_root(workspace / "public")
    log_file = workspace / "server.log"
    process = launch_server(host, port, log_file, directory)
    yield {
        "base_url": f"http://{host}:{port}",
        "host": host,
        "port": port,
        "directory": directory,
        "process": process,
        "log_file": log_file,
    }
    stop_server(process)


@pytest.fixture()
def base_url(server_process: ServerProcessInfo) -> str:
    """Expose the running server base URL to integration tests."""

    return server_process["base_url"]
