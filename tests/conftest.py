"""
pytest configuration and fixtures.
"""

import socket
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Generator, List, Tuple

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webserver import WebServer, ServerConfig
from webserver.core import Connection
from webserver.handlers import StaticResponder
from webserver.http.router import Router
from webserver.resources import Cache


INDEX_HTML = b"<!DOCTYPE html><html><body><h1>Index</h1></body></html>\n"
PROFILE_HTML = b"<!DOCTYPE html><html><body><h1>Profile</h1></body></html>\n"
NOT_FOUND_HTML = b"<!DOCTYPE html><html><body><h1>404</h1></body></html>\n"


@dataclass
class Site:
    """A temporary document root and system-files root."""
    root: Path
    files: Path

    @property
    def index(self) -> bytes:
        return (self.root / "index.html").read_bytes()

    @property
    def profile(self) -> bytes:
        return (self.root / "profile.html").read_bytes()

    @property
    def not_found(self) -> bytes:
        return (self.files / "404.html").read_bytes()


@dataclass
class ParsedResponse:
    """A response split back into its parts for assertions."""
    status_line: str
    headers: List[Tuple[str, str]]
    body: bytes

    def header(self, name: str) -> str:
        for key, value in self.headers:
            if key == name:
                return value
        raise KeyError(name)

    @property
    def header_names(self) -> List[str]:
        return [key for key, _ in self.headers]


def parse_raw_response(raw: bytes) -> ParsedResponse:
    """Split on the first blank line; header lines end with a bare \\n."""
    head, separator, body = raw.partition(b"\n\n")
    assert separator, f"No header terminator in {raw[:200]!r}"

    lines = head.decode("latin-1").split("\n")
    headers = []
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers.append((name, value))
    return ParsedResponse(status_line=lines[0], headers=headers, body=body)


def read_until_closed(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def site(tmp_path: Path) -> Site:
    """Document root with index.html and profile.html, system root with 404.html."""
    root = tmp_path / "serverroot"
    files = tmp_path / "serverfiles"
    root.mkdir()
    files.mkdir()

    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "profile.html").write_bytes(PROFILE_HTML)
    (files / "404.html").write_bytes(NOT_FOUND_HTML)

    return Site(root=root, files=files)


@pytest.fixture
def static(site: Site) -> StaticResponder:
    return StaticResponder(str(site.root), str(site.files))


@pytest.fixture
def router(static: StaticResponder) -> Router:
    return Router(static)


@pytest.fixture
def cache() -> Cache:
    return Cache(10, 0)


@pytest.fixture
def parse_response() -> Callable[[bytes], ParsedResponse]:
    return parse_raw_response


@pytest.fixture
def exchange() -> Callable[..., bytes]:
    """
    Run a connection handler against an in-process socket pair.

    Returns a function: exchange(handler, request_bytes) -> response_bytes.
    The handler receives a real Connection; the client side sends the
    request, then reads until the server closes.
    """
    def run(handler: Callable[[Connection], object], request: bytes) -> bytes:
        server_sock, client_sock = socket.socketpair()
        conn = Connection(socket=server_sock, address=("127.0.0.1", 54321))

        if request:
            client_sock.sendall(request)
        else:
            client_sock.shutdown(socket.SHUT_WR)

        received: List[bytes] = []

        def reader():
            received.append(read_until_closed(client_sock))
            client_sock.close()

        thread = threading.Thread(target=reader, daemon=True)
        thread.start()

        with conn:
            handler(conn)

        thread.join(timeout=5.0)
        assert not thread.is_alive(), "client never saw the connection close"
        return received[0]

    return run


class BackgroundServer:
    """Runs a WebServer in a daemon thread."""

    def __init__(self, server: WebServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self) -> Tuple[str, int]:
        return self.server.address

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_listening(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            # accept() polls for shutdown once per second
            self._thread.join(timeout=5.0)

    def request(self, data: bytes, timeout: float = 5.0) -> bytes:
        """Send raw request bytes and read the response until close."""
        with socket.create_connection(self.address, timeout=timeout) as sock:
            sock.sendall(data)
            return read_until_closed(sock)


@pytest.fixture
def running_server(site: Site) -> Generator[BackgroundServer, None, None]:
    """A live server on 127.0.0.1 with an OS-assigned port."""
    server = WebServer(ServerConfig(
        host="127.0.0.1",
        port=0,
        server_root=str(site.root),
        server_files=str(site.files),
        log_level="WARNING",
    ))

    background = BackgroundServer(server)
    background.start()

    yield background

    background.stop()
