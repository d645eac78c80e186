"""
Signal handling of the CLI process.

The server runs as `python -m webserver` in a subprocess so SIGTERM/SIGINT
reach a real main thread.
"""

import os
import signal
import socket
import subprocess
import sys
from pathlib import Path

import pytest


pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")

SRC = Path(__file__).parent.parent.parent / "src"


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def wait_for_log(proc: subprocess.Popen, text: str):
    """Read the server's stderr until a line containing text appears."""
    for line in proc.stderr:
        if text in line:
            return
    pytest.fail(f"Server exited before logging {text!r}")


@pytest.fixture
def server_process(site):
    port = free_port()
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC), env.get("PYTHONPATH")]))

    proc = subprocess.Popen(
        [
            sys.executable, "-m", "webserver",
            "--host", "127.0.0.1", "--port", str(port),
            "--root", str(site.root), "--files", str(site.files),
            "--log-level", "INFO",
        ],
        stderr=subprocess.PIPE,
        text=True,
        env=env,
    )
    wait_for_log(proc, "Waiting for connections")

    yield proc, port

    if proc.poll() is None:
        proc.kill()
        proc.communicate()


class TestSignals:

    @pytest.mark.parametrize("signum", [signal.SIGTERM, signal.SIGINT])
    def test_idle_server_stops(self, server_process, signum):
        proc, _ = server_process

        proc.send_signal(signum)
        _, stderr = proc.communicate(timeout=5.0)

        assert proc.returncode == 0
        assert "Socket server stopped" in stderr

    @pytest.mark.parametrize("signum", [signal.SIGTERM, signal.SIGINT])
    def test_stops_while_client_sends_nothing(self, server_process, signum):
        """A client blocking the single read must not keep the process alive."""
        proc, port = server_process

        with socket.create_connection(("127.0.0.1", port), timeout=5.0) as client:
            wait_for_log(proc, "Got connection from 127.0.0.1")

            proc.send_signal(signum)
            _, stderr = proc.communicate(timeout=5.0)

            assert proc.returncode == 0
            assert "Shutting down socket server" in stderr
            assert client.recv(1) == b""
