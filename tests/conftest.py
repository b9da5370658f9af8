from __future__ import annotations

import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Iterator, Mapping, Optional

import pytest

from zold_http.config import get_settings
from zold_http.data_models import TransportReply


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in ("ZOLD_NETWORK", "ZOLD_HTTP_TIMEOUT", "ZOLD_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    # Local peers must be reached directly, never through a proxy.
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class StubTransport:
    """Deterministic transport that records what it was asked to send."""

    def __init__(
        self,
        status: int = 200,
        body: str = "",
        headers: Optional[Mapping[str, str]] = None,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ) -> None:
        self.status = status
        self.body = body
        self.headers = dict(headers or {})
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, dict[str, str]]] = []

    def get(self, uri: str, headers: Mapping[str, str]) -> TransportReply:
        self.calls.append((uri, dict(headers)))
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return TransportReply(status=self.status, body=self.body, headers=self.headers)


class HangingTransport:
    """Transport that blocks until released, like a peer that never answers."""

    def __init__(self) -> None:
        self.release = threading.Event()
        self.finished = threading.Event()

    def get(self, uri: str, headers: Mapping[str, str]) -> TransportReply:
        self.release.wait()
        self.finished.set()
        return TransportReply(status=200, body="This should never be returned!")


@pytest.fixture()
def hanging_transport() -> Iterator[HangingTransport]:
    transport = HangingTransport()
    yield transport
    transport.release.set()


class PeerServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, status: int, body: str, delay: float) -> None:
        super().__init__(("127.0.0.1", 0), _PeerHandler)
        self.status = status
        self.body = body
        self.delay = delay
        self.seen_headers: list[dict[str, str]] = []

    @property
    def uri(self) -> str:
        return f"http://127.0.0.1:{self.server_address[1]}/"


class _PeerHandler(BaseHTTPRequestHandler):
    server: PeerServer

    def do_GET(self) -> None:  # noqa: N802
        self.server.seen_headers.append({k: v for k, v in self.headers.items()})
        if self.server.delay:
            time.sleep(self.server.delay)
        payload = self.server.body.encode("utf-8")
        self.send_response(self.server.status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.send_header("X-Zold-Version", "9.9.9")
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args: object) -> None:
        pass


@pytest.fixture()
def peer_server():
    """Factory for local HTTP peers; every server is shut down after the test."""

    servers: list[PeerServer] = []

    def _start(status: int = 200, body: str = "", delay: float = 0.0) -> PeerServer:
        server = PeerServer(status, body, delay)
        threading.Thread(target=server.serve_forever, daemon=True).start()
        servers.append(server)
        return server

    yield _start
    for server in servers:
        server.shutdown()
        server.server_close()


@pytest.fixture()
def silent_peer() -> Iterator[str]:
    """A peer that accepts connections and then never says a word."""

    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen()
    listener.settimeout(0.1)
    stop = threading.Event()
    accepted: list[socket.socket] = []

    def _accept() -> None:
        while not stop.is_set():
            try:
                conn, _ = listener.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            accepted.append(conn)

    thread = threading.Thread(target=_accept, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{listener.getsockname()[1]}/"
    stop.set()
    thread.join(timeout=1)
    for conn in accepted:
        conn.close()
    listener.close()


@pytest.fixture()
def stub_transport() -> type[StubTransport]:
    return StubTransport
