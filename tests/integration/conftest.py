"""
Integration Test Fixtures.

A threaded http.server stands in for the CaosDB server so that requests
go through real sockets, real HTTP parsing and real response headers.
"""

import threading
import time
from collections.abc import Generator
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

PREFIX = "/playground/"
USERNAME = "admin"
PASSWORD = "secret"
SESSION_TOKEN = "SessionToken=abc123"


@dataclass
class RecordedRequest:
    method: str
    path: str
    headers: dict[str, str]
    body: str


@dataclass
class EntityStore:
    entities: dict[str, str] = field(default_factory=dict)
    requests: list[RecordedRequest] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)


class CaosDBHandler(BaseHTTPRequestHandler):
    """Minimal CaosDB REST behaviour: login, entity CRUD, 401 without session."""

    protocol_version = "HTTP/1.1"
    store: EntityStore

    def log_message(self, format, *args):
        return

    def _reply(self, status: int, body: str, headers: dict[str, str] | None = None) -> None:
        payload = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/xml; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        self.end_headers()
        self.wfile.write(payload)

    def _handle(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length).decode("utf-8")
        with self.store.lock:
            self.store.requests.append(
                RecordedRequest(self.command, self.path, dict(self.headers.items()), body)
            )

        if self.path == "/nocookie/login":
            self._reply(200, "<Response/>")
            return

        key = self.path[len(PREFIX):]

        if key == "login" and self.command == "POST":
            if body == f"username={USERNAME}&password={PASSWORD}":
                self._reply(200, "<Response/>", {"Set-Cookie": f"{SESSION_TOKEN}; Path=/"})
            else:
                self._reply(401, "<Error>Authentication failed</Error>")
            return

        if key == "slow":
            time.sleep(2)
            self._reply(200, "<Response/>")
            return

        if not (self.headers.get("Cookie") or "").startswith(SESSION_TOKEN):
            self._reply(401, "<Error>Please login.</Error>")
            return

        with self.store.lock:
            if self.command == "GET":
                if key in self.store.entities:
                    self._reply(200, self.store.entities[key])
                else:
                    self._reply(404, f"<Error>{key} not found</Error>")
            elif self.command in ("PUT", "POST"):
                self.store.entities[key] = body
                self._reply(200, f"<Response>{body}</Response>")
            elif self.command == "DELETE":
                self.store.entities.pop(key, None)
                self._reply(200, "<Response/>")

    do_GET = _handle
    do_PUT = _handle
    do_POST = _handle
    do_DELETE = _handle


@pytest.fixture
def entity_store() -> EntityStore:
    return EntityStore()


@pytest.fixture
def caosdb_server(entity_store: EntityStore) -> Generator[str, None, None]:
    """
    Start the stand-in server and yield its base URL.

    Usage:
        def test_login(caosdb_server):
            token = CaosDBClient(caosdb_server).login("admin", "secret")
    """
    handler = type("BoundCaosDBHandler", (CaosDBHandler,), {"store": entity_store})
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}{PREFIX}"
    finally:
        server.shutdown()
        server.server_close()
        thread.join()
