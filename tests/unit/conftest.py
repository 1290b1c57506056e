"""
Unit Test Fixtures.

Fixtures for unit tests - the CaosDB server is replaced by an in-memory
stub served through httpx.MockTransport. No sockets are opened.
"""

from unittest.mock import MagicMock

import httpx
import pytest


# =============================================================================
# Server Stub Fixtures
# =============================================================================


class FakeCaosDB:
    """
    In-memory stand-in for a CaosDB server.

    Accepts one user, hands out a fixed session token and stores entity
    bodies by path. Every request is recorded for inspection.
    """

    def __init__(
        self,
        username: str = "admin",
        password: str = "secret",
        token: str = "sid=42",
        prefix: str = "/",
    ) -> None:
        self.username = username
        self.password = password
        self.token = token
        self.prefix = prefix
        self.entities: dict[str, str] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = request.url.path[len(self.prefix):]
        body = request.content.decode("utf-8")

        if key == "login" and request.method == "POST":
            if body == f"username={self.username}&password={self.password}":
                return httpx.Response(
                    200,
                    headers=[("Set-Cookie", self.token)],
                    text="<Response/>",
                )
            return httpx.Response(401, text="<Error>Authentication failed</Error>")

        if request.headers.get("Cookie") != self.token:
            return httpx.Response(401, text="<Error>Please login.</Error>")

        if request.method == "GET":
            if key not in self.entities:
                return httpx.Response(404, text=f"<Error>{key} not found</Error>")
            return httpx.Response(200, text=self.entities[key])
        if request.method in ("PUT", "POST"):
            self.entities[key] = body
            return httpx.Response(200, text=f"<Response>{body}</Response>")
        if request.method == "DELETE":
            removed = self.entities.pop(key, "")
            return httpx.Response(200, text=f"<Deleted>{removed}</Deleted>")
        return httpx.Response(405)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def fake_server() -> FakeCaosDB:
    """Provide a fresh in-memory CaosDB stub."""
    return FakeCaosDB()


@pytest.fixture
def mock_transport(fake_server: FakeCaosDB) -> httpx.MockTransport:
    """
    httpx transport routing every request to the fake server.

    Usage:
        def test_get(mock_transport, base_url):
            client = CaosDBClient(base_url, transport=mock_transport)
    """
    return httpx.MockTransport(fake_server.handler)


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.logger", mock_logger):
                # Test code that logs
                mock_logger.info.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    return logger
