"""
CaosDB Client.

Login, GET, PUT, POST and DELETE against a CaosDB server. Every call is
self-contained: it opens its own transport, performs one request and
releases the transport before returning. There is no session object; the
session token returned by login() is passed explicitly to every other call.

Usage:
    client = CaosDBClient("https://localhost:8887/playground/", cacert="ca.pem")
    cookie = client.login("admin", "secret")
    xml = client.get("Entity/101", cookie)
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from caoslib.client.capture import ResponseCapture
from caoslib.client.cookies import extract_session_token
from caoslib.client.transport import DEFAULT_TIMEOUT, open_transport
from caoslib.core.config import get_connection_defaults, get_settings
from caoslib.core.exceptions import CaosDBError, ConfigurationError
from caoslib.core.logging import get_logger, log_with_source
from caoslib.passwords import get_pass_pw

logger = get_logger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
LOGIN_PATH = "login"


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything needed to perform one request. Built fresh per call."""

    url: str
    method: str
    cacert: str = ""
    verbose: bool = False
    timeout: float | None = DEFAULT_TIMEOUT
    body: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)


class CaosDBClient:
    """
    Client for the CaosDB REST interface.

    Features:
    - Cookie-based session token obtained from login()
    - Custom PEM trust anchor, or the platform default store
    - Explicit per-request timeout
    - Optional curl-style tracing to stderr

    Failures raise CaosDBError subclasses tagged with an ErrorKind.
    HTTP status codes other than the login 401 are not errors: the
    response body is returned whatever the status.
    """

    def __init__(
        self,
        base_url: str,
        cacert: str = "",
        verbose: bool = False,
        timeout: float | None = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Server base URL, used as a plain string prefix.
                Example: "https://localhost:8887/playground/"
            cacert: Path to a PEM bundle used as the sole trust anchor.
                Empty means the platform default trust store.
            verbose: Trace every request to stderr.
            timeout: Per-request timeout in seconds, None to wait indefinitely.
            transport: Optional httpx transport, for test doubles.
        """
        self.base_url = base_url
        self.cacert = cacert
        self.verbose = verbose
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, transport: httpx.BaseTransport | None = None) -> "CaosDBClient":
        """Build a client from config/settings/connection.yaml."""
        try:
            connection = get_connection_defaults()
        except (RuntimeError, FileNotFoundError, ValueError) as e:
            raise ConfigurationError(
                f"Could not load connection settings: {e}"
            ) from e
        return cls(
            connection.base_url,
            cacert=connection.cacert,
            verbose=connection.verbose,
            timeout=connection.timeout,
            transport=transport,
        )

    def describe(
        self,
        method: str,
        path: str,
        cookie: str = "",
        body: str | None = None,
        content_type: str = FORM_CONTENT_TYPE,
    ) -> RequestDescriptor:
        """Build the request descriptor for a call against this server."""
        headers: dict[str, str] = {}
        if cookie:
            headers["Cookie"] = cookie
        if body is not None:
            headers["Content-Type"] = content_type
        return RequestDescriptor(
            url=self.base_url + path,
            method=method,
            cacert=self.cacert,
            verbose=self.verbose,
            timeout=self.timeout,
            body=body,
            headers=headers,
        )

    def perform(self, descriptor: RequestDescriptor, operation: str) -> ResponseCapture:
        """
        Perform a described request.

        Args:
            descriptor: The request to send.
            operation: Name used in logs and error messages (get, login, ...).

        Returns:
            ResponseCapture with status, raw header block and body.

        Raises:
            CaosDBError: On transport setup or execution failure.
        """
        log_with_source(
            logger,
            "client",
            "debug",
            "CaosDB request",
            operation=operation,
            method=descriptor.method,
            url=descriptor.url,
        )

        content = descriptor.body.encode("utf-8") if descriptor.body is not None else None
        try:
            with open_transport(
                descriptor.url,
                descriptor.cacert,
                timeout=descriptor.timeout,
                verbose=descriptor.verbose,
                transport=self._transport,
            ) as transport:
                capture = transport.perform(
                    descriptor.method,
                    headers=descriptor.headers,
                    content=content,
                    operation=operation,
                )
        except CaosDBError as e:
            log_with_source(
                logger,
                "client",
                "error",
                "CaosDB request failed",
                operation=operation,
                url=descriptor.url,
                kind=e.kind.value,
                error=e.message,
            )
            raise

        log_with_source(
            logger,
            "client",
            "debug",
            "CaosDB response",
            operation=operation,
            url=descriptor.url,
            status_code=capture.status_code,
            body_bytes=len(capture.body),
        )
        return capture

    def request(
        self,
        method: str,
        path: str,
        cookie: str = "",
        body: str | None = None,
        content_type: str = FORM_CONTENT_TYPE,
    ) -> ResponseCapture:
        """Send an arbitrary request and return the full capture."""
        descriptor = self.describe(method, path, cookie, body, content_type)
        return self.perform(descriptor, method.lower())

    def login(self, username: str, password: str) -> str:
        """
        Authenticate and return the session token.

        The credentials are sent form-encoded and are not URL-escaped.

        Raises:
            AuthenticationError: The server answered 401 without a cookie.
            MissingSessionTokenError: No Set-Cookie header for any other reason.
        """
        body = f"username={username}&password={password}"
        descriptor = self.describe("POST", LOGIN_PATH, body=body)
        capture = self.perform(descriptor, "login")
        try:
            token = extract_session_token(capture.header_text)
        except CaosDBError as e:
            log_with_source(
                logger,
                "client",
                "warning",
                "Login rejected",
                url=descriptor.url,
                status_code=capture.status_code,
                kind=e.kind.value,
            )
            raise
        log_with_source(logger, "client", "info", "Logged in", url=descriptor.url)
        return token

    def login_with_pass(self, username: str, identifier: str, program: str = "pass") -> str:
        """Log in with a password read from the pass password manager."""
        return self.login(username, get_pass_pw(identifier, program=program))

    def login_from_settings(self) -> str:
        """
        Log in with credentials from config/.env or CAOSDB_* variables.

        A plain password wins over a pass identifier.
        """
        settings = get_settings()
        if not settings.username:
            raise ConfigurationError("CAOSDB_USERNAME is not set")
        if settings.password:
            return self.login(settings.username, settings.password)
        if settings.password_identifier:
            return self.login_with_pass(settings.username, settings.password_identifier)
        raise ConfigurationError("Neither CAOSDB_PASSWORD nor CAOSDB_PASSWORD_IDENTIFIER is set")

    def get(self, path: str, cookie: str) -> str:
        """Retrieve entities, server information or query results."""
        return self.perform(self.describe("GET", path, cookie), "get").text

    def delete(self, path: str, cookie: str) -> str:
        """Delete entities."""
        return self.perform(self.describe("DELETE", path, cookie), "delete").text

    def put(self, path: str, cookie: str, body: str, content_type: str = FORM_CONTENT_TYPE) -> str:
        """Update entities. The body is an XML document, sent verbatim."""
        descriptor = self.describe("PUT", path, cookie, body, content_type)
        return self.perform(descriptor, "put").text

    def post(self, path: str, cookie: str, body: str, content_type: str = FORM_CONTENT_TYPE) -> str:
        """Insert entities. The body is an XML document, sent verbatim."""
        descriptor = self.describe("POST", path, cookie, body, content_type)
        return self.perform(descriptor, "post").text


# Call-per-request functions. Argument order follows the server-facing
# operations: relative path and cookie first, connection settings last.


def login(
    username: str,
    password: str,
    baseurl: str,
    cacert: str = "",
    verbose: bool = False,
    timeout: float | None = DEFAULT_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """Authenticate against baseurl and return the session token."""
    client = CaosDBClient(baseurl, cacert, verbose, timeout, transport)
    return client.login(username, password)


def get(
    url: str,
    cookie: str,
    baseurl: str,
    cacert: str = "",
    verbose: bool = False,
    timeout: float | None = DEFAULT_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """GET baseurl + url and return the response body."""
    return CaosDBClient(baseurl, cacert, verbose, timeout, transport).get(url, cookie)


def delete(
    url: str,
    cookie: str,
    baseurl: str,
    cacert: str = "",
    verbose: bool = False,
    timeout: float | None = DEFAULT_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """DELETE baseurl + url and return the response body."""
    return CaosDBClient(baseurl, cacert, verbose, timeout, transport).delete(url, cookie)


def put(
    url: str,
    cookie: str,
    body: str,
    baseurl: str,
    cacert: str = "",
    verbose: bool = False,
    timeout: float | None = DEFAULT_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """PUT body to baseurl + url and return the response body."""
    return CaosDBClient(baseurl, cacert, verbose, timeout, transport).put(url, cookie, body)


def post(
    url: str,
    cookie: str,
    body: str,
    baseurl: str,
    cacert: str = "",
    verbose: bool = False,
    timeout: float | None = DEFAULT_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """POST body to baseurl + url and return the response body."""
    return CaosDBClient(baseurl, cacert, verbose, timeout, transport).post(url, cookie, body)
