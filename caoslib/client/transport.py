"""
HTTP Transport.

Builds one httpx client per request, bound to a target URL and a trust
anchor, and captures the response into a ResponseCapture.

Process-wide TLS state:
    SSL contexts are created once per trust anchor and cached in a module
    registry guarded by a lock. initialize() is idempotent and registers
    shutdown() with atexit. An empty trust anchor means the platform default
    trust store.

Usage:
    with open_transport("https://host/Entity/101", cacert="") as transport:
        capture = transport.perform("GET", headers={"Cookie": token})
"""

import atexit
import ssl
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, TextIO

import httpx

from caoslib.client.capture import ResponseCapture
from caoslib.core.exceptions import (
    RequestExecutionError,
    TransportConfigurationError,
    TransportInitializationError,
)
from caoslib.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30.0

_lock = threading.Lock()
_ssl_contexts: dict[str, ssl.SSLContext] = {}
_initialized = False
_atexit_registered = False


def initialize() -> None:
    """Create the default TLS context once per process."""
    global _initialized, _atexit_registered
    with _lock:
        if _initialized:
            return
        try:
            _ssl_contexts[""] = ssl.create_default_context()
        except OSError as e:
            raise TransportInitializationError() from e
        _initialized = True
        if not _atexit_registered:
            atexit.register(shutdown)
            _atexit_registered = True
    log_with_source(logger, "transport", "debug", "Transport state initialized")


def shutdown() -> None:
    """Drop all cached TLS contexts. Safe to call more than once."""
    global _initialized
    with _lock:
        _ssl_contexts.clear()
        _initialized = False


def is_initialized() -> bool:
    return _initialized


def ssl_context_for(cacert: str) -> ssl.SSLContext:
    """
    Get the TLS context that trusts only the given PEM bundle.

    Args:
        cacert: Path to a PEM certificate bundle, or "" for the default store.

    Raises:
        TransportInitializationError: Default TLS state cannot be created.
        TransportConfigurationError: The bundle is missing or not valid PEM.
    """
    initialize()
    with _lock:
        context = _ssl_contexts.get(cacert)
        if context is None:
            try:
                context = ssl.create_default_context(cafile=cacert)
            except OSError as e:
                raise TransportConfigurationError(detail=f"cacert {cacert!r}: {e}") from e
            _ssl_contexts[cacert] = context
            created = True
        else:
            created = False
    if created:
        log_with_source(logger, "transport", "debug", "TLS context created", cacert=cacert)
    return context


class VerboseTracer:
    """Writes curl-style diagnostic lines for one request to a stream.

    "* " lines are low-level connection events, "> " lines the outgoing
    request, "< " lines the incoming response head.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stderr

    def _write(self, prefix: str, text: str) -> None:
        self.stream.write(f"{prefix} {text}\n")
        self.stream.flush()

    def trace(self, event_name: str, info: Mapping[str, Any]) -> None:
        self._write("*", event_name)

    def on_request(self, request: httpx.Request) -> None:
        target = request.url.raw_path.decode("ascii", errors="replace")
        self._write(">", f"{request.method} {target} HTTP/1.1")
        for name, value in request.headers.raw:
            self._write(">", f"{name.decode('latin-1')}: {value.decode('latin-1')}")

    def on_response(self, response: httpx.Response) -> None:
        self._write("<", f"{response.http_version} {response.status_code} {response.reason_phrase}")
        for name, value in response.headers.raw:
            self._write("<", f"{name.decode('latin-1')}: {value.decode('latin-1')}")


def _format_header_block(response: httpx.Response) -> bytes:
    status_line = f"{response.http_version} {response.status_code} {response.reason_phrase}"
    lines = [status_line.encode("latin-1", errors="replace")]
    lines.extend(name + b": " + value for name, value in response.headers.raw)
    return b"\r\n".join(lines) + b"\r\n\r\n"


class Transport:
    """A configured httpx client bound to one target URL."""

    def __init__(
        self,
        client: httpx.Client,
        url: httpx.URL,
        tracer: VerboseTracer | None = None,
    ) -> None:
        self.client = client
        self.url = url
        self.tracer = tracer
        self.capture = ResponseCapture()

    def perform(
        self,
        method: str,
        *,
        headers: Mapping[str, str] | None = None,
        content: bytes | None = None,
        operation: str = "request",
    ) -> ResponseCapture:
        """
        Execute the request synchronously and fill the capture buffers.

        Header values are sent as latin-1 bytes, the same encoding the
        captured header block is decoded with, so a token taken from
        Set-Cookie is replayed byte for byte.

        Raises:
            TransportConfigurationError: A header value is not latin-1.
            RequestExecutionError: Connect, TLS, timeout or protocol failure.
        """
        raw_headers = _encode_headers(headers or {})
        extensions = {"trace": self.tracer.trace} if self.tracer else {}
        try:
            with self.client.stream(
                method,
                self.url,
                headers=raw_headers,
                content=content,
                extensions=extensions,
            ) as response:
                self.capture.status_code = response.status_code
                self.capture.write_header(_format_header_block(response))
                for chunk in response.iter_bytes():
                    self.capture.write_body(chunk)
        except httpx.HTTPError as e:
            raise RequestExecutionError(operation, str(e) or type(e).__name__) from e
        return self.capture


def _encode_headers(headers: Mapping[str, str]) -> list[tuple[bytes, bytes]]:
    try:
        return [(name.encode("ascii"), value.encode("latin-1")) for name, value in headers.items()]
    except UnicodeEncodeError as e:
        raise TransportConfigurationError(detail=f"header not encodable: {e}") from e


def _parse_target(url: str) -> httpx.URL:
    try:
        target = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise TransportConfigurationError(detail=f"url {url!r}: {e}") from e
    if target.scheme not in ("http", "https") or not target.host:
        raise TransportConfigurationError(detail=f"url {url!r} is not an absolute http(s) URL")
    return target


def _build_timeout(timeout: float | None) -> httpx.Timeout:
    if timeout is not None and timeout <= 0:
        raise TransportConfigurationError(detail=f"timeout must be positive, got {timeout}")
    return httpx.Timeout(timeout)


@contextmanager
def open_transport(
    url: str,
    cacert: str = "",
    *,
    timeout: float | None = DEFAULT_TIMEOUT,
    verbose: bool = False,
    transport: httpx.BaseTransport | None = None,
    trace_stream: TextIO | None = None,
) -> Iterator[Transport]:
    """
    Open a transport for a single request and release it on exit.

    Args:
        url: Absolute target URL.
        cacert: PEM trust anchor path, "" for the platform default store.
        timeout: Per-request timeout in seconds, None to wait indefinitely.
        verbose: Trace the request to trace_stream (stderr by default).
        transport: Optional httpx transport, used by tests to stub the server.
        trace_stream: Destination for verbose tracing.

    Raises:
        TransportInitializationError: The HTTP engine cannot be created.
        TransportConfigurationError: URL, trust anchor or timeout is invalid.
    """
    target = _parse_target(url)
    verify = ssl_context_for(cacert)
    timeout_config = _build_timeout(timeout)

    tracer = VerboseTracer(trace_stream) if verbose else None
    event_hooks: dict[str, list] = {}
    if tracer is not None:
        event_hooks = {"request": [tracer.on_request], "response": [tracer.on_response]}

    try:
        client = httpx.Client(
            verify=verify,
            timeout=timeout_config,
            follow_redirects=False,
            event_hooks=event_hooks,
            transport=transport,
        )
    except (OSError, RuntimeError, ValueError) as e:
        raise TransportInitializationError() from e

    with client:
        yield Transport(client, target, tracer)
