"""
Response Capture.

Growable buffers for the body and raw header block of one request.
"""

from dataclasses import dataclass, field


@dataclass
class ResponseCapture:
    """Body and header bytes accumulated while a single request runs.

    Chunks are appended in arrival order with no size limit. The header
    buffer holds the raw header block: status line, one "Name: value" line
    per header, and the terminating blank line, all CRLF-terminated.
    """

    body: bytearray = field(default_factory=bytearray)
    headers: bytearray = field(default_factory=bytearray)
    status_code: int | None = None

    def write_body(self, chunk: bytes) -> int:
        self.body.extend(chunk)
        return len(chunk)

    def write_header(self, chunk: bytes) -> int:
        self.headers.extend(chunk)
        return len(chunk)

    @property
    def text(self) -> str:
        """Body decoded as UTF-8, undecodable bytes replaced."""
        return self.body.decode("utf-8", errors="replace")

    @property
    def header_text(self) -> str:
        return self.headers.decode("latin-1")
