"""Unit tests for response capture buffers."""

from caoslib.client.capture import ResponseCapture


class TestResponseCapture:
    """Tests for ResponseCapture."""

    def test_starts_empty(self) -> None:
        """Test a new capture holds no data."""
        capture = ResponseCapture()
        assert capture.body == b""
        assert capture.headers == b""
        assert capture.status_code is None

    def test_appends_chunks_in_arrival_order(self) -> None:
        """Test body chunks are concatenated in order."""
        capture = ResponseCapture()
        capture.write_body(b"<Response>")
        capture.write_body(b"<Entity id='101'/>")
        capture.write_body(b"</Response>")
        assert capture.text == "<Response><Entity id='101'/></Response>"

    def test_write_returns_consumed_length(self) -> None:
        """Test writers report the full chunk as consumed."""
        capture = ResponseCapture()
        assert capture.write_body(b"abcd") == 4
        assert capture.write_header(b"HTTP/1.1 200 OK\r\n") == 17

    def test_body_and_headers_are_separate(self) -> None:
        """Test header bytes never leak into the body."""
        capture = ResponseCapture()
        capture.write_header(b"Set-Cookie: a=b\r\n")
        capture.write_body(b"payload")
        assert capture.header_text == "Set-Cookie: a=b\r\n"
        assert capture.text == "payload"

    def test_text_replaces_invalid_utf8(self) -> None:
        """Test undecodable body bytes do not raise."""
        capture = ResponseCapture()
        capture.write_body(b"ok\xff")
        assert capture.text == "ok�"

    def test_instances_do_not_share_buffers(self) -> None:
        """Test each capture gets its own buffers."""
        first = ResponseCapture()
        second = ResponseCapture()
        first.write_body(b"x")
        assert second.body == b""
