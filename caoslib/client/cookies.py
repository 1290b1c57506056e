"""
Session cookie extraction from a raw response header block.

The scan is literal: case-sensitive, first occurrence only, no header
folding. Callers replay the extracted value verbatim in a Cookie header.
"""

from caoslib.core.exceptions import AuthenticationError, MissingSessionTokenError

SET_COOKIE_MARKER = "Set-Cookie: "
UNAUTHORIZED_MARKER = "401 Unauthorized"


def extract_session_token(header_block: str) -> str:
    """Return the session token carried by the first Set-Cookie header.

    The token runs from just after the marker to the next newline, with the
    final character of that span dropped (the carriage return of a CRLF
    line ending). Without a following newline the rest of the block is
    taken as is.

    Raises:
        AuthenticationError: No Set-Cookie and the block reports 401 Unauthorized.
        MissingSessionTokenError: No Set-Cookie for any other reason.
    """
    start = header_block.find(SET_COOKIE_MARKER)
    if start == -1:
        if UNAUTHORIZED_MARKER in header_block:
            raise AuthenticationError()
        raise MissingSessionTokenError()

    start += len(SET_COOKIE_MARKER)
    end = header_block.find("\n", start)
    if end == -1:
        return header_block[start:]
    # An empty span ("Set-Cookie: \n") yields "", not the rest of the block.
    return header_block[start:end - 1]
