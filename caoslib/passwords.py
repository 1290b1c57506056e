"""
Password lookup through the pass command-line password manager.

The identifier is passed as a single argument, never through a shell.
"""

import subprocess

from caoslib.core.exceptions import SecretLookupError
from caoslib.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

PASS_PROGRAM = "pass"
MAX_SECRET_BYTES = 2000


def get_pass_pw(
    identifier: str,
    program: str = PASS_PROGRAM,
    max_bytes: int = MAX_SECRET_BYTES,
) -> str:
    """
    Read a password from the password manager.

    Only the first line of the program's output is used, truncated to
    max_bytes - 1 characters, without its line terminator. Output that is
    not valid in the locale encoding is decoded with replacement characters.

    Args:
        identifier: Entry name passed to the program, e.g. "caosdb/admin".
        program: Executable to run.
        max_bytes: Read buffer size.

    Returns:
        The password in plain text.

    Raises:
        SecretLookupError: The program cannot be started (including an
            identifier with a NUL byte), exits non-zero, or prints nothing.
    """
    log_with_source(logger, "secrets", "debug", "Secret lookup", program=program, identifier=identifier)
    try:
        result = subprocess.run(
            [program, identifier],
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )
    except (OSError, ValueError) as e:
        raise SecretLookupError(f"Could not start {program!r}: {e}") from e

    if result.returncode != 0:
        detail = result.stderr.strip() or f"exit status {result.returncode}"
        raise SecretLookupError(f"{program} {identifier} failed: {detail}")

    lines = result.stdout.splitlines()
    if not lines:
        raise SecretLookupError(f"{program} {identifier} returned no output")
    return lines[0][: max_bytes - 1]
