"""
Custom Exceptions.

Typed error hierarchy for every failure the client can report.
Each exception carries an ErrorKind tag so callers can branch on the kind
instead of inspecting message text. The legacy "Error: ..." string form is
produced only by render(), for the foreign-call bindings.
"""

from enum import Enum

ERROR_MARKER = "Error: "


class ErrorKind(str, Enum):
    """Failure categories reported by the client."""

    TRANSPORT_INIT = "transport_init"
    TRANSPORT_CONFIG = "transport_config"
    REQUEST_EXECUTION = "request_execution"
    AUTHENTICATION = "authentication"
    MISSING_SESSION_TOKEN = "missing_session_token"
    SECRET_LOOKUP = "secret_lookup"
    CONFIGURATION = "configuration"


class CaosDBError(Exception):
    """Base exception for all client errors."""

    kind: ErrorKind = ErrorKind.REQUEST_EXECUTION

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)

    def render(self) -> str:
        """Render the error as a marker-prefixed string."""
        return f"{ERROR_MARKER}{self.message}"


class TransportInitializationError(CaosDBError):
    """Raised when the HTTP engine or process-wide TLS state cannot be created."""

    kind = ErrorKind.TRANSPORT_INIT
    legacy_code = 1

    def __init__(self, message: str = "Error during transport initialization (init).") -> None:
        super().__init__(message, code="TRANSPORT_INIT_FAILED")


class TransportConfigurationError(CaosDBError):
    """Raised when a transport option (URL, trust anchor, timeout) cannot be applied."""

    kind = ErrorKind.TRANSPORT_CONFIG
    legacy_code = 2

    def __init__(self, message: str = "Error setting transport options (init).", detail: str = "") -> None:
        self.detail = detail
        if detail:
            message = f"{message} [{detail}]"
        super().__init__(message, code="TRANSPORT_CONFIG_FAILED")


class RequestExecutionError(CaosDBError):
    """Raised when the request fails at the network, TLS or protocol level."""

    kind = ErrorKind.REQUEST_EXECUTION

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(
            f"Error in transport perform ({operation}). [{detail}]",
            code="REQUEST_FAILED",
        )


class AuthenticationError(CaosDBError):
    """Raised when the server rejects the credentials with 401."""

    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str = "Authentication failed.") -> None:
        super().__init__(message, code="AUTH_UNAUTHORIZED")


class MissingSessionTokenError(CaosDBError):
    """Raised when the login response carries no session cookie."""

    kind = ErrorKind.MISSING_SESSION_TOKEN

    def __init__(self, message: str = "The server returned no cookie.") -> None:
        super().__init__(message, code="AUTH_NO_COOKIE")


class SecretLookupError(CaosDBError):
    """Raised when the password manager cannot produce a secret."""

    kind = ErrorKind.SECRET_LOOKUP

    def __init__(self, message: str = "Secret lookup failed.") -> None:
        super().__init__(message, code="SECRET_LOOKUP_FAILED")


class ConfigurationError(CaosDBError):
    """Raised when client configuration cannot be resolved."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, message: str = "Invalid client configuration.") -> None:
        super().__init__(message, code="SYS_CONFIG_ERROR")
