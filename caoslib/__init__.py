"""
CaosDB client binding.

- client/: Transport, response capture, cookie extraction, verb operations
- core/: Configuration, logging, exceptions
- passwords: Password lookup through the pass password manager
- bindings: Flat str-in/str-out entry points for foreign callers
"""

from caoslib.client import CaosDBClient, delete, get, login, post, put
from caoslib.core.exceptions import (
    ERROR_MARKER,
    AuthenticationError,
    CaosDBError,
    ConfigurationError,
    ErrorKind,
    MissingSessionTokenError,
    RequestExecutionError,
    SecretLookupError,
    TransportConfigurationError,
    TransportInitializationError,
)
from caoslib.passwords import get_pass_pw

__version__ = "0.1.0"

__all__ = [
    "ERROR_MARKER",
    "AuthenticationError",
    "CaosDBClient",
    "CaosDBError",
    "ConfigurationError",
    "ErrorKind",
    "MissingSessionTokenError",
    "RequestExecutionError",
    "SecretLookupError",
    "TransportConfigurationError",
    "TransportInitializationError",
    "delete",
    "get",
    "get_pass_pw",
    "login",
    "post",
    "put",
]
