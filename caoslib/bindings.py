"""
Foreign-call Bindings.

Flat entry points for non-Python callers (ctypes, cffi, embedding hosts).
Every function takes only str and bool parameters and returns a new str.
Failures are rendered as strings starting with "Error: " instead of being
raised.

Ownership: the returned str is a fresh object owned by the caller. A host
that copies it into its own memory (for example through ctypes
c_char_p) is responsible for releasing that copy.

EXPORTS maps the historical C symbol names to these callables; "del" is
exported as delete() because it is a Python keyword.
"""

from collections.abc import Callable

from caoslib.client import client
from caoslib.core.exceptions import CaosDBError
from caoslib.core.logging import get_logger, log_with_source
from caoslib.passwords import get_pass_pw

logger = get_logger(__name__)


def _render(operation: str, call: Callable[[], str]) -> str:
    try:
        return call()
    except CaosDBError as e:
        log_with_source(logger, "bindings", "debug", "Rendering error", operation=operation, code=e.code)
        return e.render()


def login(username: str, password: str, baseurl: str, cacert: str, verbose: bool) -> str:
    return _render("login", lambda: client.login(username, password, baseurl, cacert, verbose))


def get(url: str, cookiestr: str, baseurl: str, cacert: str, verbose: bool) -> str:
    return _render("get", lambda: client.get(url, cookiestr, baseurl, cacert, verbose))


def delete(url: str, cookiestr: str, baseurl: str, cacert: str, verbose: bool) -> str:
    return _render("delete", lambda: client.delete(url, cookiestr, baseurl, cacert, verbose))


def put(url: str, cookiestr: str, body: str, baseurl: str, cacert: str, verbose: bool) -> str:
    return _render("put", lambda: client.put(url, cookiestr, body, baseurl, cacert, verbose))


def post(url: str, cookiestr: str, body: str, baseurl: str, cacert: str, verbose: bool) -> str:
    return _render("post", lambda: client.post(url, cookiestr, body, baseurl, cacert, verbose))


def pass_pw(pw_identifier: str) -> str:
    return _render("pass_pw", lambda: get_pass_pw(pw_identifier))


EXPORTS: dict[str, Callable[..., str]] = {
    "login": login,
    "get": get,
    "del": delete,
    "put": put,
    "post": post,
    "pass_pw": pass_pw,
}
