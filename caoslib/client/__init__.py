"""
CaosDB HTTP client.

Architecture:
- transport: one httpx client per request, process-wide TLS contexts
- capture: body and raw header buffers for one request
- cookies: session token extraction from the raw header block
- client: login and the GET/PUT/POST/DELETE operations
"""

from caoslib.client.client import (
    CaosDBClient,
    RequestDescriptor,
    delete,
    get,
    login,
    post,
    put,
)

__all__ = ["CaosDBClient", "RequestDescriptor", "delete", "get", "login", "post", "put"]
