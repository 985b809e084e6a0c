"""HTTP/1.x wire framing of an ASGI request head.

The request size reported by the middleware is the head produced here plus
the raw body bytes:

    <METHOD> SP <raw_path>[?<query_string>] SP HTTP/<version> CRLF
    (<name> ": " <value> CRLF)*
    CRLF

Headers are written exactly as the server handed them over in
``scope["headers"]``. The body is appended without transfer framing.
"""

from __future__ import annotations

from typing import Any, Protocol

CRLF = b"\r\n"


class Writer(Protocol):
    def write(self, data: bytes) -> int: ...


def request_target(scope: dict[str, Any]) -> bytes:
    """Return the request-target (path plus optional query) as sent on the wire."""
    raw_path = scope.get("raw_path")
    if not raw_path:
        raw_path = scope.get("path", "/").encode("utf-8")
    query_string = scope.get("query_string") or b""
    if query_string:
        return raw_path + b"?" + query_string
    return raw_path


def write_request_head(scope: dict[str, Any], out: Writer) -> None:
    """Serialize the start line and headers of *scope* into *out*."""
    method = scope["method"].encode("ascii")
    version = scope.get("http_version", "1.1").encode("ascii")
    out.write(method + b" " + request_target(scope) + b" HTTP/" + version + CRLF)
    for name, value in scope.get("headers", ()):
        out.write(bytes(name) + b": " + bytes(value) + CRLF)
    out.write(CRLF)
