"""Mutable HTTP response, written by the context during dispatch.

A dispatch wrapper receives a request/response pair. The response starts
empty and the ``HTTPContext`` fills it once; the request handler then
translates it into ASGI messages.
"""

import json as json_module
from typing import Any

JSON_CONTENT_TYPE = "application/json"


class Response:
    """An HTTP response under construction.

    ``written`` stays ``False`` until a body is set, so the request handler
    can tell a handler that produced nothing from one that produced an
    empty body.
    """

    __slots__ = ("body", "content_type", "headers", "status", "written")

    def __init__(self) -> None:
        self.status: int = 200
        self.content_type: str = "text/plain; charset=utf-8"
        self.headers: list[tuple[str, str]] = []
        self.body: bytes = b""
        self.written: bool = False

    def __repr__(self) -> str:
        return f"<Response {self.status} {self.content_type} {len(self.body)} bytes>"

    def set_header(self, name: str, value: str) -> None:
        """Append a response header."""
        self.headers.append((name, value))

    def send(
        self,
        body: str | bytes,
        *,
        status: int | None = None,
        content_type: str | None = None,
    ) -> None:
        """Set the body (and optionally status and content type)."""
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        if status is not None:
            self.status = status
        if content_type is not None:
            self.content_type = content_type
        self.written = True

    def json(self, payload: Any, *, status: int | None = None) -> None:
        """Serialize *payload* as the JSON body."""
        self.send(
            json_module.dumps(payload, default=str),
            status=status,
            content_type=JSON_CONTENT_TYPE,
        )

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")
