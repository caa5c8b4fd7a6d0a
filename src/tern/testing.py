"""Async test client for tern applications.

Sends requests through the ASGI interface directly — no HTTP involved.

Usage::

    async with TestClient(app) as client:
        response = await client.call("/api/Orders/place", "sku-1", 2, verb="POST")
        assert response.status == 200
        assert response.json == {"data": {"sku": "sku-1", "quantity": 2}}
"""

from __future__ import annotations

import json as json_module
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

from tern.app import App
from tern.http.request import Request


@dataclass(frozen=True, slots=True)
class TestResponse:
    """A captured response."""

    __test__ = False  # Tell pytest this is not a test class

    status: int
    headers: dict[str, str]
    body: bytes

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    @property
    def json(self) -> Any:
        return json_module.loads(self.body)

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")


class TestClient:
    """Async test client for tern applications.

    Entering the client freezes the app, so configuration errors surface
    before the first request.
    """

    __test__ = False  # Tell pytest this is not a test class

    __slots__ = ("app",)

    def __init__(self, app: App) -> None:
        self.app = app

    async def __aenter__(self) -> TestClient:
        self.app._ensure_frozen()
        return self

    async def __aexit__(self, *args: object) -> None:
        return None

    async def get(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        query: dict[str, str] | None = None,
    ) -> TestResponse:
        """Send a GET request."""
        if query:
            path = f"{path}?{urlencode(query)}"
        return await self.request("GET", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> TestResponse:
        """Send a POST request, JSON-encoding *json* when given."""
        extra_headers: dict[str, str] = {}
        request_body = body or b""
        if json is not None:
            request_body = json_module.dumps(json).encode("utf-8")
            extra_headers["content-type"] = "application/json"
        merged = {**extra_headers, **(headers or {})}
        return await self.request("POST", path, headers=merged, body=request_body)

    async def call(
        self,
        path: str,
        *args: Any,
        verb: str = "GET",
        headers: dict[str, str] | None = None,
    ) -> TestResponse:
        """Invoke an endpoint with positional *args*, the way a client stub does.

        ``GET``/``HEAD``/``DELETE`` carry ``args`` in the query string;
        other verbs carry it in a JSON body.
        """
        encoded = json_module.dumps(list(args))
        verb = verb.upper()
        if verb in ("GET", "HEAD", "DELETE"):
            return await self.request(
                verb, f"{path}?{urlencode({'args': encoded})}", headers=headers
            )
        merged = {"content-type": "application/json", **(headers or {})}
        body = json_module.dumps({"args": list(args)}).encode("utf-8")
        return await self.request(verb, path, headers=merged, body=body)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> TestResponse:
        """Send an arbitrary request through the ASGI app."""
        path_part, _, query_string = path.partition("?")

        raw_headers: list[tuple[bytes, bytes]] = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ]

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": path_part,
            "raw_path": path_part.encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
        }

        request_body = body or b""
        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": request_body, "more_body": False}
            return {"type": "http.disconnect"}

        status = 200
        response_headers: dict[str, str] = {}
        body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
                for name_b, value_b in message.get("headers", []):
                    response_headers[name_b.decode("latin-1")] = value_b.decode("latin-1")
            elif message["type"] == "http.response.body":
                body_parts.append(message.get("body", b""))

        await self.app(scope, receive, send)

        return TestResponse(status=status, headers=response_headers, body=b"".join(body_parts))


def make_request(
    method: str = "GET",
    path: str = "/",
    *,
    query: bytes = b"",
    body: bytes = b"",
    headers: dict[str, str] | None = None,
    default_locale: str = "en",
) -> Request:
    """Build a ``Request`` backed by an in-memory body, for calling a
    dispatch wrapper directly without going through an app.
    """
    body_sent = False

    async def receive() -> dict[str, Any]:
        nonlocal body_sent
        if not body_sent:
            body_sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return {"type": "http.disconnect"}

    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": query,
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ],
        "client": ("127.0.0.1", 0),
    }
    return Request.from_asgi(scope, receive, default_locale=default_locale)
