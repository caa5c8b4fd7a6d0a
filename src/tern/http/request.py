"""Immutable HTTP request.

Frozen metadata with async, cached body access. Endpoint arguments are
read through ``Request.args()``, which knows every place a caller may put
them.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs

from tern._internal.asgi import Receive
from tern.errors import InvalidArguments
from tern.validation.messages import negotiate_locale

ARGS_FIELD = "args"


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive view over raw ASGI header pairs."""

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        self._raw = raw

    def __getitem__(self, key: str) -> str:
        key_lower = key.lower().encode("latin-1")
        for name, value in self._raw:
            if name.lower() == key_lower:
                return value.decode("latin-1")
        raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._raw:
            key = name.decode("latin-1").lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        return self._raw


class QueryParams(Mapping[str, str]):
    """Immutable URL-encoded parameters (query string or form body).

    ``__getitem__`` returns the first value for a key.
    """

    __slots__ = ("_data", "_raw")

    def __init__(self, raw: bytes = b"") -> None:
        self._raw = raw
        self._data: dict[str, list[str]] = parse_qs(
            raw.decode("latin-1"), keep_blank_values=True
        )

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"QueryParams({{{items}}})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``locale`` is negotiated once at creation from ``Accept-Language``
    against the available message catalogs.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    locale: str
    client: tuple[str, int] | None

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: body cache (the dict is mutable, the field reference is not)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        value = self.headers.get("content-type")
        if value is None:
            return None
        return value.split(";", 1)[0].strip().lower()

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body. Cached after the first call."""
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(await self.body())

    async def form(self) -> QueryParams:
        """Parse a URL-encoded body."""
        return QueryParams(await self.body())

    async def args(self) -> list[Any]:
        """Return the positional endpoint arguments carried by this request.

        Looked up in order: the ``args`` query parameter, then the body:
        a JSON object's ``args`` field (array or JSON text) or a URL-encoded
        ``args`` field. Missing everywhere (or JSON ``null``) means no
        arguments; any other value, even an empty one, must be an array.

        Raises:
            InvalidArguments: The value is not valid JSON or not an array.
        """
        raw: Any = self.query.get(ARGS_FIELD)
        if raw is None:
            raw = await self._body_args()
        if raw is None:
            return []
        if isinstance(raw, str):
            try:
                raw = json_module.loads(raw)
            except json_module.JSONDecodeError as exc:
                msg = f"'{ARGS_FIELD}' is not valid JSON: {exc}"
                raise InvalidArguments(msg) from exc
        if not isinstance(raw, list):
            msg = f"'{ARGS_FIELD}' must be a JSON array, got {type(raw).__name__}"
            raise InvalidArguments(msg)
        return raw

    async def _body_args(self) -> Any:
        if self.method in ("GET", "HEAD"):
            return None
        raw = await self.body()
        if not raw:
            return None
        if self.content_type == "application/x-www-form-urlencoded":
            return QueryParams(raw).get(ARGS_FIELD)
        try:
            payload = json_module.loads(raw)
        except json_module.JSONDecodeError as exc:
            msg = f"Request body is not valid JSON: {exc}"
            raise InvalidArguments(msg) from exc
        if isinstance(payload, dict):
            return payload.get(ARGS_FIELD)
        msg = "Request body must be a JSON object with an 'args' field"
        raise InvalidArguments(msg)

    # -- Factory --

    @classmethod
    def from_asgi(
        cls,
        scope: Mapping[str, Any],
        receive: Receive,
        *,
        default_locale: str = "en",
    ) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers = Headers(tuple(scope.get("headers", ())))
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=headers,
            query=QueryParams(scope.get("query_string", b"")),
            locale=negotiate_locale(headers.get("accept-language"), default=default_locale),
            client=tuple(client) if client else None,
            _receive=receive,
        )
