"""Per-request endpoint context.

Every endpoint method receives an ``HTTPContext`` as its final argument.
It is built by the dispatch wrapper from the transport request/response
pair and is the only thing endpoint code writes output through.

The context of the running dispatch is also published through
``context_var`` so helpers deep in a call stack can reach it without
threading it through every signature::

    from tern.context import get_context

    get_context().data({"ok": True})

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    threads. No locks needed.
"""

from collections.abc import Iterable
from contextvars import ContextVar
from typing import Any

from tern.http.request import Request
from tern.http.response import Response
from tern.validation.result import FieldError

context_var: ContextVar["HTTPContext"] = ContextVar("tern_context")
"""The context of the endpoint call in progress."""


def get_context() -> "HTTPContext":
    """Return the current endpoint context.

    Raises ``LookupError`` if called outside an endpoint call.
    """
    return context_var.get()


class HTTPContext:
    """Reads endpoint input from the request and writes output to the response.

    Three outcomes, each with its own wire shape:

    - ``data(payload)`` → ``200 {"data": payload}``
    - ``fields_error(errors)`` → ``422 {"fieldsError": [{dataPath, message}]}``
    - ``error(message, status)`` → ``{"error": message}``
    """

    __slots__ = ("request", "response")

    def __init__(self, request: Request, response: Response) -> None:
        self.request = request
        self.response = response

    def __repr__(self) -> str:
        return f"<HTTPContext {self.request.method} {self.request.path}>"

    @property
    def locale(self) -> str:
        """Locale negotiated for this request's messages."""
        return self.request.locale

    def data(self, payload: Any = None) -> None:
        """Report success with *payload*."""
        self.response.json({"data": payload}, status=200)

    def fields_error(self, errors: Iterable[FieldError]) -> None:
        """Report per-field validation problems, in the order given."""
        self.response.json(
            {"fieldsError": [error.to_dict() for error in errors]},
            status=422,
        )

    def error(self, message: str, status: int = 400) -> None:
        """Report an unstructured failure."""
        self.response.json({"error": message}, status=status)
