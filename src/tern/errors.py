"""Tern exception hierarchy.

Shared across the registration layer, the dispatch wrappers and the ASGI
app so every module raises and catches the same types.
"""

from dataclasses import dataclass


class TernError(Exception):
    """Base for all tern-specific errors."""


class ConfigurationError(TernError):
    """Raised when an endpoint declaration or app setup is invalid.

    Registration runs at class-definition time, so these surface while the
    declaring module is imported, never while serving a request.
    """


class DispatchError(TernError):
    """A request broke the calling contract of an endpoint.

    Raised out of a dispatch wrapper before the endpoint method runs.
    Distinct from validation failures, which are reported as data.
    """


class ArgumentCountError(DispatchError):
    """The request supplied the wrong number of positional arguments."""

    def __init__(self, path: str, expected: int, actual: int) -> None:
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Wrong parameter count for {path}: expected {expected}, got {actual}"
        )


class InvalidArguments(DispatchError):
    """The ``args`` payload was not a JSON array."""


@dataclass(frozen=True, slots=True)
class HTTPError(TernError):
    """An error that maps directly to an HTTP status code.

    Raised by the endpoint table and caught by the request handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no endpoint is registered at the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — an endpoint exists at this path but not for this verb.

    Carries an ``Allow`` header listing the registered verbs.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
