"""Compiled endpoint table.

Endpoint paths are fully static (``/api/<Class>/<method>``), so matching is
a dict lookup on the path followed by a verb check. Bindings are added
during setup and the table is compiled when the app freezes.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from tern.controller import EndpointInfo
from tern.errors import ConfigurationError, MethodNotAllowed, NotFound
from tern.http.request import Request
from tern.http.response import Response


@dataclass(frozen=True, slots=True)
class Binding:
    """An endpoint bound to the controller instance it runs against."""

    controller: Any
    endpoint: EndpointInfo

    @property
    def path(self) -> str:
        return self.endpoint.path

    @property
    def verb(self) -> str:
        return self.endpoint.verb

    @property
    def handler(self) -> Callable[[Request, Response], Awaitable[None]]:
        return self.endpoint.bind(self.controller)


class EndpointTable:
    """Path → verb → binding lookup.

    Usage::

        table = EndpointTable()
        table.add(Binding(controller, endpoint))
        table.compile()
        binding = table.match("GET", "/api/Orders/list")
    """

    __slots__ = ("_by_path", "_compiled")

    def __init__(self) -> None:
        self._by_path: dict[str, dict[str, Binding]] = {}
        self._compiled = False

    def add(self, binding: Binding) -> None:
        """Add a binding. Must be called before compile().

        Raises ``ConfigurationError`` if the path/verb pair is taken.
        """
        if self._compiled:
            msg = "Cannot add endpoints after compilation."
            raise RuntimeError(msg)
        by_verb = self._by_path.setdefault(binding.path, {})
        existing = by_verb.get(binding.verb)
        if existing is not None:
            msg = (
                f"Duplicate endpoint {binding.verb} {binding.path}: "
                f"{existing.endpoint.owner}.{existing.endpoint.name} and "
                f"{binding.endpoint.owner}.{binding.endpoint.name}"
            )
            raise ConfigurationError(msg)
        by_verb[binding.verb] = binding

    def compile(self) -> None:
        """Freeze the table. No more bindings can be added."""
        self._compiled = True

    @property
    def bindings(self) -> list[Binding]:
        """All bindings, in registration order."""
        return [binding for by_verb in self._by_path.values() for binding in by_verb.values()]

    def match(self, verb: str, path: str) -> Binding:
        """Find the binding for *verb* at *path*.

        Raises ``NotFound`` if nothing is registered at the path, and
        ``MethodNotAllowed`` if the path exists but not for this verb.
        """
        by_verb = self._by_path.get(path)
        if by_verb is None:
            raise NotFound(f"No endpoint matches {verb} {path!r}")
        binding = by_verb.get(verb)
        if binding is None:
            raise MethodNotAllowed(frozenset(by_verb))
        return binding

    def __len__(self) -> int:
        return sum(len(by_verb) for by_verb in self._by_path.values())
