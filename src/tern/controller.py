"""Declarative RPC controllers.

A controller is a class whose methods are marked as remotely invocable with
``@api(...)``. When the class body has been evaluated, every marked method
is registered once: its path, verb and arity are derived, its parameter
schemas are compiled, and a dispatch wrapper is built that enforces both
before the method runs::

    from tern import Controller, api

    class Orders(Controller):
        @api("POST", params=[{"type": "string"}, {"type": "integer", "minimum": 1}])
        def place(self, sku, quantity, context):
            context.data({"sku": sku, "quantity": quantity})

    Orders().api_info_map["place"].path        # "/api/Orders/place"
    Orders().api_info_map["place"].parameter_count  # 2

Every endpoint method takes a trailing context argument, which is not
counted in ``parameter_count`` and is never supplied by the caller.

Registries are per class and are merged along the inheritance chain at
registration time: a subclass registry holds its ancestors' endpoints
(under the ancestors' own paths) plus its own. Ancestor registries are
never written by a descendant.

Free-threading safety:
    - Registration runs once, at import time, single-threaded
    - EndpointInfo is a frozen dataclass (immutable)
    - Registries are never written after class creation; dispatch only reads
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, TypeAlias

from tern._internal.invoke import invoke
from tern.client import render_client_script
from tern.context import HTTPContext, context_var
from tern.errors import ArgumentCountError, ConfigurationError
from tern.http.request import Request
from tern.http.response import Response
from tern.validation import SchemaValidator, compile_schema, localize, tuple_schema

logger = logging.getLogger("tern.controller")

API_PREFIX = "/api"
API_INFO_MAP_KEY = "__api_info_map__"
API_DESCRIPTION_ATTR = "__api_description__"

VERBS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})
DEFAULT_VERB = "GET"

Dispatch: TypeAlias = Callable[[Any, Request, Response], Awaitable[None]]
ParamSchema: TypeAlias = Mapping[str, Any] | bool


@dataclass(frozen=True, slots=True)
class APIDescription:
    """What a declarer says about one endpoint.

    ``params`` holds one JSON-Schema per positional argument; ``None``
    accepts any value at every position. ``parameter_count``, when given,
    must agree with the method signature. ``path`` and ``handler`` replace
    the derived path and the generated dispatch wrapper.
    """

    verb: str = DEFAULT_VERB
    params: Sequence[ParamSchema] | None = None
    parameter_count: int | None = None
    path: str | None = None
    handler: Dispatch | None = None


@dataclass(frozen=True, slots=True)
class EndpointInfo:
    """A registered endpoint. Created once at class definition, never mutated.

    ``client_script`` is rendered before any app exists, so it always fills
    the default ``__api__`` table. The bundle an ``App`` serves is rendered
    at freeze time against ``AppConfig.client_table``.
    """

    name: str
    owner: str
    path: str
    verb: str
    parameter_count: int
    params: tuple[ParamSchema, ...]
    validator: SchemaValidator = field(repr=False)
    dispatch: Dispatch = field(repr=False)
    client_script: str = field(repr=False)
    method: Callable[..., Any] = field(repr=False)

    def bind(self, controller: Any) -> Callable[[Request, Response], Awaitable[None]]:
        """Return a ``(request, response)`` handler calling into *controller*."""
        return functools.partial(self.dispatch, controller)


def api(
    verb: str = DEFAULT_VERB,
    *,
    params: Sequence[ParamSchema] | None = None,
    parameter_count: int | None = None,
    path: str | None = None,
    handler: Dispatch | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark a controller method as an endpoint.

    The decorator only attaches an ``APIDescription`` to the function;
    registration happens when the owning ``Controller`` subclass is
    created (see ``register_endpoint``).
    """
    description = APIDescription(
        verb=verb.upper(),
        params=tuple(params) if params is not None else None,
        parameter_count=parameter_count,
        path=path,
        handler=handler,
    )

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        if not callable(func):
            msg = f"@api can only decorate callables, got {type(func).__name__}"
            raise TypeError(msg)
        setattr(func, API_DESCRIPTION_ATTR, description)
        return func

    return decorator


def endpoint_path(class_name: str, method_name: str) -> str:
    """The derived path of an endpoint: ``/api/<ClassName>/<methodName>``."""
    return f"{API_PREFIX}/{class_name}/{method_name}"


def derive_parameter_count(func: Callable[..., Any]) -> int:
    """Count the caller-supplied positional parameters of an endpoint method.

    Excludes ``self`` and the trailing context parameter.

    Raises:
        ConfigurationError: If the signature has no context parameter,
            takes ``*args``, or has required keyword-only parameters.
    """
    name = getattr(func, "__qualname__", repr(func))
    parameters = list(inspect.signature(func).parameters.values())
    if not parameters or parameters[0].kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        msg = f"Endpoint {name} must be an instance method taking 'self'"
        raise ConfigurationError(msg)

    arity = 0
    for param in parameters[1:]:
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            msg = f"Endpoint {name} cannot take *{param.name}: its arity must be fixed"
            raise ConfigurationError(msg)
        if param.kind is inspect.Parameter.KEYWORD_ONLY and param.default is param.empty:
            msg = f"Endpoint {name} has required keyword-only parameter {param.name!r}"
            raise ConfigurationError(msg)
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            arity += 1

    if arity < 1:
        msg = f"Endpoint {name} must declare a trailing context parameter"
        raise ConfigurationError(msg)
    return arity - 1


def register_endpoint(
    cls: type,
    name: str,
    description: APIDescription | None = None,
) -> EndpointInfo:
    """Register method *name* of *cls* as an endpoint and return its metadata.

    Called by ``Controller.__init_subclass__`` for every ``@api`` method, in
    declaration order; may also be called directly for classes built
    without the decorator. Registering the same name on the same class
    again replaces the earlier entry.

    The class's own registry is created on first use and seeded with every
    endpoint visible on its ancestors; entries the class already owns are
    never overwritten by inherited ones.

    Raises:
        ConfigurationError: For an unknown verb, an invalid signature, a
            malformed or mis-sized parameter schema list, or a bad path.
    """
    attr = vars(cls).get(name)
    if attr is None:
        msg = f"{cls.__name__} does not define {name!r}"
        raise ConfigurationError(msg)
    if isinstance(attr, staticmethod | classmethod):
        msg = f"Endpoint {cls.__name__}.{name} must be an instance method"
        raise ConfigurationError(msg)
    if not callable(attr):
        msg = f"Endpoint {cls.__name__}.{name} is not callable"
        raise ConfigurationError(msg)

    if description is None:
        description = getattr(attr, API_DESCRIPTION_ATTR, None) or APIDescription()

    verb = description.verb.upper()
    if verb not in VERBS:
        msg = f"Endpoint {cls.__name__}.{name} has unknown verb {description.verb!r}"
        raise ConfigurationError(msg)

    parameter_count = derive_parameter_count(attr)
    if description.parameter_count is not None and description.parameter_count != parameter_count:
        msg = (
            f"Endpoint {cls.__name__}.{name} declares parameter_count="
            f"{description.parameter_count} but its signature takes {parameter_count}"
        )
        raise ConfigurationError(msg)

    if description.params is None:
        params: tuple[ParamSchema, ...] = ({},) * parameter_count
    else:
        params = tuple(description.params)
        if len(params) != parameter_count:
            msg = (
                f"Endpoint {cls.__name__}.{name} has {len(params)} parameter "
                f"schemas for {parameter_count} parameters"
            )
            raise ConfigurationError(msg)

    try:
        validator = compile_schema(tuple_schema(params, parameter_count))
    except ConfigurationError as exc:
        msg = f"Endpoint {cls.__name__}.{name}: {exc}"
        raise ConfigurationError(msg) from exc

    path = description.path or endpoint_path(cls.__name__, name)
    if not path.startswith("/"):
        msg = f"Endpoint {cls.__name__}.{name} path must start with '/': {path!r}"
        raise ConfigurationError(msg)

    endpoint = EndpointInfo(
        name=name,
        owner=cls.__name__,
        path=path,
        verb=verb,
        parameter_count=parameter_count,
        params=params,
        validator=validator,
        dispatch=description.handler or _build_dispatch(attr, path, parameter_count, validator),
        client_script=render_client_script(path, verb, parameter_count),
        method=attr,
    )

    registry = _own_registry(cls)
    for base in cls.__bases__:
        for inherited_name, inherited in _visible_registry(base).items():
            registry.setdefault(inherited_name, inherited)
    registry[name] = endpoint

    logger.debug("Registered %s %s (%d params)", verb, path, parameter_count)
    return endpoint


def endpoints_of(cls: type) -> Mapping[str, EndpointInfo]:
    """Read-only view of the endpoint registry visible on *cls*."""
    return MappingProxyType(_visible_registry(cls))


class Controller:
    """Base class for endpoint-bearing classes.

    Subclasses mark methods with ``@api(...)``; they are registered when
    the subclass is created. Instances hold no endpoint state: they expose
    their class's merged registry through ``api_info_map`` and are the
    ``self`` endpoint methods run against.

    Example::

        class Profiles(Controller):
            @api(params=[
                {"type": "object", "properties": {"age": {"type": "number"}}},
                {"type": "number"},
            ])
            def apis(self, profile, bonus, context):
                context.data(profile["age"] + bonus)
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for name, attr in list(vars(cls).items()):
            func = attr.__func__ if isinstance(attr, staticmethod | classmethod) else attr
            if getattr(func, API_DESCRIPTION_ATTR, None) is not None:
                register_endpoint(cls, name, getattr(func, API_DESCRIPTION_ATTR))

    @property
    def api_info_map(self) -> Mapping[str, EndpointInfo]:
        """Every endpoint of this instance's class, ancestors included."""
        return endpoints_of(type(self))


# -- Internal --


def _own_registry(cls: type) -> dict[str, EndpointInfo]:
    # Look in the class's own namespace: an inherited registry must not
    # be reused, or registering here would write into the ancestor's.
    registry = vars(cls).get(API_INFO_MAP_KEY)
    if registry is None:
        registry = {}
        setattr(cls, API_INFO_MAP_KEY, registry)
    return registry


def _visible_registry(cls: type) -> dict[str, EndpointInfo]:
    # An owned registry already holds the merge of everything above it.
    # A class without one sees the union of its bases, first base first.
    registry = vars(cls).get(API_INFO_MAP_KEY)
    if registry is not None:
        return registry
    merged: dict[str, EndpointInfo] = {}
    for base in cls.__bases__:
        for name, endpoint in _visible_registry(base).items():
            merged.setdefault(name, endpoint)
    return merged


def _build_dispatch(
    method: Callable[..., Any],
    path: str,
    parameter_count: int,
    validator: SchemaValidator,
) -> Dispatch:
    async def dispatch(controller: Any, request: Request, response: Response) -> None:
        args = await request.args()
        if len(args) != parameter_count:
            raise ArgumentCountError(path, parameter_count, len(args))

        context = HTTPContext(request, response)
        result = validator.validate(args)
        if not result:
            context.fields_error(localize(result.errors, context.locale))
            return

        token = context_var.set(context)
        try:
            await invoke(method, controller, *args, context)
        finally:
            context_var.reset(token)

    dispatch.__qualname__ = f"{method.__qualname__}.<dispatch>"
    return dispatch
