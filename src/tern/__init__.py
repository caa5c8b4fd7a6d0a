"""Tern — declarative RPC controllers.

Mark controller methods as endpoints; tern derives their paths and arity,
validates arguments against per-position JSON Schemas before the method
runs, and publishes stub metadata for callers.

Basic usage::

    from tern import App, Controller, api

    class Greeter(Controller):
        @api(params=[{"type": "string", "minLength": 1}])
        def hello(self, name, context):
            context.data(f"Hello, {name}!")

    app = App()
    app.mount(Greeter)
    # GET /api/Greeter/hello?args=["World"] -> {"data": "Hello, World!"}

``app`` is an ASGI 3 application; serve it with any ASGI server.
"""

__version__ = "0.1.0"
__all__ = [
    "APIDescription",
    "App",
    "AppConfig",
    "ArgumentCountError",
    "ConfigurationError",
    "Controller",
    "DispatchError",
    "EndpointInfo",
    "HTTPContext",
    "HTTPError",
    "InvalidArguments",
    "MethodNotAllowed",
    "NotFound",
    "Request",
    "Response",
    "TernError",
    "api",
    "get_context",
    "register_endpoint",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import tern`` fast while providing a clean top-level API.
    """
    if name == "App":
        from tern.app import App

        return App

    if name == "AppConfig":
        from tern.config import AppConfig

        return AppConfig

    if name in ("APIDescription", "Controller", "EndpointInfo", "api", "register_endpoint"):
        from tern import controller as _controller

        return getattr(_controller, name)

    if name in ("HTTPContext", "get_context"):
        from tern import context as _ctx

        return getattr(_ctx, name)

    if name in ("Request", "Response"):
        from tern import http as _http

        return getattr(_http, name)

    if name in (
        "ArgumentCountError",
        "ConfigurationError",
        "DispatchError",
        "HTTPError",
        "InvalidArguments",
        "MethodNotAllowed",
        "NotFound",
        "TernError",
    ):
        from tern import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
