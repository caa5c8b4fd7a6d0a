"""Tern application — an ASGI app serving mounted controllers.

Mutable during setup (controllers are mounted). Frozen on the first ASGI
call, when the endpoint table and client bundle are compiled.
"""

import threading
from collections.abc import Iterable

from tern._internal.asgi import Receive, Scope, Send
from tern.client import client_bundle, client_manifest
from tern.config import AppConfig
from tern.controller import Controller, EndpointInfo
from tern.errors import ConfigurationError
from tern.routing import Binding, EndpointTable
from tern.server.handler import handle_request


class App:
    """The tern application.

    Usage::

        app = App()
        app.mount(Orders)          # a Controller subclass or instance

    Thread safety:
        Mounting happens single-threaded at import time. The freeze
        transition uses a Lock + double-check so exactly one thread
        compiles the endpoint table, even if several ASGI workers take
        their first request at once.
    """

    __slots__ = (
        "_client_script",
        "_controllers",
        "_freeze_lock",
        "_frozen",
        "_table",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._controllers: list[Controller] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._table: EndpointTable | None = None
        self._client_script: str = ""

    def mount(self, controller: Controller | type[Controller]) -> Controller:
        """Serve every endpoint of *controller*.

        Accepts a ``Controller`` subclass (instantiated with no arguments)
        or an instance. Returns the instance endpoints will run against.
        """
        self._check_not_frozen()
        if isinstance(controller, type):
            if not issubclass(controller, Controller):
                msg = f"{controller.__name__} is not a Controller subclass"
                raise ConfigurationError(msg)
            controller = controller()
        elif not isinstance(controller, Controller):
            msg = f"Cannot mount {type(controller).__name__}: not a Controller"
            raise ConfigurationError(msg)
        self._controllers.append(controller)
        return controller

    @property
    def controllers(self) -> tuple[Controller, ...]:
        return tuple(self._controllers)

    @property
    def bindings(self) -> list[Binding]:
        """Every served endpoint with its controller. Freezes the app."""
        self._ensure_frozen()
        assert self._table is not None
        return self._table.bindings

    @property
    def endpoints(self) -> list[EndpointInfo]:
        return [binding.endpoint for binding in self.bindings]

    def client_script(self) -> str:
        """The client bundle served at ``config.client_script_path``."""
        self._ensure_frozen()
        return self._client_script

    def client_manifest(self) -> dict[str, dict[str, object]]:
        return client_manifest(self.endpoints)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._table is not None

        await handle_request(
            scope,
            receive,
            send,
            table=self._table,
            config=self.config,
            client_script=self._client_script,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Freeze at startup so a failing freeze stops the server early."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the endpoint table and client bundle.

        MUST only be called while holding _freeze_lock.
        """
        table = EndpointTable()
        for binding in _bindings(self._controllers):
            table.add(binding)
        table.compile()
        self._table = table
        self._client_script = client_bundle(
            (binding.endpoint for binding in table.bindings),
            table=self.config.client_table,
        )
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot mount controllers after the app has started serving requests. "
                "Mount everything before the first request."
            )
            raise RuntimeError(msg)


def _bindings(controllers: Iterable[Controller]) -> Iterable[Binding]:
    for controller in controllers:
        for endpoint in controller.api_info_map.values():
            yield Binding(controller=controller, endpoint=endpoint)
