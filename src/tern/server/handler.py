"""Request pipeline: match the endpoint, dispatch, map errors, send.

Outcomes and their responses:

- endpoint wrote data or field errors → whatever the context wrote
- endpoint wrote nothing → 204
- ``HTTPError`` (no endpoint, wrong verb) → its status, ``{"error": detail}``
- ``DispatchError`` (wrong argument count, malformed ``args``) → 400
- anything else → 500, logged with traceback
"""

import logging

from tern._internal.asgi import Receive, Scope, Send
from tern.config import AppConfig
from tern.errors import DispatchError, HTTPError
from tern.http.request import Request
from tern.http.response import Response
from tern.routing import EndpointTable
from tern.server.sender import send_response

logger = logging.getLogger("tern.server")

JS_CONTENT_TYPE = "text/javascript; charset=utf-8"


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    table: EndpointTable,
    config: AppConfig,
    client_script: str,
) -> None:
    """Handle one HTTP request end to end."""
    request = Request.from_asgi(scope, receive, default_locale=config.locale)
    response = Response()

    try:
        if request.path == config.client_script_path and request.method in ("GET", "HEAD"):
            response.send(client_script, content_type=JS_CONTENT_TYPE)
        else:
            binding = table.match(request.method, request.path)
            await binding.handler(request, response)
            if not response.written:
                response.status = 204
    except HTTPError as exc:
        logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
        response = _error_response(exc.detail or f"Error {exc.status}", exc.status)
        for name, value in exc.headers:
            response.set_header(name, value)
    except DispatchError as exc:
        logger.warning("400 %s %s: %s", request.method, request.path, exc)
        response = _error_response(str(exc), 400)
    except Exception as exc:
        logger.exception("500 %s %s", request.method, request.path)
        detail = f"{type(exc).__name__}: {exc}" if config.debug else "Internal Server Error"
        response = _error_response(detail, 500)

    await send_response(response, send)


def _error_response(detail: str, status: int) -> Response:
    response = Response()
    response.json({"error": detail}, status=status)
    return response
