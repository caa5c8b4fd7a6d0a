"""Client stub scripts — how a caller learns to invoke an endpoint.

Each endpoint carries a self-contained JavaScript snippet that records its
verb and parameter count in a well-known table on ``window``, keyed by the
endpoint path. A caller-side stub looks endpoints up there instead of
re-deriving arity or verb::

    window.__api__["/api/Orders/place"]
    // {verb: "POST", parameterCount: 2}

Values are embedded with ``json.dumps`` so paths and table names are
always valid JavaScript string literals.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tern.controller import EndpointInfo

DEFAULT_TABLE = "__api__"

_INIT_JS = """\
var API_KEY = {table};
window[API_KEY] = window[API_KEY] || {{}};
"""

_ENTRY_JS = """\
window[API_KEY][{path}] = {{
    verb: {verb},
    parameterCount: {count}
}};
"""


def render_client_script(
    path: str,
    verb: str,
    parameter_count: int,
    *,
    table: str = DEFAULT_TABLE,
) -> str:
    """Render the snippet registering one endpoint in the caller's table."""
    return _INIT_JS.format(table=json.dumps(table)) + _render_entry(path, verb, parameter_count)


def client_bundle(endpoints: Iterable[EndpointInfo], *, table: str = DEFAULT_TABLE) -> str:
    """Render one script registering every endpoint behind a single initializer."""
    entries = "".join(
        _render_entry(endpoint.path, endpoint.verb, endpoint.parameter_count)
        for endpoint in endpoints
    )
    return "(function(){\n" + _INIT_JS.format(table=json.dumps(table)) + entries + "})();\n"


def client_manifest(endpoints: Iterable[EndpointInfo]) -> dict[str, dict[str, Any]]:
    """The caller-side table as data, for non-browser callers."""
    return {
        endpoint.path: {"verb": endpoint.verb, "parameterCount": endpoint.parameter_count}
        for endpoint in endpoints
    }


def _render_entry(path: str, verb: str, parameter_count: int) -> str:
    return _ENTRY_JS.format(
        path=json.dumps(path),
        verb=json.dumps(verb),
        count=int(parameter_count),
    )
