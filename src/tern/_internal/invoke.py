"""Call sync or async endpoint methods uniformly.

Endpoint methods can be ``def`` or ``async def``. The dispatch wrapper is
the only caller, but the sync/async check lives here so it stays in one
place.
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
