"""HTTP request/response pair handed to dispatch wrappers."""

from tern.http.request import Headers, QueryParams, Request
from tern.http.response import Response

__all__ = ["Headers", "QueryParams", "Request", "Response"]
