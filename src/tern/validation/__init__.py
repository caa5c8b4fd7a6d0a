"""Argument validation — compiled JSON-Schema tuples, localized errors.

Usage::

    from tern.validation import compile_schema, tuple_schema

    validator = compile_schema(tuple_schema([{"type": "number"}], 1))
    result = validator.validate(["x"])
    if not result:
        # result.errors == (FieldError(data_path="[0]", ...),)
        ...
"""

from tern.validation.messages import CATALOGS, localize, negotiate_locale
from tern.validation.result import FieldError, ValidationResult
from tern.validation.schema import SchemaValidator, compile_schema, format_path, tuple_schema

__all__ = [
    "CATALOGS",
    "FieldError",
    "SchemaValidator",
    "ValidationResult",
    "compile_schema",
    "format_path",
    "localize",
    "negotiate_locale",
    "tuple_schema",
]
