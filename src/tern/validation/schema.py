"""Compile per-position parameter schemas into an argument validator.

Endpoint parameters are described positionally: schema *i* validates
argument *i*. They are wrapped into a Draft 7 tuple schema of exact
length and compiled once, at registration time, so a malformed schema
fails while the declaring module is imported.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError, ValidationError

from tern.errors import ConfigurationError
from tern.validation.result import FieldError, ValidationResult


def tuple_schema(params: Sequence[Mapping[str, Any] | bool], count: int) -> dict[str, Any]:
    """Wrap positional parameter schemas into an exact-length array schema."""
    return {
        "type": "array",
        "items": [dict(p) if isinstance(p, Mapping) else p for p in params],
        "minItems": count,
        "maxItems": count,
    }


class SchemaValidator:
    """A compiled argument-array validator.

    Stateless between calls: every ``validate()`` returns its own result,
    so one instance is shared by all concurrent dispatches of an endpoint.
    """

    __slots__ = ("_validator", "schema")

    def __init__(self, schema: Mapping[str, Any]) -> None:
        self.schema = schema
        self._validator = Draft7Validator(schema)

    def validate(self, instance: Any) -> ValidationResult:
        """Validate *instance*, collecting every error in validator order."""
        return ValidationResult(errors=tuple(_field_errors(self._validator.iter_errors(instance))))

    def __repr__(self) -> str:
        return f"SchemaValidator({self.schema!r})"


def compile_schema(schema: Mapping[str, Any]) -> SchemaValidator:
    """Check *schema* against the Draft 7 meta-schema and compile it.

    Raises:
        ConfigurationError: If the schema itself is malformed.
    """
    try:
        Draft7Validator.check_schema(schema)
    except SchemaError as exc:
        msg = f"Invalid parameter schema: {exc.message}"
        raise ConfigurationError(msg) from exc
    return SchemaValidator(schema)


def format_path(path: Iterable[str | int]) -> str:
    """Render a JSON path the way ajv's ``dataPath`` does.

    ``[0, "age"]`` -> ``[0].age``; keys that are not identifiers are quoted.
    """
    parts: list[str] = []
    for part in path:
        if isinstance(part, int):
            parts.append(f"[{part}]")
        elif part.isidentifier():
            parts.append(f".{part}")
        else:
            parts.append(f"[{part!r}]")
    return "".join(parts)


def _field_errors(errors: Iterable[ValidationError]) -> Iterable[FieldError]:
    # jsonschema reports one ``required`` error per missing property, in
    # declaration order, without naming the property.
    missing_seen: dict[tuple[Any, ...], int] = {}
    for error in errors:
        path = tuple(error.absolute_path)
        expected = error.validator_value
        if error.validator == "required" and isinstance(error.instance, Mapping):
            missing = [p for p in error.validator_value if p not in error.instance]
            index = missing_seen.get(path, 0)
            missing_seen[path] = index + 1
            if index < len(missing):
                expected = missing[index]
        yield FieldError(
            data_path=format_path(path),
            message=error.message,
            keyword=str(error.validator),
            expected=expected,
        )
