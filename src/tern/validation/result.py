"""Validation result — immutable container for ordered field errors."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class FieldError:
    """One validation problem at one location in the argument array.

    ``data_path`` addresses the offending value from the argument array
    root, e.g. ``[0].age``. ``keyword`` is the failing JSON-Schema keyword
    and ``expected`` the keyword's value (for ``required``, the missing
    property name), enough to re-render ``message`` in another locale.
    """

    data_path: str
    message: str
    keyword: str = ""
    expected: Any = None

    def with_message(self, message: str) -> FieldError:
        return replace(self, message=message)

    def to_dict(self) -> dict[str, str]:
        """Wire shape used in ``fieldsError`` responses."""
        return {"dataPath": self.data_path, "message": self.message}


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of validating an argument array.

    Falsy when invalid, so you can write::

        result = validator.validate(args)
        if not result:
            context.fields_error(result.errors)
    """

    errors: tuple[FieldError, ...] = ()

    @property
    def is_valid(self) -> bool:
        """True if validation passed with no errors."""
        return not self.errors

    def __bool__(self) -> bool:
        return self.is_valid
