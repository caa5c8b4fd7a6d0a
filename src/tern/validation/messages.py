"""Localized validation messages.

Each catalog maps a JSON-Schema keyword to a message template; ``{expected}``
is replaced with the keyword's value. Keywords missing from a catalog keep
the validator's own message.
"""

from collections.abc import Iterable
from typing import Any

from tern.validation.result import FieldError

CATALOGS: dict[str, dict[str, str]] = {
    "en": {
        "type": "should be {expected}",
        "required": "should have required property '{expected}'",
        "minimum": "should be >= {expected}",
        "maximum": "should be <= {expected}",
        "exclusiveMinimum": "should be > {expected}",
        "exclusiveMaximum": "should be < {expected}",
        "multipleOf": "should be multiple of {expected}",
        "minLength": "should NOT be shorter than {expected} characters",
        "maxLength": "should NOT be longer than {expected} characters",
        "minItems": "should NOT have fewer than {expected} items",
        "maxItems": "should NOT have more than {expected} items",
        "minProperties": "should NOT have fewer than {expected} properties",
        "maxProperties": "should NOT have more than {expected} properties",
        "pattern": 'should match pattern "{expected}"',
        "format": 'should match format "{expected}"',
        "enum": "should be equal to one of the allowed values",
        "const": "should be equal to constant",
        "additionalProperties": "should NOT have additional properties",
    },
    "zh": {
        "type": "应当是 {expected} 类型",
        "required": "应当有必需属性 {expected}",
        "minimum": "应当 >= {expected}",
        "maximum": "应当 <= {expected}",
        "exclusiveMinimum": "应当 > {expected}",
        "exclusiveMaximum": "应当 < {expected}",
        "multipleOf": "应当是 {expected} 的整数倍",
        "minLength": "不应少于 {expected} 个字符",
        "maxLength": "不应多于 {expected} 个字符",
        "minItems": "不应少于 {expected} 个项",
        "maxItems": "不应多于 {expected} 个项",
        "minProperties": "不应有少于 {expected} 个属性",
        "maxProperties": "不应有多于 {expected} 个属性",
        "pattern": '应当匹配模式 "{expected}"',
        "format": '应当匹配格式 "{expected}"',
        "enum": "应当是预设定的枚举值之一",
        "const": "应当等于常量",
        "additionalProperties": "不允许有额外的属性",
    },
}


def localize(errors: Iterable[FieldError], locale: str) -> tuple[FieldError, ...]:
    """Re-render error messages in *locale*. Order is preserved.

    An unknown locale returns the errors unchanged.
    """
    catalog = CATALOGS.get(locale)
    if catalog is None:
        return tuple(errors)
    localized: list[FieldError] = []
    for error in errors:
        template = catalog.get(error.keyword)
        if template is None:
            localized.append(error)
        else:
            localized.append(error.with_message(template.format(expected=_render(error.expected))))
    return tuple(localized)


def negotiate_locale(accept_language: str | None, *, default: str = "en") -> str:
    """Pick the best catalog for an ``Accept-Language`` header value.

    ``"zh-CN,zh;q=0.9,en;q=0.8"`` -> ``"zh"``. Falls back to *default*.
    """
    if not accept_language:
        return default
    ranked: list[tuple[float, int, str]] = []
    for position, item in enumerate(accept_language.split(",")):
        tag, _, params = item.strip().partition(";")
        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                quality = 0.0
        if tag and quality > 0:
            ranked.append((-quality, position, tag.lower()))
    for _, _, tag in sorted(ranked):
        if tag in CATALOGS:
            return tag
        primary = tag.split("-", 1)[0]
        if primary in CATALOGS:
            return primary
    return default


def _render(expected: Any) -> str:
    if isinstance(expected, list | tuple):
        return ",".join(str(item) for item in expected)
    return str(expected)
