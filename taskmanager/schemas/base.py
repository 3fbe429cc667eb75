"""Helpers shared by the form schemas."""

from typing import Any

from marshmallow import Schema


def strip_strings(data: Any, keys: tuple[str, ...]) -> dict:
    """Copy ``data`` with the named string values trimmed.

    Empty values are dropped so that ``load_default`` applies.
    """
    data = dict(data or {})
    for key in keys:
        value = data.get(key)
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            data.pop(key, None)
        else:
            data[key] = value
    return data


def error_list(schema: Schema, messages: dict[str, Any]) -> list[str]:
    """Flatten marshmallow error messages into an ordered list.

    Messages follow the schema's field declaration order so forms report
    problems top to bottom.

    Args:
        schema: Schema that produced the errors.
        messages: ``ValidationError.messages``.

    Returns:
        Human-readable messages.
    """
    keys = [name for name in schema.fields if name in messages]
    keys += [name for name in messages if name not in keys]

    result: list[str] = []
    for key in keys:
        result.extend(_flatten(messages[key]))
    return result


def _flatten(value: Any) -> list[str]:
    if isinstance(value, dict):
        return [msg for inner in value.values() for msg in _flatten(inner)]
    if isinstance(value, (list, tuple)):
        return [msg for inner in value for msg in _flatten(inner)]
    return [str(value)]
