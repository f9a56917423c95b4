"""Path lookups into JSON-like values.

Paths look like ``user.id``, ``items[0].name`` or ``[0].id``. A lookup that
falls off the value returns NOT_FOUND rather than raising, and JSON null
stays a normal result (None).
"""

import json
import re
from typing import Any, Union

JsonValue = Union[None, bool, int, float, str, list[Any], dict[str, Any]]

INDEX_PATTERN = re.compile(r"^\[(\d+)\]$")
KEY_INDEX_PATTERN = re.compile(r"^([A-Za-z0-9_\-]+)\[(\d+)\]$")


class _NotFound:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()


def _index(value: JsonValue, index: int) -> Any:
    if isinstance(value, list) and index < len(value):
        return value[index]
    return NOT_FOUND


def _key(value: JsonValue, key: str) -> Any:
    if isinstance(value, dict) and key in value:
        return value[key]
    return NOT_FOUND


def navigate(value: JsonValue, path: str) -> Any:
    """Follow a dotted/indexed path. Returns the value found or NOT_FOUND."""
    current: Any = value
    for segment in path.split("."):
        if current is None or current is NOT_FOUND:
            return NOT_FOUND

        index_match = INDEX_PATTERN.match(segment)
        if index_match:
            current = _index(current, int(index_match.group(1)))
            continue

        key_index_match = KEY_INDEX_PATTERN.match(segment)
        if key_index_match:
            current = _key(current, key_index_match.group(1))
            if current is NOT_FOUND:
                return NOT_FOUND
            current = _index(current, int(key_index_match.group(2)))
            continue

        current = _key(current, segment)
    return current


def stringify(value: JsonValue) -> str:
    """Render a value for substitution into request text."""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
