from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping, Union

# JSON-like values flowing through evaluation: None, bool, int, float, str, list, dict.
Value = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


class ValueKind(str, Enum):
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    LIST = "list"
    MAP = "map"


def kind_of(value: Any) -> ValueKind:
    # bool is a subclass of int; check it first so True never counts as a Number.
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.LIST
    if isinstance(value, Mapping):
        return ValueKind.MAP
    raise TypeError(f"Unsupported value type: {type(value).__name__}")


def ensure_value(obj: Any) -> Value:
    """Validate a JSON-like structure and return it as an engine value.

    Tuples become lists and mappings become plain dicts; anything else outside
    the closed set of kinds (including non-string map keys) raises TypeError.
    """
    kind = kind_of(obj)
    if kind is ValueKind.LIST:
        return [ensure_value(item) for item in obj]
    if kind is ValueKind.MAP:
        out: Dict[str, Any] = {}
        for key, item in obj.items():
            if not isinstance(key, str):
                raise TypeError(f"Map keys must be strings, got {type(key).__name__}")
            out[key] = ensure_value(item)
        return out
    return obj


def values_equal(left: Any, right: Any) -> bool:
    left_kind = kind_of(left)
    right_kind = kind_of(right)
    if left_kind is not right_kind:
        return False
    if left_kind is ValueKind.LIST:
        return len(left) == len(right) and all(values_equal(a, b) for a, b in zip(left, right))
    if left_kind is ValueKind.MAP:
        if left.keys() != right.keys():
            return False
        return all(values_equal(left[key], right[key]) for key in left)
    return left == right


def to_display_string(value: Any) -> str:
    kind = kind_of(value)
    if kind is ValueKind.NULL:
        return "null"
    if kind is ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind is ValueKind.NUMBER:
        return str(value)
    if kind is ValueKind.STRING:
        return value
    if kind is ValueKind.LIST:
        return "[" + ", ".join(to_display_string(item) for item in value) + "]"
    return "{" + ", ".join(f"{key}={to_display_string(item)}" for key, item in value.items()) + "}"
