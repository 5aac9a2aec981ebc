from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, List, Optional, Sequence

from .errors import EvalError, EvalErrorKind
from .functions import require_int, safe_substring
from .values import ValueKind, kind_of, to_display_string


@dataclass(frozen=True)
class BuiltinMethod:
    name: str
    receivers: FrozenSet[ValueKind]
    impl: Callable[[Any, Sequence[Any]], Any]
    min_args: int = 0
    max_args: int = 0
    description: str = ""


def _string_arg(method: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    raise EvalError.type_mismatch(f"{method}() argument must be a string, got {kind_of(value).value}")


def _substring(receiver: str, args: Sequence[Any]) -> str:
    start = require_int("substring", args[0], 1)
    end = require_int("substring", args[1], 2) if len(args) > 1 else None
    return safe_substring(receiver, start, end)


_STRING = frozenset({ValueKind.STRING})
_COLLECTIONS = frozenset({ValueKind.LIST, ValueKind.MAP})
_ANY = frozenset(ValueKind) - {ValueKind.NULL}

BUILTIN_METHODS = {
    m.name: m
    for m in (
        BuiltinMethod("length", _STRING, lambda r, a: len(r), description="Character count."),
        BuiltinMethod("size", _COLLECTIONS, lambda r, a: len(r), description="Element count of a list or map."),
        BuiltinMethod("toUpperCase", _STRING, lambda r, a: r.upper(), description="Uppercase copy."),
        BuiltinMethod("toLowerCase", _STRING, lambda r, a: r.lower(), description="Lowercase copy."),
        BuiltinMethod(
            "substring", _STRING, _substring, 1, 2, "Slice; out-of-range bounds return the string unchanged."
        ),
        BuiltinMethod("toString", _ANY, lambda r, a: to_display_string(r), description="Display string."),
        BuiltinMethod("trim", _STRING, lambda r, a: r.strip(), description="Strips surrounding whitespace."),
        BuiltinMethod(
            "contains", _STRING, lambda r, a: _string_arg("contains", a[0]) in r, 1, 1, "Substring test."
        ),
        BuiltinMethod(
            "startsWith", _STRING, lambda r, a: r.startswith(_string_arg("startsWith", a[0])), 1, 1, "Prefix test."
        ),
        BuiltinMethod(
            "endsWith", _STRING, lambda r, a: r.endswith(_string_arg("endsWith", a[0])), 1, 1, "Suffix test."
        ),
        BuiltinMethod(
            "isEmpty", _STRING | _COLLECTIONS, lambda r, a: len(r) == 0, description="True when length/size is 0."
        ),
    )
}


def lookup_method(name: str) -> Optional[BuiltinMethod]:
    return BUILTIN_METHODS.get(name)


def method_names() -> List[str]:
    return sorted(BUILTIN_METHODS)


def invoke_method(receiver: Any, name: str, args: Sequence[Any]) -> Any:
    """Dispatch a value method; a null receiver is a null property access."""
    if receiver is None:
        raise EvalError.null_property_access(f"{name}()")
    method = BUILTIN_METHODS.get(name)
    if method is None:
        raise EvalError(EvalErrorKind.UNKNOWN_METHOD, f"Unknown method '{name}()'")
    kind = kind_of(receiver)
    if kind not in method.receivers:
        raise EvalError.type_mismatch(f"Method {name}() is not defined on {kind.value}")
    if not method.min_args <= len(args) <= method.max_args:
        expected = str(method.min_args) if method.min_args == method.max_args else f"{method.min_args}-{method.max_args}"
        raise EvalError.arity_mismatch(f"{name}()", expected, len(args))
    return method.impl(receiver, args)
