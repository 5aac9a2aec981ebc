"""Built-in string functions callable from rule expressions.

Every function is pure and total over its declared argument types: null
inputs degrade gracefully (see each function), while a wrong argument count
or a non-string argument raises ARITY_MISMATCH / TYPE_MISMATCH.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from .errors import EvalError
from .values import ValueKind, kind_of


@dataclass(frozen=True)
class BuiltinFunction:
    name: str
    impl: Callable[[Sequence[Any]], Any]
    min_args: int
    max_args: Optional[int]
    description: str = ""
    aliases: tuple = field(default=())

    @property
    def arity(self) -> str:
        if self.max_args is None:
            return f"{self.min_args}+"
        if self.min_args == self.max_args:
            return str(self.min_args)
        return f"{self.min_args}-{self.max_args}"

    def __call__(self, args: Sequence[Any]) -> Any:
        count = len(args)
        if count < self.min_args or (self.max_args is not None and count > self.max_args):
            raise EvalError.arity_mismatch(self.name, self.arity, count)
        return self.impl(args)


class FunctionRegistry:
    """Read-only catalog of named functions, built once and shared."""

    def __init__(self, functions: Iterable[BuiltinFunction]):
        table: Dict[str, BuiltinFunction] = {}
        for fn in functions:
            for name in (fn.name, *fn.aliases):
                if name in table:
                    raise ValueError(f"Duplicate function registered: {name}")
                table[name] = fn
        self._functions: Mapping[str, BuiltinFunction] = MappingProxyType(table)

    def lookup(self, name: str) -> Optional[BuiltinFunction]:
        return self._functions.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._functions

    def names(self) -> List[str]:
        return sorted(self._functions)

    def functions(self) -> List[BuiltinFunction]:
        seen = {fn.name: fn for fn in self._functions.values()}
        return [seen[name] for name in sorted(seen)]


def require_string(fn_name: str, value: Any, position: int) -> Optional[str]:
    """Return `value` if it is a string or null, else raise TYPE_MISMATCH."""
    if value is None or isinstance(value, str):
        return value
    raise EvalError.type_mismatch(
        f"{fn_name} argument {position} must be a string, got {kind_of(value).value}"
    )


def require_int(fn_name: str, value: Any, position: int) -> int:
    if kind_of(value) is ValueKind.NUMBER:
        if isinstance(value, int):
            return value
        if value.is_integer():
            return int(value)
    raise EvalError.type_mismatch(
        f"{fn_name} argument {position} must be an integer, got {kind_of(value).value}"
    )


def safe_substring(text: str, start: int, end: Optional[int] = None) -> str:
    """Slice `text`; out-of-range bounds return `text` unchanged."""
    if end is None:
        end = len(text)
    if start < 0 or end > len(text) or start > end:
        return text
    return text[start:end]


def _uppercase(args: Sequence[Any]) -> Optional[str]:
    s = require_string("UPPERCASE", args[0], 1)
    return None if s is None else s.upper()


def _lowercase(args: Sequence[Any]) -> Optional[str]:
    s = require_string("LOWERCASE", args[0], 1)
    return None if s is None else s.lower()


def _substring(args: Sequence[Any]) -> Optional[str]:
    s = require_string("SUBSTRING", args[0], 1)
    start = require_int("SUBSTRING", args[1], 2)
    end = require_int("SUBSTRING", args[2], 3) if len(args) > 2 else None
    if s is None:
        return None
    return safe_substring(s, start, end)


def _concat(args: Sequence[Any]) -> str:
    parts = [require_string("CONCAT", arg, i) for i, arg in enumerate(args, start=1)]
    return "".join(part or "" for part in parts)


def _length(args: Sequence[Any]) -> int:
    s = require_string("LENGTH", args[0], 1)
    return 0 if s is None else len(s)


def _affix_test(fn_name: str, test: Callable[[str, str], bool]) -> Callable[[Sequence[Any]], bool]:
    def _impl(args: Sequence[Any]) -> bool:
        s = require_string(fn_name, args[0], 1)
        other = require_string(fn_name, args[1], 2)
        if s is None or other is None:
            return False
        return test(s, other)

    return _impl


def _trim(args: Sequence[Any]) -> Optional[str]:
    s = require_string("TRIM", args[0], 1)
    return None if s is None else s.strip()


BUILTIN_FUNCTIONS = (
    BuiltinFunction("UPPERCASE", _uppercase, 1, 1, "Uppercase of s; null stays null.", ("STRING_UPPERCASE",)),
    BuiltinFunction("LOWERCASE", _lowercase, 1, 1, "Lowercase of s; null stays null.", ("STRING_LOWERCASE",)),
    BuiltinFunction(
        "SUBSTRING",
        _substring,
        2,
        3,
        "s[start:end]; out-of-range bounds return s unchanged; null stays null.",
        ("STRING_SUBSTRING",),
    ),
    BuiltinFunction(
        "CONCAT", _concat, 0, None, "Concatenation of all arguments; null counts as empty.", ("STRING_CONCAT",)
    ),
    BuiltinFunction("LENGTH", _length, 1, 1, "Character count of s; null is 0."),
    BuiltinFunction("CONTAINS", _affix_test("CONTAINS", lambda s, n: n in s), 2, 2, "Substring test; null is false."),
    BuiltinFunction(
        "STARTS_WITH", _affix_test("STARTS_WITH", str.startswith), 2, 2, "Prefix test; null is false."
    ),
    BuiltinFunction("ENDS_WITH", _affix_test("ENDS_WITH", str.endswith), 2, 2, "Suffix test; null is false."),
    BuiltinFunction("TRIM", _trim, 1, 1, "Strips leading/trailing whitespace; null stays null."),
)

default_registry = FunctionRegistry(BUILTIN_FUNCTIONS)
