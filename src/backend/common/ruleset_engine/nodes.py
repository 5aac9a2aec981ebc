"""Syntax tree for rule expressions.

Nodes are frozen and hold tuples only, so a parsed tree can be cached and
shared between concurrent executions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple, Union


@dataclass(frozen=True)
class KeySegment:
    """`.name` - map key lookup."""

    key: str

    def __str__(self) -> str:
        return f".{self.key}"


@dataclass(frozen=True)
class IndexSegment:
    """`[n]` - list index lookup."""

    index: int

    def __str__(self) -> str:
        return f"[{self.index}]"


Segment = Union[KeySegment, IndexSegment]


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Path:
    """Identifier chain such as `users[0].name`, resolved against the context."""

    root: str
    segments: Tuple[Segment, ...] = ()

    def __str__(self) -> str:
        return self.root + "".join(str(seg) for seg in self.segments)


@dataclass(frozen=True)
class Subscript:
    """Property/index access on a computed receiver, e.g. `(expr).key`."""

    receiver: "Expression"
    segments: Tuple[Segment, ...]


@dataclass(frozen=True)
class BinaryOp:
    operator: str
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class UnaryOp:
    operator: str
    operand: "Expression"


@dataclass(frozen=True)
class Call:
    name: str
    arguments: Tuple["Expression", ...] = ()


@dataclass(frozen=True)
class MethodCall:
    receiver: "Expression"
    method: str
    arguments: Tuple["Expression", ...] = ()


Expression = Union[Literal, Path, Subscript, BinaryOp, UnaryOp, Call, MethodCall]
