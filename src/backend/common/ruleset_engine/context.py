from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional

from .nodes import IndexSegment, KeySegment, Path, Segment


@dataclass
class ExecutionContext:
    """Two-tier lookup scope for one ruleset execution.

    `derived` holds outputs written by rules that already fired and shadows
    `facts` at the root name only. A context is created per execution and
    never shared.
    """

    facts: Mapping[str, Any] = field(default_factory=dict)
    derived: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.facts = MappingProxyType(dict(self.facts))

    def lookup_root(self, name: str) -> Optional[Any]:
        if name in self.derived:
            return self.derived[name]
        return self.facts.get(name)

    def has_root(self, name: str) -> bool:
        return name in self.derived or name in self.facts

    def set_output(self, name: str, value: Any) -> None:
        # Last write wins when two rules share an output variable.
        self.derived[name] = value

    def output_names(self) -> Iterable[str]:
        return self.derived.keys()


def traverse(value: Any, segments: Iterable[Segment]) -> Optional[Any]:
    """Walk `segments` from `value`; any unresolvable step yields None."""
    current = value
    for segment in segments:
        if current is None:
            return None
        if isinstance(segment, KeySegment):
            if not isinstance(current, Mapping):
                return None
            current = current.get(segment.key)
        elif isinstance(segment, IndexSegment):
            if not isinstance(current, (list, tuple)):
                return None
            if segment.index < 0 or segment.index >= len(current):
                return None
            current = current[segment.index]
        else:
            return None
    return current


def resolve(context: ExecutionContext, path: Path) -> Optional[Any]:
    return traverse(context.lookup_root(path.root), path.segments)
