from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import RuleFormatError

_THEN = re.compile(r"\bTHEN\b")


@dataclass(frozen=True)
class RuleParts:
    condition: str
    transformation: str


def split_rule_text(rule: str) -> RuleParts:
    """Split `"condition THEN transformation"`; THEN must appear exactly once."""
    if rule is None or not rule.strip():
        raise RuleFormatError("Rule cannot be empty")
    parts = _THEN.split(rule)
    if len(parts) != 2:
        raise RuleFormatError("Rule must contain the 'THEN' keyword exactly once")
    condition, transformation = parts[0].strip(), parts[1].strip()
    if not condition:
        raise RuleFormatError("Rule condition cannot be empty")
    if not transformation:
        raise RuleFormatError("Rule transformation cannot be empty")
    return RuleParts(condition=condition, transformation=transformation)
