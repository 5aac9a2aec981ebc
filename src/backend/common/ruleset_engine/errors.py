from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import Rule


class RulesEngineError(Exception):
    """Base class for every error raised by the ruleset engine."""


class RuleFormatError(RulesEngineError, ValueError):
    """Raw rule text could not be split into condition and transformation."""


class ParseError(RulesEngineError):
    def __init__(self, position: int, reason: str, text: str = ""):
        self.position = position
        self.reason = reason
        self.text = text
        super().__init__(f"{reason} at position {position}")


class EvalErrorKind(str, Enum):
    NULL_PROPERTY_ACCESS = "NULL_PROPERTY_ACCESS"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    ARITY_MISMATCH = "ARITY_MISMATCH"
    UNKNOWN_FUNCTION = "UNKNOWN_FUNCTION"
    UNKNOWN_METHOD = "UNKNOWN_METHOD"
    DIVISION_BY_ZERO = "DIVISION_BY_ZERO"


class EvalError(RulesEngineError):
    def __init__(self, kind: EvalErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(f"{kind.value}: {message}")

    @property
    def is_null_property_access(self) -> bool:
        return self.kind is EvalErrorKind.NULL_PROPERTY_ACCESS

    @classmethod
    def null_property_access(cls, target: str) -> "EvalError":
        return cls(EvalErrorKind.NULL_PROPERTY_ACCESS, f"'{target}' cannot be applied to null")

    @classmethod
    def type_mismatch(cls, message: str) -> "EvalError":
        return cls(EvalErrorKind.TYPE_MISMATCH, message)

    @classmethod
    def arity_mismatch(cls, name: str, expected: str, got: int) -> "EvalError":
        return cls(EvalErrorKind.ARITY_MISMATCH, f"{name} expects {expected} argument(s), got {got}")


class ExecutionError(RulesEngineError):
    """A fatal error raised while executing one rule of a ruleset.

    Carries the failing rule's identity and text along with the underlying
    ParseError or EvalError (also available as ``__cause__``).
    """

    def __init__(self, rule: "Rule", cause: RulesEngineError, ruleset: Optional[str] = None):
        self.rule = rule
        self.cause = cause
        self.ruleset = ruleset or rule.ruleset
        super().__init__(
            f"Error executing rule {rule.rule_id}: condition='{rule.condition}', "
            f"transformation='{rule.transformation}': {cause}"
        )

    @property
    def rule_id(self) -> str:
        return self.rule.rule_id

    @property
    def condition(self) -> str:
        return self.rule.condition

    @property
    def transformation(self) -> str:
        return self.rule.transformation


class RulesetNotFoundError(RulesEngineError, LookupError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Ruleset not found: {name}")


class RulesetExistsError(RulesEngineError, ValueError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Ruleset already exists: {name}")
