"""Expression-based ruleset engine.

This package intentionally contains only domain logic:
- Rules are `condition THEN transformation` expressions producing one output variable.
- Facts are JSON-like values supplied per execution.
- No storage, HTTP, or filesystem access lives here.
"""

from .context import ExecutionContext, resolve
from .errors import (
    EvalError,
    EvalErrorKind,
    ExecutionError,
    ParseError,
    RuleFormatError,
    RulesEngineError,
    RulesetExistsError,
    RulesetNotFoundError,
)
from .evaluator import Evaluator, evaluate
from .executor import RulesetExecutor, RulesetRun, execute_ruleset
from .functions import FunctionRegistry, default_registry
from .models import ExecutionReport, ExecutionStats, ExecutionStatus, Rule, Ruleset
from .parser import parse, parse_cached
from .rule_text import RuleParts, split_rule_text
