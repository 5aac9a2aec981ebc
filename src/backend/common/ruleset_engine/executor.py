from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import structlog

from .context import ExecutionContext
from .errors import EvalError, ExecutionError, ParseError, RulesetNotFoundError
from .evaluator import Evaluator, default_evaluator
from .models import ExecutionReport, ExecutionStats, ExecutionStatus, Rule
from .nodes import Expression
from .parser import parse_cached
from .values import ensure_value

logger = structlog.get_logger(__name__)

RuleLike = Union[Rule, Tuple[str, str, str]]


def _coerce_rule(rule: RuleLike, ruleset: str) -> Rule:
    if isinstance(rule, Rule):
        return rule
    condition, transformation, output_variable = rule
    return Rule(
        ruleset=ruleset,
        condition=condition,
        transformation=transformation,
        output_variable=output_variable,
    )


class RulesetRun:
    """One execution of an ordered rule list: PENDING -> RUNNING -> COMPLETED | FAILED.

    Each rule may read outputs written by earlier rules in the same run. The
    first fatal error aborts the run and no partial output is returned.
    """

    def __init__(
        self,
        rules: Sequence[Rule],
        facts: Mapping[str, Any],
        *,
        ruleset: str = "",
        null_safe: bool = True,
        evaluator: Optional[Evaluator] = None,
        parse_fn: Callable[[str], Expression] = parse_cached,
    ):
        self.run_id = str(uuid.uuid4())
        self.rules = list(rules)
        self.ruleset = ruleset
        self.null_safe = null_safe
        self.evaluator = evaluator or default_evaluator
        self.parse_fn = parse_fn
        self.context = ExecutionContext(facts=ensure_value(dict(facts)))
        self.status = ExecutionStatus.PENDING
        self.executed_rules = 0
        self._log = logger.bind(run_id=self.run_id, ruleset=ruleset, null_safe=null_safe)

    def execute(self) -> ExecutionReport:
        if self.status is not ExecutionStatus.PENDING:
            raise RuntimeError(f"Run {self.run_id} already {self.status.value}")
        self.status = ExecutionStatus.RUNNING
        self._log.info("ruleset_run_started", total_rules=len(self.rules))

        for rule in self.rules:
            try:
                self._execute_rule(rule)
            except (ParseError, EvalError) as exc:
                self.status = ExecutionStatus.FAILED
                self._log.error(
                    "rule_failed",
                    rule_id=rule.rule_id,
                    condition=rule.condition,
                    transformation=rule.transformation,
                    error=str(exc),
                )
                raise ExecutionError(rule, exc, ruleset=self.ruleset) from exc

        self.status = ExecutionStatus.COMPLETED
        outputs = dict(self.context.derived)
        self._log.info("ruleset_run_completed", executed_rules=self.executed_rules, outputs=list(outputs))
        return ExecutionReport(
            run_id=self.run_id,
            ruleset=self.ruleset,
            generated_at=datetime.now(timezone.utc),
            status=self.status,
            output_variables=outputs,
            stats=ExecutionStats(total_rules=len(self.rules), executed_rules=self.executed_rules),
        )

    def _execute_rule(self, rule: Rule) -> None:
        self._log.debug(
            "rule_started",
            rule_id=rule.rule_id,
            condition=rule.condition,
            available_outputs=list(self.context.output_names()),
        )
        fired = self._evaluate_condition(rule, self.parse_fn(rule.condition))
        self._log.info("rule_condition_evaluated", rule_id=rule.rule_id, result=fired)
        if not fired:
            return

        value = self._evaluate_transformation(rule, self.parse_fn(rule.transformation))
        self.context.set_output(rule.output_variable, value)
        self.executed_rules += 1
        self._log.info("rule_fired", rule_id=rule.rule_id, output_variable=rule.output_variable, value=value)

    def _evaluate_condition(self, rule: Rule, expr: Expression) -> bool:
        try:
            return self.evaluator.evaluate_condition(expr, self.context)
        except EvalError as exc:
            if self.null_safe and exc.is_null_property_access:
                self._log.warning(
                    "null_property_access_in_condition",
                    rule_id=rule.rule_id,
                    condition=rule.condition,
                    error=exc.message,
                    outcome="treated as false",
                )
                return False
            raise

    def _evaluate_transformation(self, rule: Rule, expr: Expression) -> Any:
        try:
            return self.evaluator.evaluate(expr, self.context)
        except EvalError as exc:
            if self.null_safe and exc.is_null_property_access:
                self._log.warning(
                    "null_property_access_in_transformation",
                    rule_id=rule.rule_id,
                    transformation=rule.transformation,
                    error=exc.message,
                    outcome="returning null",
                )
                return None
            raise


class RulesetExecutor:
    """Executes an immutable rule list; safe to share, every run gets a fresh context."""

    def __init__(
        self,
        rules: Iterable[RuleLike],
        *,
        ruleset: str = "",
        null_safe: bool = True,
        evaluator: Optional[Evaluator] = None,
        parse_fn: Callable[[str], Expression] = parse_cached,
    ):
        self.ruleset = ruleset
        self.rules: Tuple[Rule, ...] = tuple(_coerce_rule(rule, ruleset) for rule in rules)
        self.null_safe = null_safe
        self.evaluator = evaluator or default_evaluator
        self.parse_fn = parse_fn

    def run(self, facts: Mapping[str, Any], *, null_safe: Optional[bool] = None) -> ExecutionReport:
        if not self.rules:
            raise RulesetNotFoundError(self.ruleset)
        run = RulesetRun(
            self.rules,
            facts,
            ruleset=self.ruleset,
            null_safe=self.null_safe if null_safe is None else null_safe,
            evaluator=self.evaluator,
            parse_fn=self.parse_fn,
        )
        return run.execute()

    def validate(self) -> List[Expression]:
        """Parse every condition and transformation, raising the first ParseError."""
        trees: List[Expression] = []
        for rule in self.rules:
            trees.append(self.parse_fn(rule.condition))
            trees.append(self.parse_fn(rule.transformation))
        return trees


def execute_ruleset(
    rules: Iterable[RuleLike],
    facts: Mapping[str, Any],
    null_safe: bool = True,
) -> Dict[str, Any]:
    """Run `rules` in order against `facts` and return the derived output map."""
    return RulesetExecutor(rules, null_safe=null_safe).run(facts).output_variables
