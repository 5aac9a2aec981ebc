from __future__ import annotations

from collections import Counter
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

import structlog

from common.ruleset_engine.config import EngineConfig, get_engine_config
from common.ruleset_engine.errors import RulesetNotFoundError
from common.ruleset_engine.executor import RulesetExecutor
from common.ruleset_engine.models import ExecutionReport, Rule
from common.ruleset_engine.nodes import Expression
from common.ruleset_engine.parser import build_parse_cache, parse
from common.ruleset_engine.rule_text import split_rule_text
from stores.ruleset_store import RulesetStore, build_store

logger = structlog.get_logger(__name__)


class RulesetService:
    """Create, inspect and execute named rulesets.

    Rule text is split on THEN and both halves are parsed when a rule is
    added, so malformed expressions are rejected before any execution.
    """

    def __init__(self, store: Optional[RulesetStore] = None, config: Optional[EngineConfig] = None):
        self.config = config or get_engine_config()
        self.store = store if store is not None else build_store(self.config.store_path)
        self.parse_fn: Callable[[str], Expression] = (
            build_parse_cache(self.config.parse_cache_size) if self.config.parse_cache_size else parse
        )

    def _build_rule(self, ruleset: str, rule_text: str, output_variable: str) -> Rule:
        parts = split_rule_text(rule_text)
        self.parse_fn(parts.condition)
        self.parse_fn(parts.transformation)
        return Rule(
            ruleset=ruleset,
            condition=parts.condition,
            transformation=parts.transformation,
            output_variable=output_variable,
        )

    def create_ruleset(self, name: str, rules: Iterable[Tuple[str, str]]) -> List[Rule]:
        built = [self._build_rule(name, text, output_variable) for text, output_variable in rules]
        if not built:
            raise ValueError("A ruleset must contain at least one rule")
        duplicates = [var for var, count in Counter(r.output_variable for r in built).items() if count > 1]
        if duplicates:
            logger.warning("duplicate_output_variables", ruleset=name, output_variables=duplicates)
        created = self.store.create(name, built)
        logger.info("ruleset_created", ruleset=name, rule_count=len(created))
        return created

    def add_rule(self, name: str, rule_text: str, output_variable: str) -> Rule:
        rule = self._build_rule(name, rule_text, output_variable)
        if output_variable in {r.output_variable for r in self.store.get(name)}:
            logger.warning("duplicate_output_variables", ruleset=name, output_variables=[output_variable])
        self.store.append(name, rule)
        logger.info("rule_added", ruleset=name, rule_id=rule.rule_id)
        return rule

    def list_ruleset_names(self) -> List[str]:
        return self.store.names()

    def get_rules(self, name: str) -> List[Rule]:
        rules = self.store.get(name)
        if not rules:
            raise RulesetNotFoundError(name)
        return rules

    def ruleset_exists(self, name: str) -> bool:
        return bool(self.store.get(name))

    def rule_count(self, name: str) -> int:
        return len(self.store.get(name))

    def execute(
        self,
        name: str,
        facts: Mapping[str, Any],
        *,
        null_safe: Optional[bool] = None,
    ) -> ExecutionReport:
        executor = RulesetExecutor(
            self.get_rules(name),
            ruleset=name,
            null_safe=self.config.null_safe if null_safe is None else null_safe,
            parse_fn=self.parse_fn,
        )
        return executor.run(facts)
