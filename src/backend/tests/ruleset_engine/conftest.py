import os
import sys


# Ensure `src/backend` is on sys.path so imports like `import common...` work.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../.."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import pytest

from common.ruleset_engine.context import ExecutionContext
from common.ruleset_engine.evaluator import Evaluator
from common.ruleset_engine.executor import RulesetExecutor
from common.ruleset_engine.models import Rule
from common.ruleset_engine.parser import parse


@pytest.fixture
def make_rule():
    def _make(condition: str, transformation: str, output_variable: str, *, ruleset: str = "test_ruleset") -> Rule:
        return Rule(
            ruleset=ruleset,
            condition=condition,
            transformation=transformation,
            output_variable=output_variable,
        )

    return _make


@pytest.fixture
def run_rules(make_rule):
    def _run(rules, facts, *, null_safe: bool = True):
        built = [make_rule(*r) if isinstance(r, tuple) else r for r in rules]
        return RulesetExecutor(built, ruleset="test_ruleset", null_safe=null_safe).run(facts).output_variables

    return _run


@pytest.fixture
def make_ctx():
    def _make(facts=None, derived=None) -> ExecutionContext:
        return ExecutionContext(facts=facts or {}, derived=dict(derived or {}))

    return _make


@pytest.fixture
def evaluate(make_ctx):
    evaluator = Evaluator()

    def _eval(text: str, facts=None, derived=None):
        return evaluator.evaluate(parse(text), make_ctx(facts, derived))

    return _eval
