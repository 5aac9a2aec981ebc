import pytest

from common.ruleset_engine.context import ExecutionContext
from common.ruleset_engine.errors import EvalError, EvalErrorKind
from common.ruleset_engine.evaluator import Evaluator
from common.ruleset_engine.parser import parse


def _kind(exc_info) -> EvalErrorKind:
    return exc_info.value.kind


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1 == 1.0", True),
        ('"a" == "a"', True),
        ('1 == "1"', False),
        ("true == 1", False),
        ("null == null", True),
        ("missing == null", True),
        ('name != null', True),
        ("tags == tags", True),
        ("5 > 3", True),
        ("2.5 <= 2", False),
        ('"apple" < "banana"', True),
        ("age >= 18 AND age < 65", True),
        ("age >= 65 OR age <= 12", False),
        ("NOT (age > 30)", True),
        ("!active", False),
    ],
)
def test_operators(evaluate, text, expected):
    facts = {"name": "x", "age": 25, "active": True, "tags": ["a", {"k": 1}]}
    assert evaluate(text, facts) is expected


def test_structural_equality_on_collections(evaluate):
    facts = {"a": [1, {"k": "v"}], "b": [1, {"k": "v"}], "c": [1, {"k": "w"}]}
    assert evaluate("a == b", facts) is True
    assert evaluate("a == c", facts) is False


def test_and_or_short_circuit(evaluate):
    # Right side would be a type mismatch if evaluated.
    assert evaluate("false AND 1", {}) is False
    assert evaluate("true OR 1", {}) is True


def test_logical_operators_require_booleans(evaluate):
    with pytest.raises(EvalError) as info:
        evaluate("age AND true", {"age": 3})
    assert _kind(info) is EvalErrorKind.TYPE_MISMATCH
    with pytest.raises(EvalError) as info:
        evaluate("NOT name", {"name": "x"})
    assert _kind(info) is EvalErrorKind.TYPE_MISMATCH


def test_relational_requires_matching_kinds(evaluate):
    with pytest.raises(EvalError) as info:
        evaluate('age > "10"', {"age": 3})
    assert _kind(info) is EvalErrorKind.TYPE_MISMATCH
    with pytest.raises(EvalError) as info:
        evaluate("flag > 1", {"flag": True})
    assert _kind(info) is EvalErrorKind.TYPE_MISMATCH


@pytest.mark.parametrize(
    "text",
    ["age >= 18", "missing.length()", "missing + 1", "missing AND true", "NOT missing", "-missing"],
)
def test_dereferencing_null_is_null_property_access(evaluate, text):
    with pytest.raises(EvalError) as info:
        evaluate(text, {})
    assert _kind(info) is EvalErrorKind.NULL_PROPERTY_ACCESS


def test_unresolved_path_evaluates_to_null(evaluate):
    assert evaluate("user.profile.name", {"user": {}}) is None


@pytest.mark.parametrize(
    "text, expected",
    [
        ("age + 10", 35),
        ("age - 30", -5),
        ("age * 2", 50),
        ("age / 5", 5),
        ("age / 2", 12),
        ("-age / 2", -12),
        ("age / 2.0", 12.5),
        ("age % 7", 4),
        ("-age % 7", -4),
        ("age % -7", 4),
        ("-7.5 % 2", -1.5),
        ("price * 2", 59.98),
        ('"n=" + age', "n=25"),
        ('name + " " + name', "x x"),
        ("-age + 1", -24),
    ],
)
def test_arithmetic(evaluate, text, expected):
    assert evaluate(text, {"age": 25, "price": 29.99, "name": "x"}) == expected


def test_integer_division_stays_integer(evaluate):
    assert isinstance(evaluate("age / 5", {"age": 25}), int)
    assert isinstance(evaluate("age / 2", {"age": 25}), int)


def test_division_by_zero(evaluate):
    with pytest.raises(EvalError) as info:
        evaluate("age / 0", {"age": 1})
    assert _kind(info) is EvalErrorKind.DIVISION_BY_ZERO


def test_arithmetic_type_mismatch(evaluate):
    with pytest.raises(EvalError) as info:
        evaluate("flag + 1", {"flag": True})
    assert _kind(info) is EvalErrorKind.TYPE_MISMATCH


@pytest.mark.parametrize(
    "text, expected",
    [
        ("name.length()", 9),
        ("name.toUpperCase()", "ALEXANDER"),
        ("name.toLowerCase()", "alexander"),
        ("name.substring(0, 3)", "Ale"),
        ("name.substring(1)", "lexander"),
        ("name.substring(0, 100)", "Alexander"),
        ("orders.size()", 2),
        ("company.size()", 2),
        ("age.toString()", "25"),
        ("price.toString()", "79.99"),
        ("active.toString()", "true"),
        ('"  x ".trim()', "x"),
        ('name.contains("xan")', True),
        ('name.startsWith("Al")', True),
        ('name.endsWith("er")', True),
        ("orders.isEmpty()", False),
        ('"".isEmpty()', True),
        ("name.substring(0, 1).toUpperCase()", "A"),
    ],
)
def test_methods(evaluate, text, expected):
    facts = {
        "name": "Alexander",
        "age": 25,
        "price": 79.99,
        "active": True,
        "orders": [{"id": 1}, {"id": 2}],
        "company": {"name": "TechCorp", "active": True},
    }
    assert evaluate(text, facts) == expected


def test_method_errors(evaluate):
    facts = {"name": "x", "items": [1]}
    with pytest.raises(EvalError) as info:
        evaluate("items.length()", facts)
    assert _kind(info) is EvalErrorKind.TYPE_MISMATCH
    with pytest.raises(EvalError) as info:
        evaluate("name.explode()", facts)
    assert _kind(info) is EvalErrorKind.UNKNOWN_METHOD
    with pytest.raises(EvalError) as info:
        evaluate("name.substring()", facts)
    assert _kind(info) is EvalErrorKind.ARITY_MISMATCH


def test_function_calls(evaluate):
    facts = {"name": "jOHN"}
    text = "CONCAT(UPPERCASE(SUBSTRING(name, 0, 1)), LOWERCASE(SUBSTRING(name, 1, name.length())))"
    assert evaluate(text, facts) == "John"


def test_unknown_function(evaluate):
    with pytest.raises(EvalError) as info:
        evaluate("SHOUT(name)", {"name": "x"})
    assert _kind(info) is EvalErrorKind.UNKNOWN_FUNCTION


def test_function_names_are_not_resolved_from_context(evaluate):
    # A fact named like a function does not shadow the registry.
    assert evaluate("UPPERCASE(UPPERCASE)", {"UPPERCASE": "shadow"}) == "SHADOW"


def test_subscript_on_computed_receiver(evaluate):
    facts = {"user": {"profile": {"name": "z"}}}
    assert evaluate("(user).profile.name", facts) == "z"


def test_condition_must_be_boolean():
    evaluator = Evaluator()
    ctx = ExecutionContext(facts={"age": 5})
    with pytest.raises(EvalError) as info:
        evaluator.evaluate_condition(parse("age"), ctx)
    assert _kind(info) is EvalErrorKind.TYPE_MISMATCH
    with pytest.raises(EvalError) as info:
        evaluator.evaluate_condition(parse("missing"), ctx)
    assert _kind(info) is EvalErrorKind.NULL_PROPERTY_ACCESS
    assert evaluator.evaluate_condition(parse("age == 5"), ctx) is True
