import pytest

from common.ruleset_engine.errors import EvalError, EvalErrorKind
from common.ruleset_engine.functions import default_registry


def call(name, *args):
    fn = default_registry.lookup(name)
    assert fn is not None, name
    return fn(list(args))


def test_lookup_unknown_function_returns_none():
    assert default_registry.lookup("NOPE") is None
    assert "UPPERCASE" in default_registry


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        default_registry._functions["EVIL"] = None  # type: ignore[index]


@pytest.mark.parametrize(
    "name, args, expected",
    [
        ("UPPERCASE", ("alice",), "ALICE"),
        ("UPPERCASE", (None,), None),
        ("LOWERCASE", ("JOHN",), "john"),
        ("LOWERCASE", (None,), None),
        ("SUBSTRING", ("Alexander", 0, 3), "Ale"),
        ("SUBSTRING", ("Alexander", 4), "ander"),
        ("SUBSTRING", (None, 0, 3), None),
        ("CONCAT", ("Hello, ", "world"), "Hello, world"),
        ("CONCAT", ("a", None, "b"), "ab"),
        ("CONCAT", (), ""),
        ("LENGTH", ("four",), 4),
        ("LENGTH", (None,), 0),
        ("CONTAINS", ("haystack", "st"), True),
        ("CONTAINS", ("haystack", "zz"), False),
        ("CONTAINS", (None, "a"), False),
        ("CONTAINS", ("a", None), False),
        ("STARTS_WITH", ("prefix", "pre"), True),
        ("STARTS_WITH", (None, "pre"), False),
        ("ENDS_WITH", ("suffix", "fix"), True),
        ("ENDS_WITH", ("suffix", None), False),
        ("TRIM", ("  padded \t", ), "padded"),
        ("TRIM", (None,), None),
    ],
)
def test_builtin_behaviour(name, args, expected):
    assert call(name, *args) == expected


@pytest.mark.parametrize(
    "args",
    [
        ("short", 0, 100),
        ("short", -1, 2),
        ("short", 3, 2),
        ("short", 6),
    ],
)
def test_substring_out_of_range_returns_input_unchanged(args):
    assert call("SUBSTRING", *args) == "short"


@pytest.mark.parametrize("s", ["", "a", "hello world", "ünïcödé"])
def test_substring_full_length_is_identity(s):
    assert call("SUBSTRING", s, 0, call("LENGTH", s)) == s


def test_string_prefixed_aliases():
    assert call("STRING_UPPERCASE", "x") == "X"
    assert call("STRING_LOWERCASE", "X") == "x"
    assert call("STRING_SUBSTRING", "abc", 1, 2) == "b"
    assert call("STRING_CONCAT", "a", "b") == "ab"
    assert default_registry.lookup("STRING_CONCAT") is default_registry.lookup("CONCAT")


def test_wrong_argument_count_is_arity_mismatch():
    with pytest.raises(EvalError) as info:
        call("UPPERCASE", "a", "b")
    assert info.value.kind is EvalErrorKind.ARITY_MISMATCH
    with pytest.raises(EvalError) as info:
        call("SUBSTRING", "a")
    assert info.value.kind is EvalErrorKind.ARITY_MISMATCH


@pytest.mark.parametrize(
    "name, args",
    [
        ("UPPERCASE", (42,)),
        ("CONCAT", ("a", 1)),
        ("LENGTH", ([1, 2],)),
        ("CONTAINS", ("abc", True)),
        ("SUBSTRING", ("abc", "0", 1)),
        ("SUBSTRING", ("abc", 0.5, 1)),
    ],
)
def test_non_string_arguments_are_type_mismatch(name, args):
    with pytest.raises(EvalError) as info:
        call(name, *args)
    assert info.value.kind is EvalErrorKind.TYPE_MISMATCH


def test_functions_listing_is_deduplicated():
    names = [fn.name for fn in default_registry.functions()]
    assert names == sorted(set(names))
    assert "STRING_CONCAT" not in names
    assert "STRING_CONCAT" in default_registry.names()
