import json

import pytest

from common.ruleset_engine.errors import RulesetExistsError
from common.ruleset_engine.models import Rule
from stores.ruleset_store import InMemoryRulesetStore, JsonFileRulesetStore, build_store


def _rule(output_variable: str, ruleset: str = "rs") -> Rule:
    return Rule(ruleset=ruleset, condition="true", transformation='"x"', output_variable=output_variable)


@pytest.fixture(params=["memory", "json"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryRulesetStore()
    return JsonFileRulesetStore(str(tmp_path / "rulesets.json"))


def test_create_and_get_preserves_order(store):
    rules = [_rule("c"), _rule("a"), _rule("b")]
    store.create("rs", rules)
    assert [r.output_variable for r in store.get("rs")] == ["c", "a", "b"]
    assert store.names() == ["rs"]


def test_create_duplicate_name_fails(store):
    store.create("rs", [_rule("a")])
    with pytest.raises(RulesetExistsError):
        store.create("rs", [_rule("b")])


def test_append_creates_missing_ruleset(store):
    store.append("new", _rule("a", ruleset="new"))
    store.append("new", _rule("b", ruleset="new"))
    assert [r.output_variable for r in store.get("new")] == ["a", "b"]


def test_get_unknown_is_empty(store):
    assert store.get("ghost") == []


def test_json_store_persists_between_instances(tmp_path):
    path = str(tmp_path / "rulesets.json")
    original = _rule("a")
    JsonFileRulesetStore(path).create("rs", [original])
    reloaded = JsonFileRulesetStore(path).get("rs")
    assert reloaded == [original]
    with open(path, encoding="utf-8") as handle:
        raw = json.load(handle)
    assert raw["rulesets"]["rs"][0]["rule_id"] == original.rule_id
    assert "updated_at" in raw


def test_build_store_picks_backend(tmp_path):
    assert isinstance(build_store(""), InMemoryRulesetStore)
    assert isinstance(build_store(str(tmp_path / "x.json")), JsonFileRulesetStore)


def test_json_store_failed_write_keeps_previous_file(tmp_path, monkeypatch):
    path = tmp_path / "rulesets.json"
    store = JsonFileRulesetStore(str(path))
    store.create("rs", [_rule("a")])
    before = path.read_text(encoding="utf-8")

    def _broken_dump(payload, handle, **kwargs):
        handle.write('{"rulesets": {')
        raise OSError("disk full")

    monkeypatch.setattr("stores.ruleset_store.json.dump", _broken_dump)
    with pytest.raises(OSError):
        store.append("rs", _rule("b"))
    monkeypatch.undo()

    assert path.read_text(encoding="utf-8") == before
    assert [r.output_variable for r in store.get("rs")] == ["a"]
    assert [p.name for p in tmp_path.iterdir()] == ["rulesets.json"]
