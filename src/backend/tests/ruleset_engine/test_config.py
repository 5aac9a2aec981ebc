import pytest

from common.ruleset_engine.config import EngineConfig, get_engine_config


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for name in ("RULES_NULL_SAFE", "RULES_PARSE_CACHE_SIZE", "RULES_LOG_LEVEL", "RULES_STORE_PATH"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    assert get_engine_config() == EngineConfig()


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("RULES_NULL_SAFE", "false")
    monkeypatch.setenv("RULES_PARSE_CACHE_SIZE", "0")
    monkeypatch.setenv("RULES_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("RULES_STORE_PATH", " /tmp/rules.json ")
    cfg = get_engine_config()
    assert cfg.null_safe is False
    assert cfg.parse_cache_size == 0
    assert cfg.log_level == "debug"
    assert cfg.store_path == "/tmp/rules.json"


@pytest.mark.parametrize(
    "name, value",
    [
        ("RULES_NULL_SAFE", "maybe"),
        ("RULES_PARSE_CACHE_SIZE", "lots"),
        ("RULES_PARSE_CACHE_SIZE", "-1"),
        ("RULES_LOG_LEVEL", "loud"),
    ],
)
def test_invalid_values_name_the_variable(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        get_engine_config()
