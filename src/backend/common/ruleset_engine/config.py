from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class EngineConfig:
    null_safe: bool = True
    parse_cache_size: int = 512
    log_level: str = "info"
    # Empty means rulesets live in memory only.
    store_path: str = ""


def get_engine_config() -> EngineConfig:
    """
    Load engine configuration from environment variables (and a `.env` file).

    Reads:
      RULES_NULL_SAFE, RULES_PARSE_CACHE_SIZE, RULES_LOG_LEVEL, RULES_STORE_PATH
    """
    return EngineConfig(
        null_safe=_bool_env("RULES_NULL_SAFE", True),
        parse_cache_size=_int_env("RULES_PARSE_CACHE_SIZE", 512),
        log_level=_log_level_env("RULES_LOG_LEVEL", "info"),
        store_path=os.getenv("RULES_STORE_PATH", "").strip(),
    )


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got {raw!r}")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


def _log_level_env(name: str, default: str) -> str:
    raw = os.getenv(name, "").strip().lower() or default
    if raw not in {"debug", "info", "warning", "error", "critical"}:
        raise ValueError(f"{name} must be one of debug/info/warning/error/critical, got {raw!r}")
    return raw
