from __future__ import annotations

import json
import os
import tempfile
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Protocol

from common.ruleset_engine.errors import RulesetExistsError
from common.ruleset_engine.models import Rule


class RulesetStore(Protocol):
    def names(self) -> List[str]: ...

    def get(self, name: str) -> List[Rule]: ...

    def create(self, name: str, rules: List[Rule]) -> List[Rule]: ...

    def append(self, name: str, rule: Rule) -> Rule: ...


class InMemoryRulesetStore:
    """Rulesets keyed by name; rule order is insertion order."""

    def __init__(self):
        self._rulesets: Dict[str, List[Rule]] = {}
        self._lock = threading.Lock()

    def names(self) -> List[str]:
        with self._lock:
            return list(self._rulesets)

    def get(self, name: str) -> List[Rule]:
        with self._lock:
            return list(self._rulesets.get(name, []))

    def create(self, name: str, rules: List[Rule]) -> List[Rule]:
        with self._lock:
            if name in self._rulesets:
                raise RulesetExistsError(name)
            self._rulesets[name] = list(rules)
            return list(rules)

    def append(self, name: str, rule: Rule) -> Rule:
        with self._lock:
            self._rulesets.setdefault(name, []).append(rule)
            return rule


class JsonFileRulesetStore:
    """Rulesets persisted to a single JSON document, rewritten on every change."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def names(self) -> List[str]:
        with self._lock:
            return list(self._load())

    def get(self, name: str) -> List[Rule]:
        with self._lock:
            return self._load().get(name, [])

    def create(self, name: str, rules: List[Rule]) -> List[Rule]:
        with self._lock:
            data = self._load()
            if name in data:
                raise RulesetExistsError(name)
            data[name] = list(rules)
            self._save(data)
            return list(rules)

    def append(self, name: str, rule: Rule) -> Rule:
        with self._lock:
            data = self._load()
            data.setdefault(name, []).append(rule)
            self._save(data)
            return rule

    def _load(self) -> Dict[str, List[Rule]]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as handle:
            raw = json.loads(handle.read())
        rulesets = raw.get("rulesets") if isinstance(raw, dict) else None
        if not isinstance(rulesets, dict):
            return {}
        return {
            name: [Rule.model_validate(item) for item in items]
            for name, items in rulesets.items()
        }

    def _save(self, data: Dict[str, List[Rule]]) -> None:
        payload: Dict[str, Any] = {
            "rulesets": {name: [rule.model_dump() for rule in rules] for name, rules in data.items()},
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(prefix=".rulesets-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


def build_store(path: str = "") -> RulesetStore:
    if path:
        return JsonFileRulesetStore(path)
    return InMemoryRulesetStore()
