from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


def _load_json(path: Path):
    with path.open(encoding="utf-8") as handle:
        return json.load(handle)


def load_ruleset_file(path: Path) -> tuple[str, list[tuple[str, str]]]:
    """Read `{"name": ..., "rules": [{"rule": ..., "output_variable": ...}]}`."""
    raw = _load_json(path)
    if not isinstance(raw, dict):
        raise SystemExit(f"{path}: expected a JSON object with 'name' and 'rules'.")
    name = str(raw.get("name") or path.stem)
    rules = raw.get("rules")
    if not isinstance(rules, list):
        raise SystemExit(f"{path}: 'rules' must be a list.")
    pairs: list[tuple[str, str]] = []
    for index, item in enumerate(rules):
        if not isinstance(item, dict) or "rule" not in item or "output_variable" not in item:
            raise SystemExit(f"{path}: rule #{index} needs 'rule' and 'output_variable'.")
        pairs.append((str(item["rule"]), str(item["output_variable"])))
    return name, pairs


def run_ruleset_files(ruleset_path: Path, facts_path: Path, *, null_safe: bool | None = None):
    _ensure_backend_on_path()
    from common.ruleset_engine.config import get_engine_config
    from services.ruleset_service import RulesetService
    from stores.ruleset_store import InMemoryRulesetStore

    name, rules = load_ruleset_file(ruleset_path)
    facts = _load_json(facts_path)
    if not isinstance(facts, dict):
        raise SystemExit(f"{facts_path}: facts must be a JSON object.")

    service = RulesetService(store=InMemoryRulesetStore(), config=get_engine_config())
    service.create_ruleset(name, rules)
    return service.execute(name, facts, null_safe=null_safe)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Execute a ruleset file against a facts file and print the output variables as JSON."
    )
    parser.add_argument("--ruleset-file", required=True, help="JSON file with 'name' and 'rules'.")
    parser.add_argument("--facts", required=True, help="JSON file holding the input facts object.")
    parser.add_argument(
        "--strict",
        action="store_false",
        dest="null_safe",
        default=None,
        help="Disable null-safe evaluation (missing properties abort the run).",
    )
    parser.add_argument("--output", default=None, help="Write the result JSON here instead of stdout.")
    parser.add_argument("--log-level", default="warning", help="Log level (default: warning).")
    args = parser.parse_args(argv)

    _ensure_backend_on_path()
    from common.ruleset_engine.errors import ExecutionError, ParseError, RuleFormatError
    from common.ruleset_engine.log_config import configure_logging

    configure_logging(args.log_level)

    try:
        report = run_ruleset_files(Path(args.ruleset_file), Path(args.facts), null_safe=args.null_safe)
    except (RuleFormatError, ParseError) as exc:
        print(f"Invalid rule: {exc}", file=sys.stderr)
        return 2
    except ExecutionError as exc:
        print(
            json.dumps(
                {
                    "error": "execution_error",
                    "rule_id": exc.rule_id,
                    "condition": exc.condition,
                    "transformation": exc.transformation,
                    "cause": str(exc.cause),
                },
                indent=2,
            ),
            file=sys.stderr,
        )
        return 1

    payload = {
        "output_variables": report.output_variables,
        "stats": report.stats.model_dump(),
    }
    text = json.dumps(payload, indent=2, sort_keys=True)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
