from __future__ import annotations

import argparse
import json
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .functions import FunctionRegistry, default_registry
from .methods import BUILTIN_METHODS


class CatalogEntry(BaseModel):
    kind: Literal["function", "method"]
    name: str
    arity: str
    description: str = ""
    aliases: List[str] = Field(default_factory=list)
    receivers: List[str] = Field(default_factory=list)


def build_catalog(registry: Optional[FunctionRegistry] = None) -> List[CatalogEntry]:
    registry = registry or default_registry
    entries: List[CatalogEntry] = [
        CatalogEntry(
            kind="function",
            name=fn.name,
            arity=fn.arity,
            description=fn.description,
            aliases=list(fn.aliases),
        )
        for fn in registry.functions()
    ]
    for name in sorted(BUILTIN_METHODS):
        method = BUILTIN_METHODS[name]
        arity = str(method.min_args) if method.min_args == method.max_args else f"{method.min_args}-{method.max_args}"
        entries.append(
            CatalogEntry(
                kind="method",
                name=name,
                arity=arity,
                description=method.description,
                receivers=sorted(kind.value for kind in method.receivers),
            )
        )
    return entries


def render_catalog(entries: List[CatalogEntry], fmt: str = "json") -> str:
    """Serialise catalog entries; YAML output needs the optional `yaml` extra."""
    rows = [entry.model_dump() for entry in entries]
    if fmt == "json":
        return json.dumps(rows, indent=2, sort_keys=True)
    if fmt != "yaml":
        raise ValueError(f"Unsupported catalog format: {fmt}")
    try:
        import yaml  # type: ignore
    except ModuleNotFoundError as exc:
        raise SystemExit("YAML output needs PyYAML: pip install 'ruleset-engine[yaml]'") from exc
    return yaml.safe_dump(rows, sort_keys=True)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="List the functions and value methods available to rule expressions.")
    parser.add_argument("--format", choices=("json", "yaml"), default="json")
    parser.add_argument("--kind", choices=("function", "method"), help="Only list one kind of entry.")
    args = parser.parse_args(argv)

    entries = [e for e in build_catalog() if args.kind is None or e.kind == args.kind]
    print(render_catalog(entries, args.format))


if __name__ == "__main__":
    main()
