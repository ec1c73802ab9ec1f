"""Command-line interface for abilitygraph.

Commands:
- nodes / pins: inspect the node registry
- validate / compile: check or compile a graph JSON file
- serve: run the HTTP service (FastAPI)
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, List, Optional

from .errors import AbilityGraphError
from .graph_ir import compile_graph, parse_graph, validate_graph
from .nodes.pins import materialize_pins
from .nodes.registry import NodeRegistry, get_registry, load_registry
from .visual.models import Severity, ValidationIssue


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="abilitygraph", add_help=True)
    p.add_argument("--registry", default=None, help="Node registry JSON (default: $ABILITYGRAPH_REGISTRY_PATH or bundled)")
    p.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "warning"))
    sub = p.add_subparsers(dest="command")

    nodes = sub.add_parser("nodes", help="List node definitions (JSON)")
    nodes.add_argument("--category", default=None, help="Only list this category")

    pins = sub.add_parser("pins", help="Print the materialized pins of a node type (JSON)")
    pins.add_argument("node_type", help="nodeType, e.g. IF")
    pins.add_argument("--config", default="{}", help="Node config as a JSON object")

    validate = sub.add_parser("validate", help="Validate a graph JSON file")
    validate.add_argument("graph", help="Path to graph JSON")

    comp = sub.add_parser("compile", help="Compile a graph JSON file to steps")
    comp.add_argument("graph", help="Path to graph JSON")
    comp.add_argument("--out", default=None, help="Write the result here instead of stdout")

    serve = sub.add_parser("serve", help="Run the HTTP service (FastAPI)")
    serve.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    serve.add_argument("--port", type=int, default=int(os.getenv("PORT", "8080")))
    serve.add_argument("--reload", action="store_true", help="Enable auto-reload (dev)")
    serve.add_argument("--log-level", default=argparse.SUPPRESS)

    return p


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def _issues_json(issues: List[ValidationIssue]) -> List[dict]:
    return [i.model_dump(mode="json", exclude_none=True) for i in issues]


def _has_errors(issues: List[ValidationIssue]) -> bool:
    return any(i.severity == Severity.ERROR for i in issues)


def _read_json(path: str) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def main(args: Optional[List[str]] = None) -> int:
    if args is None:
        args = sys.argv[1:]

    parser = _build_parser()
    ns = parser.parse_args(args)

    logging.basicConfig(level=str(ns.log_level).upper(), format="%(levelname)s %(name)s: %(message)s")

    if ns.command == "serve":
        try:
            import uvicorn  # type: ignore
        except Exception:
            sys.stderr.write(
                "Server dependencies are not installed.\n"
                "Install with: pip install \"abilitygraph[server]\"\n"
            )
            return 2

        if ns.registry:
            os.environ["ABILITYGRAPH_REGISTRY_PATH"] = str(ns.registry)

        uvicorn.run(
            "web.backend.main:app",
            host=str(ns.host),
            port=int(ns.port),
            reload=bool(ns.reload),
            log_level=str(ns.log_level).lower(),
        )
        return 0

    if ns.command is None:
        parser.print_help()
        return 0

    try:
        registry: NodeRegistry = load_registry(ns.registry) if ns.registry else get_registry()
    except AbilityGraphError as e:
        sys.stderr.write(f"{e}\n")
        return 2

    if ns.command == "nodes":
        defs = [d for d in registry if ns.category is None or d.category == ns.category]
        sys.stdout.write(_dump([d.model_dump(mode="json", exclude_none=True) for d in defs]))
        return 0

    if ns.command == "pins":
        if ns.node_type not in registry:
            sys.stderr.write(f"Unknown nodeType '{ns.node_type}'\n")
            return 2
        try:
            config = json.loads(ns.config)
        except json.JSONDecodeError as e:
            parser.error(f"--config is not valid JSON: {e}")
        if not isinstance(config, dict):
            parser.error("--config must be a JSON object")
        pins = materialize_pins(ns.node_type, config, registry)
        sys.stdout.write(_dump([p.model_dump(mode="json", exclude_none=True) for p in pins]))
        return 0

    if ns.command in ("validate", "compile"):
        try:
            raw = _read_json(ns.graph)
        except (OSError, json.JSONDecodeError) as e:
            sys.stderr.write(f"Failed to read graph {ns.graph}: {e}\n")
            return 2

        graph, shape_issues = parse_graph(raw)
        if graph is None:
            sys.stdout.write(_dump({"issues": _issues_json(shape_issues)}))
            return 1

        if ns.command == "validate":
            issues = shape_issues + validate_graph(graph, registry)
            sys.stdout.write(_dump({"issues": _issues_json(issues)}))
            return 1 if _has_errors(issues) else 0

        result = compile_graph(graph, registry)
        payload = result.model_dump(mode="json", exclude_none=True)
        payload["issues"] = _issues_json(shape_issues + result.issues)
        text = _dump(payload)
        if ns.out:
            Path(ns.out).write_text(text, encoding="utf-8")
            sys.stdout.write(str(ns.out) + "\n")
        else:
            sys.stdout.write(text)
        return 1 if result.has_errors else 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
