"""Command-line interface for SolFlow.

- `solflow run GRAPH.json`: execute a graph once and print per-node results
- `solflow validate GRAPH.json`: lint a graph against the node catalog
- `solflow nodes`: list the node catalog
- `solflow serve`: start the web backend (FastAPI)
"""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
import json
import logging
import os
from pathlib import Path
import sys
from typing import List, Optional

from pydantic import ValidationError

from .config import EngineSettings, resolve_log_level_from_env
from .runner import run_graph
from .serialization import json_safe
from .visual.catalog import list_definitions
from .visual.models import ExecutionEvent, NodeCategory, WorkflowGraph
from .visual.validation import validate_graph
from .wallet import wallet_from_keypair_path

EXIT_OK = 0
EXIT_ABORTED = 1
EXIT_PREFLIGHT = 2


def load_graph(path: str) -> WorkflowGraph:
    """Load a graph JSON file (plain interchange format or an editor workspace export)."""
    raw = json.loads(Path(path).expanduser().read_text(encoding="utf-8"))
    return WorkflowGraph.model_validate(raw)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="solflow", add_help=True)
    p.add_argument("--log-level", default=resolve_log_level_from_env())
    sub = p.add_subparsers(dest="command")

    run = sub.add_parser("run", help="Execute a graph JSON file")
    run.add_argument("graph", help="Path to graph JSON (or an editor workspace export)")
    run.add_argument(
        "--endpoint",
        default=None,
        help="RPC endpoint URL or cluster alias (default: SOLFLOW_RPC_ENDPOINT, then the graph's rpcEndpoint)",
    )
    run.add_argument("--keypair", default=None, help="Solana CLI keypair JSON used for signing (default: SOLFLOW_KEYPAIR_PATH)")
    run.add_argument("--strict-handles", action="store_true", help="Fail when a wired output is missing instead of falling back")
    run.add_argument("--node-timeout", type=float, default=None, help="Per-node timeout in seconds")
    run.add_argument("--json", action="store_true", help="Print the full RunResult as JSON")

    validate = sub.add_parser("validate", help="Lint a graph JSON file against the node catalog")
    validate.add_argument("graph", help="Path to graph JSON")

    nodes = sub.add_parser("nodes", help="List available node types")
    nodes.add_argument("--category", default=None, choices=[c.value for c in NodeCategory])
    nodes.add_argument("--json", action="store_true", help="Print full definitions as JSON")

    serve = sub.add_parser("serve", help="Run the web backend (FastAPI)")
    serve.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    serve.add_argument("--port", type=int, default=int(os.getenv("PORT", "8080")))
    serve.add_argument("--reload", action="store_true", help="Enable auto-reload (dev)")

    return p


def _print_event(event: ExecutionEvent) -> None:
    if event.type == "node_complete":
        sys.stdout.write(f"[ok]    {event.nodeId}: {json.dumps(event.result, default=str)}\n")
    elif event.type == "node_error":
        sys.stdout.write(f"[error] {event.nodeId}: {event.error}\n")


def _cmd_run(ns: argparse.Namespace) -> int:
    try:
        graph = load_graph(ns.graph)
    except (OSError, ValueError, ValidationError) as e:
        sys.stderr.write(f"Could not load graph: {e}\n")
        return EXIT_PREFLIGHT

    settings = EngineSettings.from_env()
    settings = replace(
        settings,
        keypair_path=ns.keypair or settings.keypair_path,
        strict_handles=bool(ns.strict_handles) or settings.strict_handles,
        node_timeout_s=ns.node_timeout if ns.node_timeout else settings.node_timeout_s,
    )
    try:
        wallet = wallet_from_keypair_path(settings.keypair_path)
    except ValueError as e:
        sys.stderr.write(f"{e}\n")
        return EXIT_PREFLIGHT

    on_event = None if ns.json else _print_event
    result = asyncio.run(run_graph(graph, endpoint=ns.endpoint, wallet=wallet, settings=settings, on_event=on_event))

    if ns.json:
        sys.stdout.write(result.model_dump_json(indent=2) + "\n")
    else:
        for display in result.displays:
            sys.stdout.write(f"[display] {display['nodeId']}: {json.dumps(display['value'], default=str)}\n")
        if result.success:
            sys.stdout.write(f"Completed {len(result.order)} node(s) in {result.durationMs or 0:.0f}ms\n")
        else:
            sys.stderr.write(f"Run {result.status.value}: {result.error}\n")

    if not result.started:
        return EXIT_PREFLIGHT
    return EXIT_OK if result.success else EXIT_ABORTED


def _cmd_validate(ns: argparse.Namespace) -> int:
    try:
        graph = load_graph(ns.graph)
    except (OSError, ValueError, ValidationError) as e:
        sys.stderr.write(f"Could not load graph: {e}\n")
        return EXIT_PREFLIGHT

    problems = validate_graph(graph)
    for problem in problems:
        sys.stdout.write(f"- {problem}\n")
    if problems:
        return 1
    sys.stdout.write(f"OK: {len(graph.nodes)} node(s), {len(graph.edges)} edge(s)\n")
    return 0


def _cmd_nodes(ns: argparse.Namespace) -> int:
    definitions = list_definitions(ns.category)
    if ns.json:
        sys.stdout.write(json.dumps(json_safe([d.model_dump() for d in definitions]), indent=2) + "\n")
        return 0
    for d in definitions:
        sys.stdout.write(f"{d.type:<24} {d.category.value:<12} {d.label}\n")
    return 0


def _cmd_serve(ns: argparse.Namespace) -> int:
    try:
        import uvicorn  # type: ignore
    except Exception:
        sys.stderr.write(
            "Server dependencies are not installed.\n"
            "Install with: pip install \"solflow[server]\"\n"
        )
        return 2

    # Validate backend import early so we can give a clear error message.
    try:
        import web.backend.main  # noqa: F401
    except Exception as e:
        sys.stderr.write(
            "Failed to import the web backend.\n"
            f"Error: {e}\n"
            "Install with: pip install \"solflow[server]\"\n"
        )
        return 2

    uvicorn.run(
        "web.backend.main:app",
        host=str(ns.host),
        port=int(ns.port),
        reload=bool(ns.reload),
        log_level=str(ns.log_level).lower(),
    )
    return 0


def main(args: Optional[List[str]] = None) -> int:
    if args is None:
        args = sys.argv[1:]

    parser = _build_parser()
    ns = parser.parse_args(args)
    _configure_logging(ns.log_level)

    if ns.command == "run":
        return _cmd_run(ns)
    if ns.command == "validate":
        return _cmd_validate(ns)
    if ns.command == "nodes":
        return _cmd_nodes(ns)
    if ns.command == "serve":
        return _cmd_serve(ns)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
