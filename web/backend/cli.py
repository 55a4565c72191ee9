"""Local/dev runner for the SolFlow web backend (`python -m web.backend.cli`)."""

from __future__ import annotations

import argparse
import logging
import os

import uvicorn

from solflow.config import resolve_log_level_from_env, resolve_rpc_endpoint_from_env


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="python -m web.backend.cli", add_help=True)
    p.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"))
    p.add_argument("--port", type=int, default=int(os.getenv("PORT", "8080")))
    p.add_argument("--reload", action="store_true", help="Enable auto-reload (dev)")
    p.add_argument("--log-level", default=resolve_log_level_from_env())
    p.add_argument("--endpoint", default="", help="Default RPC endpoint or cluster alias for runs")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)

    if isinstance(args.endpoint, str) and args.endpoint.strip():
        os.environ.setdefault("SOLFLOW_RPC_ENDPOINT", args.endpoint.strip())

    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.INFO))
    logging.getLogger(__name__).info("Default RPC endpoint: %s", resolve_rpc_endpoint_from_env() or "(none)")

    uvicorn.run(
        "web.backend.main:app",
        host=str(args.host),
        port=int(args.port),
        reload=bool(args.reload),
        log_level=str(args.log_level).lower(),
    )


if __name__ == "__main__":
    main()
