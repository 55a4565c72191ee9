"""Graph execution service (web backend).

This module is intentionally thin: the portable implementation lives in
`solflow.runner` so graphs can run from non-web hosts (CLI, scripts). The
backend keeps one process-wide `RunController`, so only one run executes at a
time across HTTP and WebSocket clients.
"""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import Optional

import httpx

from solflow.config import EngineSettings
from solflow.runner import EventCallback, RunController, run_graph
from solflow.visual.models import RunRequest, RunResult
from solflow.wallet import wallet_from_keypair_path

logger = logging.getLogger(__name__)

_controller = RunController()

# Outbound HTTP transport override (tests plug an httpx.MockTransport in here).
_transport: Optional[httpx.AsyncBaseTransport] = None


def get_controller() -> RunController:
    return _controller


def settings_for(request: RunRequest) -> EngineSettings:
    """Environment settings with per-request overrides applied."""
    settings = EngineSettings.from_env()
    if request.strictHandles is not None:
        settings = replace(settings, strict_handles=bool(request.strictHandles))
    if request.nodeTimeoutS:
        settings = replace(settings, node_timeout_s=float(request.nodeTimeoutS))
    return settings


async def execute_request(request: RunRequest, on_event: Optional[EventCallback] = None) -> RunResult:
    """Run `request.graph` on the shared controller and return its RunResult."""
    settings = settings_for(request)
    try:
        wallet = wallet_from_keypair_path(settings.keypair_path)
    except ValueError as e:
        logger.warning("Ignoring unusable keypair: %s", e)
        wallet = None

    return await run_graph(
        request.graph,
        endpoint=request.endpoint,
        wallet=wallet,
        settings=settings,
        controller=_controller,
        on_event=on_event,
        transport=_transport,
    )
