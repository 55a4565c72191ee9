"""Run execution and control routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from ..models import RunRequest, RunResult
from ..services.executor import execute_request, get_controller

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/runs", tags=["runs"])


@router.post("", response_model=RunResult)
async def start_run(request: RunRequest):
    """Execute a graph and return the result once it finishes.

    Rejected runs (another run in progress, cycle, no endpoint) come back with
    `success=False, started=False` rather than an HTTP error.
    """
    return await execute_request(request)


@router.get("/state")
async def run_state():
    return get_controller().state()


@router.post("/stop")
async def stop_run():
    """Ask the active run to stop before its next node."""
    stopped = get_controller().stop()
    return {"stopping": stopped, **get_controller().state()}
