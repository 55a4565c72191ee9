"""WebSocket route for real-time run updates."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ..models import ExecutionEvent, RunRequest
from ..services.executor import execute_request, get_controller

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


@router.websocket("/ws")
async def websocket_execution(websocket: WebSocket):
    """Run graphs and stream `ExecutionEvent`s.

    Runs execute in a background task so the socket keeps reading while a run
    is in progress.

    Client messages:
    - `{"type": "run", "graph": {...}, "endpoint": "devnet"}`
    - `{"type": "stop"}`: stop the active run before its next node
    - `{"type": "ping"}` -> `{"type": "pong"}`
    """
    await websocket.accept()
    runs: Set[asyncio.Task] = set()

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
                if not isinstance(message, dict):
                    raise ValueError("message must be a JSON object")
            except ValueError:
                await _send_event(websocket, ExecutionEvent(type="flow_error", error="Message must be a JSON object"))
                continue

            if message.get("type") == "run":
                task = asyncio.create_task(execute_with_updates(websocket, message))
                runs.add(task)
                task.add_done_callback(runs.discard)
            elif message.get("type") == "stop":
                get_controller().stop()
            elif message.get("type") == "ping":
                await websocket.send_json({"type": "pong"})

    except WebSocketDisconnect:
        logger.debug("WebSocket client disconnected")
    finally:
        for task in list(runs):
            task.cancel()
        if runs:
            await asyncio.gather(*runs, return_exceptions=True)


async def _send_event(websocket: WebSocket, event: ExecutionEvent) -> None:
    await websocket.send_json(event.model_dump(mode="json"))


async def execute_with_updates(websocket: WebSocket, message: Dict[str, Any]) -> None:
    """Execute the graph in `message` and forward run events to the client."""
    try:
        request = RunRequest.model_validate({k: v for k, v in message.items() if k != "type"})
    except ValidationError as e:
        await _send_event(websocket, ExecutionEvent(type="flow_error", error=f"Invalid run request: {e}"))
        return

    async def forward(event: ExecutionEvent) -> None:
        await _send_event(websocket, event)

    result = await execute_request(request, on_event=forward)
    if not result.started:
        # The controller never emitted anything; tell the client why.
        await _send_event(
            websocket,
            ExecutionEvent(type="flow_error", error=result.error, errorKind=result.errorKind),
        )
