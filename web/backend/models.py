"""Web backend models.

The web backend re-exports the portable models from `solflow.visual.models`
so other hosts (CLI, scripts) can reuse the same JSON schema without importing
the backend package.
"""

from __future__ import annotations

from solflow.visual.models import (  # noqa: F401
    ExecutionEvent,
    GraphEdge,
    GraphNode,
    NodeDefinition,
    NodeRunState,
    Port,
    Position,
    RunRequest,
    RunResult,
    WorkflowGraph,
)
