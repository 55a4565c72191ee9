"""Graph lint routes."""

from __future__ import annotations

from fastapi import APIRouter

from ..models import WorkflowGraph
from solflow.visual.validation import validate_graph

router = APIRouter(prefix="/graphs", tags=["graphs"])


@router.post("/validate")
async def validate(graph: WorkflowGraph):
    """Validate a graph without executing it."""
    errors = validate_graph(graph)
    return {"valid": len(errors) == 0, "errors": errors}
