"""Node catalog routes."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException

from ..models import NodeDefinition
from solflow.visual.catalog import list_definitions, lookup

router = APIRouter(prefix="/nodes", tags=["nodes"])


@router.get("", response_model=List[NodeDefinition])
async def list_nodes(category: Optional[str] = None):
    """List node definitions, optionally filtered by category."""
    return list_definitions(category)


@router.get("/{node_type}", response_model=NodeDefinition)
async def get_node(node_type: str):
    definition = lookup(node_type)
    if definition is None:
        raise HTTPException(status_code=404, detail=f"Unknown node type '{node_type}'")
    return definition
