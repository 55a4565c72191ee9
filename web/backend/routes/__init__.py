"""Backend API routes."""

from .graphs import router as graphs_router
from .nodes import router as nodes_router
from .runs import router as runs_router
from .ws import router as ws_router

__all__ = ["graphs_router", "nodes_router", "runs_router", "ws_router"]
