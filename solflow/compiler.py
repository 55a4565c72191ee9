"""Execution-order compiler: linearizes a node/edge graph with Kahn's algorithm."""

from __future__ import annotations

from collections import deque
import logging
from typing import Deque, Dict, List, Sequence

from .errors import CycleOrDisconnectedError
from .visual.models import GraphEdge, GraphNode, WorkflowGraph

logger = logging.getLogger(__name__)


def compile_execution_order(nodes: Sequence[GraphNode], edges: Sequence[GraphEdge]) -> List[str]:
    """Return node ids in a valid dependency order.

    Ties are broken by queue (FIFO) order seeded from the node array, so the
    same graph always yields the same order.

    An edge whose source is not a node of the graph still counts toward its
    target's in-degree; that target can never become ready and is reported
    together with cycle members.

    Raises:
        CycleOrDisconnectedError: if some nodes cannot be ordered.
    """
    adjacency: Dict[str, List[str]] = {n.id: [] for n in nodes}
    in_degree: Dict[str, int] = {n.id: 0 for n in nodes}

    for edge in edges:
        if edge.target not in in_degree:
            logger.warning("Ignoring edge %s: unknown target node '%s'", edge.id, edge.target)
            continue
        successors = adjacency.get(edge.source)
        if successors is not None:
            successors.append(edge.target)
        in_degree[edge.target] += 1

    queue: Deque[str] = deque(node_id for node_id, degree in in_degree.items() if degree == 0)
    order: List[str] = []

    while queue:
        node_id = queue.popleft()
        order.append(node_id)
        for successor in adjacency[node_id]:
            in_degree[successor] -= 1
            if in_degree[successor] == 0:
                queue.append(successor)

    if len(order) != len(in_degree):
        ordered = set(order)
        raise CycleOrDisconnectedError(n.id for n in nodes if n.id not in ordered)

    return order


def compile_graph(graph: WorkflowGraph) -> List[str]:
    """Convenience wrapper for a whole `WorkflowGraph`."""
    return compile_execution_order(graph.nodes, graph.edges)


__all__ = ["compile_execution_order", "compile_graph"]
