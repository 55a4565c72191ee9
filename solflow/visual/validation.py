"""Static graph lint against the node catalog.

Nothing here is required to run a graph (the run controller reports problems
when it reaches them), but hosts use it to flag mistakes before running.
"""

from __future__ import annotations

from typing import Dict, List, Set

from ..adapters.inputs import is_missing
from ..compiler import compile_graph
from ..errors import CycleOrDisconnectedError
from .catalog import lookup
from .executor import get_handler
from .models import PortDataType, WorkflowGraph


def validate_graph(graph: WorkflowGraph) -> List[str]:
    """Return human-friendly problems found in `graph` (empty when valid)."""
    errors: List[str] = []
    nodes = {n.id: n for n in graph.nodes}

    for node in graph.nodes:
        if lookup(node.type) is None or get_handler(node.type) is None:
            errors.append(f"Node '{node.id}' has unknown type '{node.type}'.")

    wired: Dict[str, Set[str]] = {}
    for edge in graph.edges:
        source = nodes.get(edge.source)
        target = nodes.get(edge.target)
        if source is None:
            errors.append(f"Edge '{edge.id}' references missing source node '{edge.source}'.")
        if target is None:
            errors.append(f"Edge '{edge.id}' references missing target node '{edge.target}'.")
        if source is None or target is None:
            continue

        wired.setdefault(target.id, set()).add(edge.targetHandle)

        source_def = lookup(source.type)
        if source_def is not None and source_def.output_port(edge.sourceHandle) is None:
            errors.append(
                f"Edge '{edge.id}': node '{source.id}' ({source.type}) has no output '{edge.sourceHandle}'."
            )
        target_def = lookup(target.type)
        if target_def is not None and target_def.input_port(edge.targetHandle) is None:
            errors.append(
                f"Edge '{edge.id}': node '{target.id}' ({target.type}) has no input '{edge.targetHandle}'."
            )

    for node in graph.nodes:
        definition = lookup(node.type)
        if definition is None:
            continue
        connected = wired.get(node.id, set())
        for port in definition.inputs:
            if not port.required or port.defaultValue is not None:
                continue
            # RPC nodes fall back to the run's own connection.
            if port.dataType == PortDataType.CONNECTION:
                continue
            if port.id in connected or not is_missing(node.values.get(port.id)):
                continue
            errors.append(f"Node '{node.id}' ({node.type}): required input '{port.name}' is not connected.")

    try:
        compile_graph(graph)
    except CycleOrDisconnectedError as e:
        errors.append(str(e))

    return errors
