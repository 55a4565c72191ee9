"""Node input resolution and dispatch.

`resolve_node_inputs()` builds a node's input map from upstream results and the
node's own literal values. `dispatch_node()` looks the node type up in
`NODE_HANDLERS`, runs the handler (awaiting it when it is a coroutine) and
returns a `DispatchOutcome` instead of raising. `execute_node()` is the raising
form.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import inspect
import logging
import time
from typing import Any, Dict, Mapping, Optional, Sequence

from ..adapters import rpc_adapter, token_adapter, transaction_adapter, wallet_adapter
from ..errors import (
    ErrorKind,
    NodeExecutionError,
    NodeTimeoutError,
    UnknownNodeTypeError,
    UnresolvedInputError,
)
from .builtins import BUILTIN_HANDLERS, NodeHandler
from .models import GraphEdge, GraphNode

logger = logging.getLogger(__name__)


NODE_HANDLERS: Dict[str, NodeHandler] = {
    **rpc_adapter.HANDLERS,
    **wallet_adapter.HANDLERS,
    **transaction_adapter.HANDLERS,
    **token_adapter.HANDLERS,
    **BUILTIN_HANDLERS,
}


def get_handler(node_type: str) -> Optional[NodeHandler]:
    return NODE_HANDLERS.get(node_type)


def resolve_node_inputs(
    node: GraphNode,
    edges: Sequence[GraphEdge],
    results: Mapping[str, Dict[str, Any]],
    *,
    strict: bool = False,
) -> Dict[str, Any]:
    """Compute the input map for `node`.

    For each edge into the node, the source's recorded output under
    `sourceHandle` is bound to `targetHandle` (a present key wins even when its
    value is None). When the key is absent, the first output of the source is
    used instead, or `UnresolvedInputError` is raised when `strict` is set.
    Sources without a recorded result contribute nothing.

    The node's literal `values` are applied last and win on collision.
    """
    inputs: Dict[str, Any] = {}

    for edge in edges:
        if edge.target != node.id:
            continue
        source_outputs = results.get(edge.source)
        if source_outputs is None:
            continue

        if edge.sourceHandle in source_outputs:
            inputs[edge.targetHandle] = source_outputs[edge.sourceHandle]
            continue

        if strict:
            raise UnresolvedInputError(
                source=edge.source,
                source_handle=edge.sourceHandle,
                target=edge.target,
                target_handle=edge.targetHandle,
            )
        if source_outputs:
            first_key = next(iter(source_outputs))
            logger.debug(
                "Edge %s: output '%s' missing on '%s', falling back to '%s'",
                edge.id,
                edge.sourceHandle,
                edge.source,
                first_key,
            )
            inputs[edge.targetHandle] = source_outputs[first_key]

    inputs.update(node.values or {})
    return inputs


@dataclass
class DispatchOutcome:
    """Tagged result of dispatching one node: outputs on success, error otherwise."""

    node_id: str
    outputs: Optional[Dict[str, Any]] = None
    error: Optional[NodeExecutionError] = None
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> Dict[str, Any]:
        if self.error is not None:
            raise self.error
        return dict(self.outputs or {})


async def dispatch_node(
    node: GraphNode,
    context: Any,
    inputs: Dict[str, Any],
    *,
    timeout_s: Optional[float] = None,
) -> DispatchOutcome:
    """Run the handler for `node.type` and wrap any failure in `NodeExecutionError`.

    Args:
        node: Graph node to execute.
        context: The run's `ExecutionContext`.
        inputs: Resolved input map (see `resolve_node_inputs`).
        timeout_s: Optional upper bound for asynchronous handlers.

    Returns:
        DispatchOutcome with either `outputs` or `error` set.
    """
    started = time.perf_counter()
    try:
        handler = NODE_HANDLERS.get(node.type)
        if handler is None:
            raise UnknownNodeTypeError(node.type)

        result = handler(inputs, context)
        if inspect.isawaitable(result):
            if timeout_s:
                try:
                    result = await asyncio.wait_for(result, timeout_s)
                except asyncio.TimeoutError as e:
                    raise NodeTimeoutError(node.id, timeout_s) from e
            else:
                result = await result

        if not isinstance(result, dict):
            raise TypeError(f"Handler for '{node.type}' returned {type(result).__name__}, expected a dict")
        outputs = dict(result)
    except Exception as e:
        duration_ms = (time.perf_counter() - started) * 1000.0
        return DispatchOutcome(
            node_id=node.id,
            error=NodeExecutionError(node.id, e, node_type=node.type),
            duration_ms=duration_ms,
        )

    duration_ms = (time.perf_counter() - started) * 1000.0
    logger.debug("Node %s (%s) finished in %.1fms", node.id, node.type, duration_ms)
    return DispatchOutcome(node_id=node.id, outputs=outputs, duration_ms=duration_ms)


async def execute_node(
    node: GraphNode,
    context: Any,
    inputs: Dict[str, Any],
    *,
    timeout_s: Optional[float] = None,
) -> Dict[str, Any]:
    """Raising form of `dispatch_node()`.

    Raises:
        NodeExecutionError: wrapping whatever the handler raised.
    """
    outcome = await dispatch_node(node, context, inputs, timeout_s=timeout_s)
    return outcome.unwrap()
