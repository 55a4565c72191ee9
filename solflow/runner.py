"""RunController - executes a workflow graph once, in dependency order.

One controller enforces "at most one run at a time". Each run gets its own
`RunSession` holding the result store, per-node states and captured
presentation output. A run halts at the first node failure; nodes after it are
left untouched so "failed", "never reached" and "succeeded" stay
distinguishable.
"""

from __future__ import annotations

import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import httpx

from .compiler import compile_graph
from .config import EngineSettings, normalize_endpoint
from .context import ExecutionContext
from .errors import MissingEndpointError, NodeExecutionError, UnresolvedInputError, WorkflowError, error_kind_of
from .serialization import json_safe
from .visual.builtins import PRESENTATION_NODE_TYPES
from .visual.executor import DispatchOutcome, dispatch_node, resolve_node_inputs
from .visual.models import (
    ExecutionEvent,
    GraphNode,
    NodeRunState,
    NodeStatus,
    RunResult,
    RunStatus,
    WorkflowGraph,
)
from .wallet import WalletIdentity

logger = logging.getLogger(__name__)

EventCallback = Callable[[ExecutionEvent], Union[None, Awaitable[None]]]


class RunSession:
    """State of a single run: result store, node states, captured output."""

    def __init__(self, graph: WorkflowGraph, order: List[str]):
        self.graph = graph
        self.order = list(order)
        self.results: Dict[str, Dict[str, Any]] = {}
        self.node_states: Dict[str, NodeRunState] = {node_id: NodeRunState() for node_id in self.order}
        self.displays: List[Dict[str, Any]] = []
        self.logs: List[Dict[str, Any]] = []
        self.failure: Optional[NodeExecutionError] = None
        self.stopped = False
        self._started = time.perf_counter()
        self.duration_ms: Optional[float] = None

    @property
    def status(self) -> RunStatus:
        if self.failure is not None or self.stopped:
            return RunStatus.ABORTED
        return RunStatus.COMPLETED

    @property
    def failed_node_id(self) -> Optional[str]:
        return self.failure.node_id if self.failure is not None else None

    def mark_executing(self, node_id: str) -> None:
        self.node_states[node_id] = NodeRunState(status=NodeStatus.EXECUTING)

    def record_success(self, node: GraphNode, outcome: DispatchOutcome, inputs: Optional[Dict[str, Any]] = None) -> None:
        outputs = dict(outcome.outputs or {})
        self.results[node.id] = outputs
        self.node_states[node.id] = NodeRunState(
            status=NodeStatus.SUCCEEDED,
            result=json_safe(outputs),
            durationMs=outcome.duration_ms,
        )
        if node.type in PRESENTATION_NODE_TYPES:
            self._capture(node, outputs, inputs or {})

    def record_failure(self, node: GraphNode, outcome: DispatchOutcome) -> None:
        error = outcome.error
        self.failure = error
        self.node_states[node.id] = NodeRunState(
            status=NodeStatus.FAILED,
            error=str(error),
            errorKind=outcome.kind.value if outcome.kind else None,
            durationMs=outcome.duration_ms,
        )

    def _capture(self, node: GraphNode, outputs: Dict[str, Any], inputs: Dict[str, Any]) -> None:
        if node.type == "output-display":
            self.displays.append({"nodeId": node.id, "value": json_safe(outputs.get("displayValue"))})
        elif node.type == "output-log":
            label = inputs.get("label") or "Log"
            self.logs.append({"nodeId": node.id, "label": str(label), "value": json_safe(outputs.get("value"))})

    def finish(self) -> None:
        self.duration_ms = (time.perf_counter() - self._started) * 1000.0

    def to_result(self) -> RunResult:
        error: Optional[str] = None
        error_kind: Optional[str] = None
        if self.failure is not None:
            error = str(self.failure)
            error_kind = self.failure.kind.value
        elif self.stopped:
            error = "Run stopped before completion"

        return RunResult(
            success=self.status == RunStatus.COMPLETED,
            status=self.status,
            order=list(self.order),
            results={node_id: json_safe(outputs) for node_id, outputs in self.results.items()},
            nodeStates=dict(self.node_states),
            failedNodeId=self.failed_node_id,
            error=error,
            errorKind=error_kind,
            displays=list(self.displays),
            logs=list(self.logs),
            durationMs=self.duration_ms,
        )


def rejected_result(exc: BaseException) -> RunResult:
    """RunResult for a run that never started (pre-flight failure)."""
    return RunResult(
        success=False,
        started=False,
        status=RunStatus.REJECTED,
        error=str(exc),
        errorKind=error_kind_of(exc).value,
    )


def _busy_result() -> RunResult:
    return RunResult(
        success=False,
        started=False,
        status=RunStatus.REJECTED,
        error="A run is already in progress",
    )


class RunController:
    """Runs graphs one at a time.

    Example:
        >>> controller = RunController()
        >>> async with ExecutionContext("devnet") as ctx:
        ...     session = await controller.start(graph, ctx)
        >>> session.results["n3"]
        {'result': 7}
    """

    def __init__(self, *, strict_handles: bool = False, node_timeout_s: Optional[float] = None):
        self.strict_handles = strict_handles
        self.node_timeout_s = node_timeout_s
        self._running = False
        self._current_node_id: Optional[str] = None
        self._stop_requested = False
        self._last_session: Optional[RunSession] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def current_node_id(self) -> Optional[str]:
        return self._current_node_id

    @property
    def last_session(self) -> Optional[RunSession]:
        return self._last_session

    def state(self) -> Dict[str, Any]:
        return {"running": self._running, "currentNodeId": self._current_node_id}

    def stop(self) -> bool:
        """Request a stop; honored before the next node starts.

        Returns False when nothing is running.
        """
        if not self._running:
            return False
        self._stop_requested = True
        logger.info("Stop requested (current node: %s)", self._current_node_id)
        return True

    async def start(
        self,
        graph: WorkflowGraph,
        context: ExecutionContext,
        *,
        on_event: Optional[EventCallback] = None,
        strict_handles: Optional[bool] = None,
        node_timeout_s: Optional[float] = None,
    ) -> Optional[RunSession]:
        """Execute `graph` to completion or first failure.

        Args:
            graph: Graph snapshot to run.
            context: The run's execution context.
            on_event: Optional sync or async callback receiving `ExecutionEvent`s.
            strict_handles: Override the controller's handle fallback mode.
            node_timeout_s: Override the controller's per-node timeout.

        Returns:
            The finished RunSession, or None when another run is in progress.

        Raises:
            CycleOrDisconnectedError: graph cannot be ordered (nothing runs).
            MissingEndpointError: context has no endpoint (nothing runs).
        """
        if self._running:
            logger.info("Run already in progress; ignoring start request")
            return None

        order = compile_graph(graph)
        if context is None or not getattr(context, "endpoint", None):
            raise MissingEndpointError()

        strict = self.strict_handles if strict_handles is None else strict_handles
        timeout_s = self.node_timeout_s if node_timeout_s is None else node_timeout_s
        nodes = {n.id: n for n in graph.nodes}

        self._running = True
        self._stop_requested = False
        session = RunSession(graph, order)
        self._last_session = session
        logger.info("Run started: %d node(s) on %s", len(order), context.endpoint)

        try:
            await self._emit(on_event, ExecutionEvent(type="flow_start", order=list(order)))

            for node_id in order:
                if self._stop_requested:
                    session.stopped = True
                    logger.info("Run stopped before node %s", node_id)
                    break

                node = nodes[node_id]
                self._current_node_id = node_id
                session.mark_executing(node_id)
                await self._emit(on_event, ExecutionEvent(type="node_start", nodeId=node_id))

                try:
                    inputs = resolve_node_inputs(node, graph.edges, session.results, strict=strict)
                except UnresolvedInputError as e:
                    outcome = DispatchOutcome(node_id=node_id, error=NodeExecutionError(node_id, e, node_type=node.type))
                else:
                    outcome = await dispatch_node(node, context, inputs, timeout_s=timeout_s)

                if outcome.ok:
                    session.record_success(node, outcome, inputs)
                    await self._emit(
                        on_event,
                        ExecutionEvent(
                            type="node_complete",
                            nodeId=node_id,
                            result=session.node_states[node_id].result,
                            durationMs=outcome.duration_ms,
                        ),
                    )
                    continue

                session.record_failure(node, outcome)
                logger.error("Node %s (%s) failed: %s", node_id, node.type, outcome.error)
                await self._emit(
                    on_event,
                    ExecutionEvent(
                        type="node_error",
                        nodeId=node_id,
                        error=str(outcome.error),
                        errorKind=outcome.kind.value if outcome.kind else None,
                        durationMs=outcome.duration_ms,
                    ),
                )
                break

            session.finish()
            if session.status == RunStatus.COMPLETED:
                logger.info("Run completed in %.1fms", session.duration_ms)
                await self._emit(
                    on_event,
                    ExecutionEvent(type="flow_complete", order=list(order), durationMs=session.duration_ms),
                )
            else:
                summary = session.to_result()
                await self._emit(
                    on_event,
                    ExecutionEvent(
                        type="flow_aborted",
                        nodeId=session.failed_node_id,
                        error=summary.error,
                        errorKind=summary.errorKind,
                        durationMs=session.duration_ms,
                    ),
                )
        finally:
            self._running = False
            self._current_node_id = None
            self._stop_requested = False

        return session

    async def _emit(self, on_event: Optional[EventCallback], event: ExecutionEvent) -> None:
        if on_event is None:
            return
        maybe = on_event(event)
        if inspect.isawaitable(maybe):
            await maybe


def resolve_run_endpoint(
    graph: WorkflowGraph,
    endpoint: Optional[str] = None,
    settings: Optional[EngineSettings] = None,
) -> str:
    """Pick the endpoint for a run: explicit, then configured, then the graph's own."""
    for candidate in (endpoint, settings.endpoint if settings else None, graph.rpcEndpoint):
        resolved = normalize_endpoint(candidate)
        if resolved:
            return resolved
    raise MissingEndpointError()


async def run_graph(
    graph: WorkflowGraph,
    *,
    endpoint: Optional[str] = None,
    wallet: Optional[WalletIdentity] = None,
    settings: Optional[EngineSettings] = None,
    controller: Optional[RunController] = None,
    on_event: Optional[EventCallback] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RunResult:
    """Build a context, run `graph` once and return a `RunResult`.

    Pre-flight failures and a busy controller are reported as
    `started=False` results instead of raising.
    """
    settings = settings or EngineSettings()
    controller = controller or RunController(
        strict_handles=settings.strict_handles,
        node_timeout_s=settings.node_timeout_s,
    )
    if controller.running:
        return _busy_result()

    try:
        resolved = resolve_run_endpoint(graph, endpoint, settings)
        context = ExecutionContext(resolved, wallet=wallet, settings=settings, transport=transport)
    except WorkflowError as e:
        return rejected_result(e)

    async with context:
        try:
            session = await controller.start(
                graph,
                context,
                on_event=on_event,
                strict_handles=True if settings.strict_handles else None,
                node_timeout_s=settings.node_timeout_s,
            )
        except WorkflowError as e:
            logger.warning("Run rejected: %s", e)
            return rejected_result(e)

    if session is None:
        return _busy_result()
    return session.to_result()
