from __future__ import annotations

import asyncio

import pytest

from solflow.config import EngineSettings
from solflow.context import ExecutionContext
from solflow.errors import CycleOrDisconnectedError, MissingEndpointError
from solflow.runner import RunController, resolve_run_endpoint, run_graph
from solflow.visual.models import NodeStatus, RunStatus

RPC_URL = "http://rpc.test"


def add_graph(make_graph):
    return make_graph(
        [("n1", "input-number", {"value": 3}), ("n2", "input-number", {"value": 4}), ("n3", "math-add", {})],
        [("n1", "value", "n3", "a"), ("n2", "value", "n3", "b")],
    )


def failing_graph(make_graph):
    return make_graph(
        [("a", "input-number", {"value": 1}), ("b", "math-divide", {"b": 0}), ("c", "math-add", {"b": 1})],
        [("a", "value", "b", "a"), ("b", "result", "c", "a")],
    )


def start(controller, graph, **kwargs):
    async def scenario():
        async with ExecutionContext(RPC_URL) as ctx:
            return await controller.start(graph, ctx, **kwargs)

    return asyncio.run(scenario())


def test_add_graph_end_to_end(make_graph) -> None:
    session = start(RunController(), add_graph(make_graph))
    result = session.to_result()

    assert result.success
    assert result.status == RunStatus.COMPLETED
    assert result.order == ["n1", "n2", "n3"]
    assert result.results["n3"] == {"result": 7}
    assert all(state.status == NodeStatus.SUCCEEDED for state in result.nodeStates.values())
    assert result.durationMs is not None


def test_events_follow_execution_order(make_graph) -> None:
    events = []
    start(RunController(), add_graph(make_graph), on_event=events.append)

    assert [(e.type, e.nodeId) for e in events] == [
        ("flow_start", None),
        ("node_start", "n1"),
        ("node_complete", "n1"),
        ("node_start", "n2"),
        ("node_complete", "n2"),
        ("node_start", "n3"),
        ("node_complete", "n3"),
        ("flow_complete", None),
    ]
    assert events[0].order == ["n1", "n2", "n3"]
    assert events[-2].result == {"result": 7}


def test_async_event_callbacks_are_awaited(make_graph) -> None:
    seen = []

    async def on_event(event):
        await asyncio.sleep(0)
        seen.append(event.type)

    start(RunController(), add_graph(make_graph), on_event=on_event)
    assert seen[0] == "flow_start"
    assert seen[-1] == "flow_complete"


def test_first_failure_aborts_the_run(make_graph) -> None:
    events = []
    session = start(RunController(), failing_graph(make_graph), on_event=events.append)
    result = session.to_result()

    assert not result.success
    assert result.status == RunStatus.ABORTED
    assert result.failedNodeId == "b"
    assert result.error == "Division by zero"
    assert result.errorKind == "value_error"
    assert result.nodeStates["a"].status == NodeStatus.SUCCEEDED
    assert result.nodeStates["b"].status == NodeStatus.FAILED
    assert result.nodeStates["c"].status == NodeStatus.PENDING
    assert "c" not in result.results
    assert [e.type for e in events][-2:] == ["node_error", "flow_aborted"]
    assert events[-1].nodeId == "b"
    assert all(e.nodeId != "c" for e in events)


def test_second_start_while_running_is_ignored(make_graph) -> None:
    controller = RunController()
    slow = make_graph([("wait", "utility-delay", {"ms": 50, "input": "done"})])

    async def scenario():
        async with ExecutionContext(RPC_URL) as ctx:
            first = asyncio.create_task(controller.start(slow, ctx))
            await asyncio.sleep(0)
            assert controller.running
            assert controller.state() == {"running": True, "currentNodeId": "wait"}
            in_flight = controller.last_session
            second = await controller.start(add_graph(make_graph), ctx)
            assert controller.state() == {"running": True, "currentNodeId": "wait"}
            assert controller.last_session is in_flight
            assert in_flight.results == {}
            assert in_flight.node_states["wait"].status == NodeStatus.EXECUTING
            assert "n3" not in in_flight.node_states
            return await first, second

    first, second = asyncio.run(scenario())

    assert second is None
    assert first.results["wait"] == {"output": "done"}
    assert not controller.running
    assert controller.state() == {"running": False, "currentNodeId": None}


def test_stop_is_honored_before_the_next_node(make_graph) -> None:
    controller = RunController()
    events = []

    def on_event(event):
        events.append(event)
        if event.type == "node_complete" and event.nodeId == "n1":
            assert controller.stop()

    session = start(controller, add_graph(make_graph), on_event=on_event)
    result = session.to_result()

    assert result.status == RunStatus.ABORTED
    assert result.error == "Run stopped before completion"
    assert result.failedNodeId is None
    assert result.nodeStates["n2"].status == NodeStatus.PENDING
    assert events[-1].type == "flow_aborted"
    assert controller.stop() is False


def test_cycle_is_rejected_before_anything_runs(make_graph) -> None:
    controller = RunController()
    events = []
    graph = make_graph(
        [("a", "math-add", {}), ("b", "math-add", {})],
        [("a", "result", "b", "a"), ("b", "result", "a", "a")],
    )

    with pytest.raises(CycleOrDisconnectedError) as excinfo:
        start(controller, graph, on_event=events.append)

    assert excinfo.value.unordered_node_ids == ["a", "b"]
    assert events == []
    assert not controller.running
    assert controller.last_session is None


def test_loose_handles_fall_back_to_first_output(make_graph) -> None:
    graph = make_graph(
        [("a", "input-number", {"value": 5}), ("b", "math-add", {"b": 1})],
        [("a", "renamed", "b", "a")],
    )
    assert start(RunController(), graph).results["b"] == {"result": 6}

    strict = start(RunController(strict_handles=True), graph).to_result()
    assert strict.failedNodeId == "b"
    assert strict.errorKind == "unresolved_input"


def test_displays_and_logs_are_captured(make_graph) -> None:
    graph = make_graph(
        [
            ("text", "input-string", {"value": "hi"}),
            ("show", "output-display", {}),
            ("log", "output-log", {"label": "Greeting"}),
        ],
        [("text", "value", "show", "value"), ("text", "value", "log", "value")],
    )

    result = start(RunController(), graph).to_result()

    assert result.displays == [{"nodeId": "show", "value": "hi"}]
    assert result.logs == [{"nodeId": "log", "label": "Greeting", "value": "hi"}]


def test_wired_log_label_is_captured(make_graph) -> None:
    graph = make_graph(
        [
            ("name", "input-string", {"value": "Balance"}),
            ("amount", "input-number", {"value": 42}),
            ("log", "output-log", {}),
        ],
        [("amount", "value", "log", "value"), ("name", "value", "log", "label")],
    )

    result = start(RunController(), graph).to_result()

    assert result.logs == [{"nodeId": "log", "label": "Balance", "value": 42}]


def test_run_graph_rejects_missing_endpoint(make_graph) -> None:
    result = asyncio.run(run_graph(add_graph(make_graph), settings=EngineSettings()))

    assert not result.started
    assert result.status == RunStatus.REJECTED
    assert result.errorKind == "missing_endpoint"


def test_run_graph_reports_cycles_as_rejected(make_graph) -> None:
    graph = make_graph([("a", "math-add", {})], [("a", "result", "a", "a")], rpc_endpoint=RPC_URL)
    result = asyncio.run(run_graph(graph))

    assert not result.started
    assert result.errorKind == "cycle_or_disconnected"
    assert result.nodeStates == {}


def test_run_graph_uses_graph_endpoint(make_graph) -> None:
    result = asyncio.run(run_graph(add_graph(make_graph).model_copy(update={"rpcEndpoint": "devnet"})))
    assert result.success
    assert result.results["n3"] == {"result": 7}


def test_run_graph_enforces_node_timeout(make_graph) -> None:
    graph = make_graph([("wait", "utility-delay", {"ms": 2000})], rpc_endpoint=RPC_URL)
    result = asyncio.run(run_graph(graph, settings=EngineSettings(node_timeout_s=0.01)))

    assert result.started
    assert result.failedNodeId == "wait"
    assert result.errorKind == "timeout"


def test_endpoint_precedence(make_graph) -> None:
    graph = make_graph([], rpc_endpoint="testnet")
    settings = EngineSettings(endpoint="http://configured.test")

    assert resolve_run_endpoint(graph) == "https://api.testnet.solana.com"
    assert resolve_run_endpoint(graph, settings=settings) == "http://configured.test"
    assert resolve_run_endpoint(graph, "devnet", settings) == "https://api.devnet.solana.com"
    with pytest.raises(MissingEndpointError):
        resolve_run_endpoint(make_graph([]))
