"""Node dispatch: registry lookup, error wrapping, timeouts."""

from __future__ import annotations

import asyncio

import pytest

from solflow.context import ExecutionContext
from solflow.errors import (
    ErrorKind,
    MissingRequiredInputError,
    NodeExecutionError,
    NodeTimeoutError,
    UnknownNodeTypeError,
)
from solflow.visual.catalog import NODE_DEFINITIONS
from solflow.visual.executor import NODE_HANDLERS, dispatch_node, execute_node
from solflow.visual.models import GraphNode

RPC_URL = "http://rpc.test"


def _dispatch(node: GraphNode, inputs, **kwargs):
    async def scenario():
        async with ExecutionContext(RPC_URL) as ctx:
            return await dispatch_node(node, ctx, inputs, **kwargs)

    return asyncio.run(scenario())


def test_every_catalog_type_has_a_handler() -> None:
    catalog_types = {d.type for d in NODE_DEFINITIONS}
    assert len(catalog_types) == 47
    assert catalog_types == set(NODE_HANDLERS)


def test_successful_dispatch_returns_outputs() -> None:
    outcome = _dispatch(GraphNode(id="n", type="math-add"), {"a": 3, "b": 4})
    assert outcome.ok is True
    assert outcome.kind is None
    assert outcome.outputs == {"result": 7}
    assert outcome.unwrap() == {"result": 7}
    assert outcome.duration_ms >= 0


def test_unknown_node_type_is_an_error_not_a_skip() -> None:
    outcome = _dispatch(GraphNode(id="n", type="teleport"), {})
    assert outcome.ok is False
    assert outcome.kind == ErrorKind.UNKNOWN_NODE_TYPE
    assert isinstance(outcome.error, NodeExecutionError)
    assert isinstance(outcome.error.cause, UnknownNodeTypeError)
    assert outcome.error.node_id == "n"
    assert str(outcome.error) == "Unknown node type: teleport"


def test_handler_exception_is_wrapped_with_node_id_and_cause() -> None:
    outcome = _dispatch(GraphNode(id="div", type="math-divide"), {"a": 1, "b": 0})
    assert outcome.kind == ErrorKind.VALUE_ERROR
    assert outcome.error.to_dict() == {
        "nodeId": "div",
        "nodeType": "math-divide",
        "kind": "value_error",
        "message": "Division by zero",
    }
    assert isinstance(outcome.error.__cause__, ValueError)
    with pytest.raises(NodeExecutionError):
        outcome.unwrap()


def test_missing_required_input_kind() -> None:
    outcome = _dispatch(GraphNode(id="bal", type="get-balance"), {})
    assert outcome.kind == ErrorKind.MISSING_REQUIRED_INPUT
    assert isinstance(outcome.error.cause, MissingRequiredInputError)
    assert str(outcome.error) == "Public key is required"


def test_slow_async_handler_times_out() -> None:
    outcome = _dispatch(GraphNode(id="slow", type="utility-delay"), {"ms": 5000}, timeout_s=0.01)
    assert outcome.kind == ErrorKind.TIMEOUT
    assert isinstance(outcome.error.cause, NodeTimeoutError)
    assert outcome.error.cause.node_id == "slow"


def test_execute_node_is_the_raising_form() -> None:
    async def scenario():
        async with ExecutionContext(RPC_URL) as ctx:
            ok = await execute_node(GraphNode(id="n", type="logic-not"), ctx, {"a": False})
            with pytest.raises(NodeExecutionError) as excinfo:
                await execute_node(GraphNode(id="m", type="nope"), ctx, {})
            return ok, excinfo.value

    ok, err = asyncio.run(scenario())
    assert ok == {"result": True}
    assert err.node_id == "m"
    assert err.kind == ErrorKind.UNKNOWN_NODE_TYPE


def test_handler_returning_non_dict_is_an_internal_error(monkeypatch) -> None:
    monkeypatch.setitem(NODE_HANDLERS, "math-add", lambda inputs, ctx: 7)
    outcome = _dispatch(GraphNode(id="n", type="math-add"), {})
    assert outcome.kind == ErrorKind.INTERNAL
    assert "expected a dict" in str(outcome.error)
