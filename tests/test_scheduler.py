"""Execution-order compiler (Kahn's algorithm)."""

from __future__ import annotations

import pytest

from solflow.compiler import compile_execution_order, compile_graph
from solflow.errors import CycleOrDisconnectedError, ErrorKind


def _respects_edges(order, graph) -> bool:
    position = {node_id: i for i, node_id in enumerate(order)}
    return all(position[e.source] < position[e.target] for e in graph.edges)


def test_linear_chain_is_ordered_by_dependencies(make_graph) -> None:
    graph = make_graph(
        [("c", "math-add", {}), ("b", "math-add", {}), ("a", "input-number", {"value": 1})],
        [("a", "value", "b", "a"), ("b", "result", "c", "a")],
    )
    assert compile_graph(graph) == ["a", "b", "c"]


def test_ties_follow_node_array_order_fifo(make_graph) -> None:
    graph = make_graph(
        [
            ("x", "input-number", {}),
            ("y", "input-number", {}),
            ("sum", "math-add", {}),
            ("z", "input-number", {}),
        ],
        [("x", "value", "sum", "a"), ("y", "value", "sum", "b")],
    )
    # Roots are seeded in array order; `sum` becomes ready after `z` was queued.
    assert compile_graph(graph) == ["x", "y", "z", "sum"]


def test_diamond_covers_every_node_once_and_respects_edges(make_graph) -> None:
    graph = make_graph(
        [("d", "math-add", {}), ("b", "math-add", {}), ("c", "math-add", {}), ("a", "input-number", {})],
        [
            ("a", "value", "b", "a"),
            ("a", "value", "c", "a"),
            ("b", "result", "d", "a"),
            ("c", "result", "d", "b"),
        ],
    )
    order = compile_graph(graph)
    assert sorted(order) == ["a", "b", "c", "d"]
    assert len(order) == len(set(order))
    assert _respects_edges(order, graph)


def test_order_is_idempotent(make_graph) -> None:
    graph = make_graph(
        [("n1", "input-number", {}), ("n2", "input-number", {}), ("n3", "math-add", {})],
        [("n1", "value", "n3", "a"), ("n2", "value", "n3", "b")],
    )
    assert compile_graph(graph) == compile_graph(graph)


def test_cycle_is_reported_with_unordered_nodes(make_graph) -> None:
    graph = make_graph(
        [("root", "input-number", {}), ("a", "math-add", {}), ("b", "math-add", {})],
        [("a", "result", "b", "a"), ("b", "result", "a", "a")],
    )
    with pytest.raises(CycleOrDisconnectedError) as excinfo:
        compile_graph(graph)

    err = excinfo.value
    assert err.kind == ErrorKind.CYCLE_OR_DISCONNECTED
    assert err.count == 2
    assert err.unordered_node_ids == ["a", "b"]


def test_self_loop_is_a_cycle(make_graph) -> None:
    graph = make_graph([("a", "math-add", {})], [("a", "result", "a", "b")])
    with pytest.raises(CycleOrDisconnectedError):
        compile_graph(graph)


def test_edge_from_unknown_source_blocks_its_target(make_graph) -> None:
    graph = make_graph(
        [("a", "input-number", {}), ("b", "math-add", {})],
        [("ghost", "value", "b", "a")],
    )
    with pytest.raises(CycleOrDisconnectedError) as excinfo:
        compile_graph(graph)
    assert excinfo.value.unordered_node_ids == ["b"]


def test_edge_to_unknown_target_is_ignored(make_graph) -> None:
    graph = make_graph([("a", "input-number", {})], [("a", "value", "ghost", "a")])
    assert compile_execution_order(graph.nodes, graph.edges) == ["a"]


def test_empty_graph_orders_to_empty_list() -> None:
    assert compile_execution_order([], []) == []
