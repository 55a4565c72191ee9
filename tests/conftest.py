"""SolFlow test bootstrap.

Why this exists:
- Tests import both the engine (`solflow`) and the web backend
  (`web.backend`), which live side by side at the repository root. Putting the
  root on `sys.path` keeps both importable without an editable install.
- The RPC node and the swap-quote service are replaced by a scripted
  `httpx.MockTransport` so no test touches the network.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import httpx
import pytest


def _prepend_sys_path(path: Path) -> None:
    p = str(path)
    if p and p not in sys.path:
        sys.path.insert(0, p)


HERE = Path(__file__).resolve()
PROJECT_ROOT = HERE.parents[1]

_prepend_sys_path(PROJECT_ROOT)

from solflow.visual.models import GraphEdge, GraphNode, WorkflowGraph  # noqa: E402


class FakeRpc:
    """Scripted JSON-RPC node.

    `results[method]` is either the JSON `result` or a callable taking the
    request params. `errors[method]` returns a JSON-RPC error object instead.
    GET requests (swap quotes) are answered from `http_responses[path]`.
    """

    def __init__(self) -> None:
        self.results: Dict[str, Any] = {}
        self.errors: Dict[str, Dict[str, Any]] = {}
        self.http_responses: Dict[str, Any] = {}
        self.status_code = 200
        self.calls: List[Dict[str, Any]] = []
        self.transport = httpx.MockTransport(self._handle)

    def methods(self) -> List[str]:
        return [c["method"] for c in self.calls]

    def params_for(self, method: str) -> Any:
        for call in self.calls:
            if call["method"] == method:
                return call["params"]
        raise AssertionError(f"{method} was never called")

    def _handle(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            self.calls.append({"method": "GET", "url": str(request.url), "params": dict(request.url.params)})
            body = self.http_responses.get(request.url.path)
            if body is None:
                return httpx.Response(404, json={"error": "not found"})
            return httpx.Response(200, json=body)

        payload = json.loads(request.content)
        method = payload["method"]
        self.calls.append({"method": method, "url": str(request.url), "params": payload.get("params")})

        if self.status_code != 200:
            return httpx.Response(self.status_code, text="upstream unavailable")
        if method in self.errors:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "error": self.errors[method]})
        if method not in self.results:
            error = {"code": -32601, "message": f"Method not found: {method}"}
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "error": error})

        result = self.results[method]
        if callable(result):
            result = result(payload.get("params"))
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result})


NodeSpec = Tuple[str, str, Dict[str, Any]]
EdgeSpec = Tuple[str, str, str, str]


def build_graph(
    nodes: Sequence[NodeSpec],
    edges: Sequence[EdgeSpec] = (),
    *,
    rpc_endpoint: Optional[str] = None,
) -> WorkflowGraph:
    """Graph from `(id, type, values)` nodes and `(source, handle, target, handle)` edges."""
    return WorkflowGraph(
        id="test",
        nodes=[GraphNode(id=node_id, type=node_type, values=dict(values)) for node_id, node_type, values in nodes],
        edges=[
            GraphEdge(id=f"e{i}", source=s, sourceHandle=sh, target=t, targetHandle=th)
            for i, (s, sh, t, th) in enumerate(edges, start=1)
        ],
        rpcEndpoint=rpc_endpoint,
    )


@pytest.fixture
def fake_rpc() -> FakeRpc:
    return FakeRpc()


@pytest.fixture
def make_graph() -> Callable[..., WorkflowGraph]:
    return build_graph
