"""Pydantic models for the SolFlow graph interchange format.

These models live in the `solflow` package (not the web backend) so graphs
authored in the visual editor can be loaded and executed from any host (CLI,
servers, tests).
"""

from __future__ import annotations

from enum import Enum
import uuid
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class PortDataType(str, Enum):
    """Semantic data types carried by ports."""

    ANY = "any"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    PUBLICKEY = "publickey"
    KEYPAIR = "keypair"
    TRANSACTION = "transaction"
    INSTRUCTION = "instruction"
    CONNECTION = "connection"
    ACCOUNT = "account"
    TOKEN_ACCOUNT = "tokenAccount"
    ARRAY = "array"
    OBJECT = "object"


class NodeCategory(str, Enum):
    RPC = "rpc"
    WALLET = "wallet"
    TRANSACTION = "transaction"
    ACCOUNT = "account"
    TOKEN = "token"
    MATH = "math"
    LOGIC = "logic"
    UTILITY = "utility"
    INPUT = "input"
    OUTPUT = "output"


class PortDirection(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


class Port(BaseModel):
    """A named, typed slot on a node (registry-owned)."""

    id: str
    name: str
    direction: PortDirection
    dataType: PortDataType = PortDataType.ANY
    required: bool = False
    defaultValue: Optional[Any] = None


class NodeDefinition(BaseModel):
    """Catalog entry for a node type."""

    type: str
    category: NodeCategory
    label: str
    description: str = ""
    inputs: List[Port] = Field(default_factory=list)
    outputs: List[Port] = Field(default_factory=list)
    color: Optional[str] = None

    def input_port(self, port_id: str) -> Optional[Port]:
        return next((p for p in self.inputs if p.id == port_id), None)

    def output_port(self, port_id: str) -> Optional[Port]:
        return next((p for p in self.outputs if p.id == port_id), None)


class Position(BaseModel):
    """2D position on canvas (UI-only, ignored by the engine)."""

    x: float = 0
    y: float = 0


class GraphNode(BaseModel):
    """A node in the workflow graph."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    type: str
    position: Position = Field(default_factory=Position)
    values: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _lift_editor_data(cls, raw: Any) -> Any:
        # Editor exports wrap the registry type and literal values in `data`
        # (the top-level `type` is the React Flow renderer, e.g. "custom").
        if not isinstance(raw, dict):
            return raw
        data = raw.get("data")
        if not isinstance(data, dict):
            return raw
        lifted = dict(raw)
        if isinstance(data.get("type"), str) and data["type"]:
            lifted["type"] = data["type"]
        if "values" not in raw and isinstance(data.get("values"), dict):
            lifted["values"] = data["values"]
        return lifted


class GraphEdge(BaseModel):
    """A directed binding from a source output port to a target input port."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    source: str
    sourceHandle: str  # Output port id on source node
    target: str
    targetHandle: str  # Input port id on target node


class WorkflowGraph(BaseModel):
    """A complete graph snapshot (also accepts editor workspace exports)."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4())[:8])
    name: str = "Untitled Workspace"
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)
    rpcEndpoint: Optional[str] = None

    @model_validator(mode="after")
    def _check_unique_node_ids(self) -> "WorkflowGraph":
        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                raise ValueError(f"Duplicate node id '{node.id}'")
            seen.add(node.id)
        return self

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


class NodeStatus(str, Enum):
    """Per-node runtime state shown by the UI."""

    PENDING = "pending"  # never reached
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class NodeRunState(BaseModel):
    status: NodeStatus = NodeStatus.PENDING
    result: Optional[Any] = None
    error: Optional[str] = None
    errorKind: Optional[str] = None
    durationMs: Optional[float] = None


class RunStatus(str, Enum):
    COMPLETED = "completed"
    ABORTED = "aborted"
    REJECTED = "rejected"  # pre-flight failure or another run in progress


class RunRequest(BaseModel):
    """Request to execute a graph."""

    graph: WorkflowGraph
    endpoint: Optional[str] = None
    strictHandles: Optional[bool] = None
    nodeTimeoutS: Optional[float] = None


class RunResult(BaseModel):
    """Result of a graph execution."""

    success: bool
    started: bool = True
    status: RunStatus
    order: List[str] = Field(default_factory=list)
    results: Dict[str, Any] = Field(default_factory=dict)
    nodeStates: Dict[str, NodeRunState] = Field(default_factory=dict)
    failedNodeId: Optional[str] = None
    error: Optional[str] = None
    errorKind: Optional[str] = None
    displays: List[Dict[str, Any]] = Field(default_factory=list)
    logs: List[Dict[str, Any]] = Field(default_factory=list)
    durationMs: Optional[float] = None


class ExecutionEvent(BaseModel):
    """Real-time execution event (WebSocket / CLI progress)."""

    type: str  # "flow_start", "node_start", "node_complete", "node_error", "flow_complete", "flow_aborted"
    nodeId: Optional[str] = None
    result: Optional[Any] = None
    error: Optional[str] = None
    errorKind: Optional[str] = None
    order: Optional[List[str]] = None
    durationMs: Optional[float] = None
