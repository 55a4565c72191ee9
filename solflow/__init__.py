"""SolFlow - a workflow execution engine for Solana node graphs.

Graphs of typed nodes (RPC reads, wallet operations, transaction assembly,
math, logic, collections, I/O) are ordered with Kahn's algorithm and executed
once, node by node, with fail-fast semantics.

Example:
    >>> from solflow import WorkflowGraph, run_graph
    >>> graph = WorkflowGraph.model_validate(json.load(open("graph.json")))
    >>> result = asyncio.run(run_graph(graph, endpoint="devnet"))
"""

from .compiler import compile_execution_order, compile_graph
from .config import EngineSettings
from .context import ExecutionContext
from .errors import (
    CapabilityUnavailableError,
    CycleOrDisconnectedError,
    ErrorKind,
    ExternalCallError,
    MissingEndpointError,
    MissingRequiredInputError,
    NodeExecutionError,
    NodeTimeoutError,
    UnknownNodeTypeError,
    UnresolvedInputError,
    WorkflowError,
)
from .runner import RunController, RunSession, run_graph
from .visual.models import ExecutionEvent, GraphEdge, GraphNode, RunResult, WorkflowGraph
from .wallet import KeypairSigner, WalletIdentity

__version__ = "0.1.0"

__all__ = [
    "CapabilityUnavailableError",
    "CycleOrDisconnectedError",
    "EngineSettings",
    "ErrorKind",
    "ExecutionContext",
    "ExecutionEvent",
    "ExternalCallError",
    "GraphEdge",
    "GraphNode",
    "KeypairSigner",
    "MissingEndpointError",
    "MissingRequiredInputError",
    "NodeExecutionError",
    "NodeTimeoutError",
    "RunController",
    "RunResult",
    "RunSession",
    "UnknownNodeTypeError",
    "UnresolvedInputError",
    "WalletIdentity",
    "WorkflowError",
    "WorkflowGraph",
    "compile_execution_order",
    "compile_graph",
    "run_graph",
]
