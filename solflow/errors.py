"""Error types raised by the SolFlow execution engine.

Graph-level errors (`CycleOrDisconnectedError`, `MissingEndpointError`) are
raised before any node runs. Everything a node handler raises is wrapped in a
`NodeExecutionError` that carries the failing node id and the original cause.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, List, Optional


class ErrorKind(str, Enum):
    """Stable, JSON-friendly error categories (sent to UIs as strings)."""

    CYCLE_OR_DISCONNECTED = "cycle_or_disconnected"
    MISSING_ENDPOINT = "missing_endpoint"
    UNKNOWN_NODE_TYPE = "unknown_node_type"
    MISSING_REQUIRED_INPUT = "missing_required_input"
    UNRESOLVED_INPUT = "unresolved_input"
    CAPABILITY_UNAVAILABLE = "capability_unavailable"
    EXTERNAL_CALL = "external_call"
    TIMEOUT = "timeout"
    VALUE_ERROR = "value_error"
    INTERNAL = "internal"


class WorkflowError(Exception):
    """Base class for engine errors."""

    kind: ErrorKind = ErrorKind.INTERNAL


class CycleOrDisconnectedError(WorkflowError):
    """No valid total execution order exists for the graph."""

    kind = ErrorKind.CYCLE_OR_DISCONNECTED

    def __init__(self, unordered_node_ids: Iterable[str]):
        self.unordered_node_ids: List[str] = list(unordered_node_ids)
        super().__init__(
            f"Workflow contains cycles: {len(self.unordered_node_ids)} node(s) could not be ordered "
            f"({', '.join(self.unordered_node_ids)})"
        )

    @property
    def count(self) -> int:
        return len(self.unordered_node_ids)


class MissingEndpointError(WorkflowError):
    kind = ErrorKind.MISSING_ENDPOINT

    def __init__(self, message: str = "No RPC endpoint configured"):
        super().__init__(message)


class UnknownNodeTypeError(WorkflowError):
    kind = ErrorKind.UNKNOWN_NODE_TYPE

    def __init__(self, node_type: str):
        self.node_type = node_type
        super().__init__(f"Unknown node type: {node_type}")


class MissingRequiredInputError(WorkflowError):
    kind = ErrorKind.MISSING_REQUIRED_INPUT

    def __init__(self, port_id: str, label: Optional[str] = None):
        self.port_id = port_id
        super().__init__(f"{label or port_id} is required")


class UnresolvedInputError(WorkflowError):
    """A wired output handle does not exist on the source node's result."""

    kind = ErrorKind.UNRESOLVED_INPUT

    def __init__(self, *, source: str, source_handle: str, target: str, target_handle: str):
        self.source = source
        self.source_handle = source_handle
        self.target = target
        self.target_handle = target_handle
        super().__init__(
            f"Input '{target_handle}' of node '{target}' is wired to output '{source_handle}' "
            f"of node '{source}', which did not produce that output"
        )


class CapabilityUnavailableError(WorkflowError):
    kind = ErrorKind.CAPABILITY_UNAVAILABLE


class ExternalCallError(WorkflowError):
    """Network/RPC failure or a malformed response from an external service."""

    kind = ErrorKind.EXTERNAL_CALL


class NodeTimeoutError(ExternalCallError):
    kind = ErrorKind.TIMEOUT

    def __init__(self, node_id: str, timeout_s: float):
        self.node_id = node_id
        self.timeout_s = timeout_s
        super().__init__(f"Node '{node_id}' did not finish within {timeout_s:g}s")


def error_kind_of(exc: BaseException) -> ErrorKind:
    """Map any exception to its ErrorKind."""
    if isinstance(exc, WorkflowError):
        return exc.kind
    if isinstance(exc, ValueError):
        # json.JSONDecodeError is a ValueError too.
        return ErrorKind.VALUE_ERROR
    return ErrorKind.INTERNAL


class NodeExecutionError(WorkflowError):
    """Dispatch-level wrapper carrying the failing node id and the underlying cause."""

    def __init__(self, node_id: str, cause: BaseException, *, node_type: Optional[str] = None):
        self.node_id = node_id
        self.node_type = node_type
        self.cause = cause
        super().__init__(str(cause) or cause.__class__.__name__)
        self.__cause__ = cause

    @property
    def kind(self) -> ErrorKind:  # type: ignore[override]
        return error_kind_of(self.cause)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodeId": self.node_id,
            "nodeType": self.node_type,
            "kind": self.kind.value,
            "message": str(self),
        }


__all__ = [
    "ErrorKind",
    "WorkflowError",
    "CycleOrDisconnectedError",
    "MissingEndpointError",
    "UnknownNodeTypeError",
    "MissingRequiredInputError",
    "UnresolvedInputError",
    "CapabilityUnavailableError",
    "ExternalCallError",
    "NodeTimeoutError",
    "NodeExecutionError",
    "error_kind_of",
]
