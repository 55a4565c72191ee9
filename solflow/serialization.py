"""JSON-safe conversion of node outputs (chain objects, drafts, connections)."""

from __future__ import annotations

import base64
from enum import Enum
from typing import Any, Dict, Optional

from solders.instruction import Instruction
from solders.transaction import Transaction

from .rpc import RpcConnection
from .transactions import TransactionDraft, instruction_to_dict, transaction_to_dict

_MAX_JSON_DEPTH = 32


def json_safe(value: Any, *, depth: int = 0, seen: Optional[set[int]] = None) -> Any:
    """Best-effort JSON-safe conversion (no truncation).

    Keys, public keys, hashes and signatures become strings; bytes become
    base64; transactions and instructions become plain dicts.
    """
    if depth > _MAX_JSON_DEPTH:
        return str(value)

    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, TransactionDraft):
        return value.to_dict()
    if isinstance(value, Instruction):
        return instruction_to_dict(value)
    if isinstance(value, Transaction):
        return transaction_to_dict(value)
    if isinstance(value, RpcConnection):
        return {"endpoint": value.endpoint}

    if seen is None:
        seen = set()
    vid = id(value)
    if vid in seen:
        return "<cycle>"
    seen.add(vid)
    try:
        if isinstance(value, dict):
            out: Dict[str, Any] = {}
            for k, v in value.items():
                out[str(k)] = json_safe(v, depth=depth + 1, seen=seen)
            return out
        if isinstance(value, (list, tuple, set, frozenset)):
            return [json_safe(v, depth=depth + 1, seen=seen) for v in value]
        if hasattr(value, "model_dump") and callable(getattr(value, "model_dump")):
            return json_safe(value.model_dump(), depth=depth + 1, seen=seen)
    finally:
        seen.discard(vid)

    return str(value)
