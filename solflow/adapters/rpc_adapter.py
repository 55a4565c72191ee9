"""Handlers for connection and chain-read nodes."""

from __future__ import annotations

from typing import Any, Dict

from ..constants import LAMPORTS_PER_SOL
from ..errors import MissingRequiredInputError
from ..rpc import RpcConnection
from ..transactions import parse_pubkey
from .inputs import require_input


def resolve_connection(inputs: Dict[str, Any], context: Any) -> RpcConnection:
    """Prefer a wired `connection` input; otherwise use the run's connection.

    A string on the `connection` port is treated as an endpoint URL or alias.
    """
    wired = inputs.get("connection")
    if isinstance(wired, RpcConnection):
        return wired
    if context is None:
        raise MissingRequiredInputError("connection", "Connection")
    if isinstance(wired, str) and wired.strip():
        return context.connection_for(wired)
    return context.get_connection()


def rpc_connection(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    endpoint = inputs.get("endpoint")
    return {"connection": context.connection_for(endpoint)}


async def get_balance(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    conn = resolve_connection(inputs, context)
    pubkey = parse_pubkey(require_input(inputs, "publicKey", "Public key"))
    lamports = await conn.get_balance(str(pubkey))
    return {"balance": lamports / LAMPORTS_PER_SOL, "lamports": lamports}


async def get_account_info(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    conn = resolve_connection(inputs, context)
    pubkey = parse_pubkey(require_input(inputs, "publicKey", "Public key"))
    info = await conn.get_account_info(str(pubkey))
    if not info:
        return {"accountInfo": None, "owner": None, "lamports": 0}
    return {
        "accountInfo": info,
        "owner": info.get("owner"),
        "lamports": int(info.get("lamports") or 0),
    }


async def get_slot(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    return {"slot": await resolve_connection(inputs, context).get_slot()}


async def get_block_height(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    return {"blockHeight": await resolve_connection(inputs, context).get_block_height()}


async def get_recent_blockhash(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    latest = await resolve_connection(inputs, context).get_latest_blockhash()
    return {
        "blockhash": latest["blockhash"],
        "lastValidBlockHeight": latest.get("lastValidBlockHeight"),
    }


HANDLERS = {
    "rpc-connection": rpc_connection,
    "get-balance": get_balance,
    "get-account-info": get_account_info,
    "get-slot": get_slot,
    "get-block-height": get_block_height,
    "get-recent-blockhash": get_recent_blockhash,
}
