"""Handlers for transaction assembly and submission nodes.

Everything except `send-transaction` is pure construction. Sending submits the
signed wire bytes and then waits for confirmation inside the same node.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict

from solders.instruction import Instruction

from ..constants import LAMPORTS_PER_SOL
from ..transactions import (
    TransactionDraft,
    build_sol_transfer,
    parse_blockhash,
    parse_pubkey,
    serialize_for_send,
)
from .inputs import require_input, to_number
from .rpc_adapter import resolve_connection

logger = logging.getLogger(__name__)


def create_transaction(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    fee_payer = parse_pubkey(require_input(inputs, "feePayer", "Fee payer"), "fee payer")
    blockhash = parse_blockhash(require_input(inputs, "blockhash", "Blockhash"))
    return {"transaction": TransactionDraft(fee_payer=fee_payer, recent_blockhash=blockhash)}


def add_instruction(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Return a new draft with the instruction appended (the input draft is unchanged)."""
    draft = require_input(inputs, "transaction", "Transaction")
    instruction = require_input(inputs, "instruction", "Instruction")
    if not isinstance(draft, TransactionDraft):
        raise ValueError("Transaction input must come from a Create Transaction node")
    if not isinstance(instruction, Instruction):
        raise ValueError(f"Instruction input must be an instruction, got {type(instruction).__name__}")
    return {"transaction": draft.with_instruction(instruction)}


async def send_transaction(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    conn = resolve_connection(inputs, context)
    raw = serialize_for_send(require_input(inputs, "transaction", "Transaction"))

    signature = await conn.send_raw_transaction(raw)
    logger.info("Submitted transaction %s", signature)
    status = await conn.confirm_transaction(signature, timeout_s=context.settings.confirm_timeout_s)
    error = status.get("err")
    if error is not None:
        logger.warning("Transaction %s failed on-chain: %s", signature, error)
    return {"signature": signature, "confirmed": error is None, "error": error}


def transfer_sol(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    from_pubkey = parse_pubkey(require_input(inputs, "from", "From address"), "from address")
    to_pubkey = parse_pubkey(require_input(inputs, "to", "To address"), "to address")
    amount = to_number(inputs.get("amount"))
    if amount <= 0:
        raise ValueError("Amount must be greater than 0")
    lamports = int(math.floor(amount * LAMPORTS_PER_SOL))
    return {"instruction": build_sol_transfer(from_pubkey, to_pubkey, lamports)}


HANDLERS = {
    "create-transaction": create_transaction,
    "add-instruction": add_instruction,
    "send-transaction": send_transaction,
    "transfer-sol": transfer_sol,
}
