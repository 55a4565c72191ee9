"""Handlers for wallet identity and signing nodes."""

from __future__ import annotations

import base64
from typing import Any, Dict

from ..errors import CapabilityUnavailableError
from .inputs import require_input


def wallet_connect(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    wallet = context.wallet
    return {"publicKey": wallet.address or None, "connected": bool(wallet.is_connected)}


async def wallet_sign(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    transaction = require_input(inputs, "transaction", "Transaction")
    wallet = context.wallet
    if not wallet.can_sign_transactions():
        raise CapabilityUnavailableError("Wallet does not support transaction signing")
    signed = await wallet.signer.sign_transaction(transaction)
    return {"signedTransaction": signed}


async def wallet_sign_message(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Sign a UTF-8 message; the signature is returned base64-encoded."""
    message = require_input(inputs, "message", "Message")
    wallet = context.wallet
    if not wallet.can_sign_messages():
        raise CapabilityUnavailableError("Wallet does not support message signing")
    payload = message if isinstance(message, bytes) else str(message).encode("utf-8")
    signature = await wallet.signer.sign_message(payload)
    return {"signature": base64.b64encode(bytes(signature)).decode("ascii")}


HANDLERS = {
    "wallet-connect": wallet_connect,
    "wallet-sign": wallet_sign,
    "wallet-sign-message": wallet_sign_message,
}
