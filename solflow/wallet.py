"""Wallet identity and signing capabilities.

A run may carry a connected wallet (address only) and, optionally, a signer.
Transaction signing and message signing are separate capabilities: a signer
object may implement either or both of `sign_transaction` and `sign_message`.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Optional, Protocol, Union

from solders.keypair import Keypair
from solders.transaction import Transaction

from .transactions import TransactionDraft

logger = logging.getLogger(__name__)


class WalletSigner(Protocol):
    async def sign_transaction(self, transaction: Union[TransactionDraft, Transaction]) -> Transaction: ...

    async def sign_message(self, message: bytes) -> bytes: ...


@dataclass
class WalletIdentity:
    address: Optional[str] = None
    is_connected: bool = False
    signer: Optional[WalletSigner] = None

    @classmethod
    def from_signer(cls, signer: "KeypairSigner") -> "WalletIdentity":
        return cls(address=signer.address, is_connected=True, signer=signer)

    def can_sign_transactions(self) -> bool:
        return callable(getattr(self.signer, "sign_transaction", None))

    def can_sign_messages(self) -> bool:
        return callable(getattr(self.signer, "sign_message", None))


class KeypairSigner:
    """Local signer backed by a `solders` Keypair."""

    def __init__(self, keypair: Keypair):
        self._keypair = keypair

    @property
    def address(self) -> str:
        return str(self._keypair.pubkey())

    def __repr__(self) -> str:
        return f"KeypairSigner({self.address})"

    async def sign_transaction(self, transaction: Union[TransactionDraft, Transaction]) -> Transaction:
        try:
            if isinstance(transaction, TransactionDraft):
                tx = transaction.to_transaction()
                tx.sign([self._keypair], transaction.recent_blockhash)
                return tx
            if isinstance(transaction, Transaction):
                tx = Transaction.from_bytes(bytes(transaction))
                tx.partial_sign([self._keypair], tx.message.recent_blockhash)
                return tx
        except Exception as e:
            raise ValueError(f"Could not sign transaction: {e}") from e
        raise ValueError(f"Cannot sign a value of type {type(transaction).__name__}")

    async def sign_message(self, message: bytes) -> bytes:
        return bytes(self._keypair.sign_message(message))


def load_keypair(path: Union[str, Path]) -> Keypair:
    """Load a Solana CLI keypair file (JSON array of 64 byte values)."""
    p = Path(path).expanduser()
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ValueError(f"Keypair file not found: {p}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Keypair file is not valid JSON: {p}") from e
    if not isinstance(raw, list) or len(raw) != 64 or not all(isinstance(b, int) and 0 <= b < 256 for b in raw):
        raise ValueError(f"Keypair file must contain a JSON array of 64 bytes: {p}")
    keypair = Keypair.from_bytes(bytes(raw))
    logger.info("Loaded keypair %s from %s", keypair.pubkey(), p)
    return keypair


def wallet_from_keypair_path(path: Optional[str]) -> WalletIdentity:
    """Connected wallet for `path`, or a disconnected identity when unset."""
    if not path:
        return WalletIdentity()
    return WalletIdentity.from_signer(KeypairSigner(load_keypair(path)))
