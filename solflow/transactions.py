"""Transaction assembly helpers built on `solders`.

A `TransactionDraft` is an immutable, unsigned transaction under construction:
`create-transaction` makes one and `add-instruction` returns a copy with one
more instruction, so results recorded for upstream nodes never change. Drafts
are compiled into a `solders` `Transaction` only when a signer needs one.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, replace
import struct
from typing import Any, Dict, Tuple, Union

from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from .constants import TOKEN_PROGRAM_ID, TOKEN_TRANSFER_INSTRUCTION


def parse_pubkey(value: Any, label: str = "public key") -> Pubkey:
    if isinstance(value, Pubkey):
        return value
    text = str(value or "").strip()
    try:
        return Pubkey.from_string(text)
    except Exception as e:
        raise ValueError(f"Invalid {label}: {text!r}") from e


def parse_blockhash(value: Any) -> Hash:
    if isinstance(value, Hash):
        return value
    text = str(value or "").strip()
    try:
        return Hash.from_string(text)
    except Exception as e:
        raise ValueError(f"Invalid blockhash: {text!r}") from e


@dataclass(frozen=True)
class TransactionDraft:
    fee_payer: Pubkey
    recent_blockhash: Hash
    instructions: Tuple[Instruction, ...] = ()

    def with_instruction(self, instruction: Instruction) -> "TransactionDraft":
        return replace(self, instructions=self.instructions + (instruction,))

    def to_message(self) -> Message:
        return Message.new_with_blockhash(list(self.instructions), self.fee_payer, self.recent_blockhash)

    def to_transaction(self) -> Transaction:
        return Transaction.new_unsigned(self.to_message())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "feePayer": str(self.fee_payer),
            "recentBlockhash": str(self.recent_blockhash),
            "instructions": [instruction_to_dict(ix) for ix in self.instructions],
        }


def instruction_to_dict(instruction: Instruction) -> Dict[str, Any]:
    return {
        "programId": str(instruction.program_id),
        "accounts": [
            {"pubkey": str(meta.pubkey), "isSigner": meta.is_signer, "isWritable": meta.is_writable}
            for meta in instruction.accounts
        ],
        "data": base64.b64encode(bytes(instruction.data)).decode("ascii"),
    }


def transaction_to_dict(transaction: Transaction) -> Dict[str, Any]:
    return {
        "signatures": [str(sig) for sig in transaction.signatures],
        "signed": is_fully_signed(transaction),
        "serialized": base64.b64encode(bytes(transaction)).decode("ascii"),
    }


def build_sol_transfer(from_pubkey: Pubkey, to_pubkey: Pubkey, lamports: int) -> Instruction:
    return transfer(TransferParams(from_pubkey=from_pubkey, to_pubkey=to_pubkey, lamports=lamports))


def build_token_transfer(source: Pubkey, destination: Pubkey, owner: Pubkey, amount: int) -> Instruction:
    """SPL Token `Transfer` (amount in the token's base units)."""
    data = struct.pack("<BQ", TOKEN_TRANSFER_INSTRUCTION, amount)
    accounts = [
        AccountMeta(pubkey=source, is_signer=False, is_writable=True),
        AccountMeta(pubkey=destination, is_signer=False, is_writable=True),
        AccountMeta(pubkey=owner, is_signer=True, is_writable=False),
    ]
    return Instruction(Pubkey.from_string(TOKEN_PROGRAM_ID), data, accounts)


def is_fully_signed(transaction: Transaction) -> bool:
    empty = Signature.default()
    return bool(transaction.signatures) and all(sig != empty for sig in transaction.signatures)


def serialize_for_send(transaction: Union[Transaction, TransactionDraft, bytes, str]) -> bytes:
    """Return wire bytes for a signed transaction.

    Accepts a signed `Transaction`, raw bytes, or a base64 string.
    """
    if isinstance(transaction, TransactionDraft):
        raise ValueError("Transaction must be signed before sending (connect a Sign Transaction node)")
    if isinstance(transaction, Transaction):
        if not is_fully_signed(transaction):
            raise ValueError("Transaction is missing one or more signatures")
        return bytes(transaction)
    if isinstance(transaction, (bytes, bytearray)):
        return bytes(transaction)
    if isinstance(transaction, str):
        try:
            return base64.b64decode(transaction, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError("Transaction string must be base64-encoded wire bytes") from e
    raise ValueError(f"Unsupported transaction value: {type(transaction).__name__}")
