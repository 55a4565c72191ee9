"""Solana constants shared by node handlers and configuration."""

from __future__ import annotations

from typing import Dict

LAMPORTS_PER_SOL = 1_000_000_000

# Default public RPC endpoints (accepted as aliases wherever an endpoint is expected).
RPC_ENDPOINTS: Dict[str, str] = {
    "mainnet": "https://api.mainnet-beta.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
}

DEFAULT_COMMITMENT = "confirmed"

SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGqPFXCWuBvf9Ss623VQ5DA"

# SPL Token account layout size, used to filter program accounts.
TOKEN_ACCOUNT_SIZE = 165

# SPL Token instruction discriminator for `Transfer`.
TOKEN_TRANSFER_INSTRUCTION = 3

DEFAULT_SWAP_QUOTE_URL = "https://quote-api.jup.ag/v6/quote"
