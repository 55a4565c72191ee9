"""Handlers for SPL token nodes and market lookups (swap quotes, pools)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..constants import TOKEN_ACCOUNT_SIZE, TOKEN_PROGRAM_ID
from ..errors import ExternalCallError
from ..transactions import build_token_transfer, parse_pubkey
from .inputs import require_input, to_number
from .rpc_adapter import resolve_connection

logger = logging.getLogger(__name__)


def _parsed_info(account: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """`account.data.parsed.info` from a jsonParsed account, or {}."""
    data = (account or {}).get("data")
    if not isinstance(data, dict):
        return {}
    parsed = data.get("parsed")
    if not isinstance(parsed, dict):
        return {}
    info = parsed.get("info")
    return info if isinstance(info, dict) else {}


def _ui_amount(info: Dict[str, Any]) -> Optional[float]:
    token_amount = info.get("tokenAmount")
    if not isinstance(token_amount, dict):
        return None
    return token_amount.get("uiAmount")


async def _mint_info(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    conn = resolve_connection(inputs, context)
    mint = parse_pubkey(require_input(inputs, "mint", "Mint address"), "mint address")
    account = await conn.get_account_info(str(mint), encoding="jsonParsed")
    info = _parsed_info(account)
    if not info:
        raise ValueError(f"Not a valid token mint: {mint}")
    return info


async def get_token_accounts(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    conn = resolve_connection(inputs, context)
    owner = parse_pubkey(require_input(inputs, "owner", "Owner"), "owner")
    raw_accounts = await conn.get_token_accounts_by_owner(str(owner), TOKEN_PROGRAM_ID)

    accounts = []
    for entry in raw_accounts:
        info = _parsed_info(entry.get("account"))
        token_amount = info.get("tokenAmount") or {}
        accounts.append(
            {
                "address": entry.get("pubkey"),
                "mint": info.get("mint"),
                "amount": token_amount.get("uiAmount"),
                "decimals": token_amount.get("decimals"),
            }
        )
    return {"accounts": accounts}


async def get_token_balance(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    conn = resolve_connection(inputs, context)
    token_account = parse_pubkey(require_input(inputs, "tokenAccount", "Token account"), "token account")
    value = await conn.get_token_account_balance(str(token_account))
    return {"balance": value.get("uiAmount") or 0, "decimals": value.get("decimals")}


def transfer_token(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Build an SPL Token transfer; `amount` is in the token's base units."""
    source = parse_pubkey(require_input(inputs, "source", "Source"), "source")
    destination = parse_pubkey(require_input(inputs, "destination", "Destination"), "destination")
    owner = parse_pubkey(require_input(inputs, "owner", "Owner"), "owner")
    amount = to_number(inputs.get("amount"))
    if amount <= 0:
        raise ValueError("Amount must be greater than 0")
    if amount != int(amount):
        raise ValueError("Token amount must be a whole number of base units")
    return {"instruction": build_token_transfer(source, destination, owner, int(amount))}


async def get_token_metadata(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    info = await _mint_info(inputs, context)
    mint = str(inputs.get("mint")).strip()
    return {
        "name": f"Token {mint[:8]}",
        "symbol": "TOKEN",
        "decimals": info.get("decimals") or 0,
        "supply": to_number(info.get("supply")),
    }


async def get_token_info(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    info = await _mint_info(inputs, context)
    return {
        "mintAuthority": info.get("mintAuthority") or None,
        "freezeAuthority": info.get("freezeAuthority") or None,
        "supply": to_number(info.get("supply")),
        "decimals": info.get("decimals") or 0,
    }


async def check_token_holders(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Scan token accounts of a mint and keep those with a positive balance."""
    conn = resolve_connection(inputs, context)
    mint = parse_pubkey(require_input(inputs, "mint", "Mint address"), "mint address")
    filters = [
        {"dataSize": TOKEN_ACCOUNT_SIZE},
        {"memcmp": {"offset": 0, "bytes": str(mint)}},
    ]
    accounts = await conn.get_program_accounts(TOKEN_PROGRAM_ID, filters)

    holders: List[Dict[str, Any]] = []
    for entry in accounts:
        info = _parsed_info(entry.get("account"))
        amount = _ui_amount(info)
        if amount is not None and amount > 0:
            holders.append({"owner": info.get("owner"), "amount": amount})
    return {"holders": holders, "count": len(holders)}


async def check_swap_routes(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Ask the swap aggregator for a quote between two mints."""
    input_mint = str(require_input(inputs, "inputMint", "Input mint")).strip()
    output_mint = str(require_input(inputs, "outputMint", "Output mint")).strip()
    amount = to_number(inputs.get("amount"))
    if amount <= 0:
        raise ValueError("Amount must be greater than 0")

    url = context.settings.swap_quote_url
    params = {"inputMint": input_mint, "outputMint": output_mint, "amount": int(amount)}
    logger.debug("Requesting swap quote %s -> %s (%s)", input_mint, output_mint, params["amount"])
    try:
        response = await context.http_client().get(url, params=params)
        response.raise_for_status()
        body = response.json()
    except httpx.HTTPStatusError as e:
        raise ExternalCallError(f"Swap quote request failed: HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise ExternalCallError(f"Swap quote request failed: {e}") from e
    except ValueError as e:
        raise ExternalCallError("Swap quote service returned invalid JSON") from e

    # Older aggregator versions wrap routes in `data`; current ones return a single quote.
    if isinstance(body, dict) and isinstance(body.get("data"), list):
        routes = body["data"]
    elif isinstance(body, dict) and body:
        routes = [body]
    else:
        routes = []
    best = routes[0] if routes else None
    price_impact = to_number((best or {}).get("priceImpactPct"))
    return {"routes": routes, "bestRoute": best, "priceImpact": price_impact}


async def check_liquidity_pools(inputs: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Basic pool detection: token accounts owned by the mint address itself."""
    conn = resolve_connection(inputs, context)
    mint = parse_pubkey(require_input(inputs, "mint", "Mint address"), "mint address")
    accounts = await conn.get_token_accounts_by_owner(str(mint), TOKEN_PROGRAM_ID)

    pools = []
    for entry in accounts:
        balance = _ui_amount(_parsed_info(entry.get("account"))) or 0
        pools.append({"address": entry.get("pubkey"), "mint": str(mint), "balance": balance})
    return {"pools": pools, "totalLiquidity": sum(p["balance"] for p in pools)}


HANDLERS = {
    "get-token-accounts": get_token_accounts,
    "get-token-balance": get_token_balance,
    "transfer-token": transfer_token,
    "get-token-metadata": get_token_metadata,
    "get-token-info": get_token_info,
    "check-token-holders": check_token_holders,
    "check-swap-routes": check_swap_routes,
    "check-liquidity-pools": check_liquidity_pools,
}
