"""Async Solana JSON-RPC connection over httpx.

One `RpcConnection` is bound to one endpoint and reuses a single
`httpx.AsyncClient` for every request it issues.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from .constants import DEFAULT_COMMITMENT
from .errors import ExternalCallError

logger = logging.getLogger(__name__)

_CONFIRMED_STATUSES = {"confirmed", "finalized"}


def _context_value(method: str, result: Any) -> Any:
    """Unwrap `{"context": ..., "value": ...}` RPC results."""
    if not isinstance(result, dict) or "value" not in result:
        raise ExternalCallError(f"RPC {method} returned a malformed response")
    return result["value"]


class RpcConnection:
    def __init__(
        self,
        endpoint: str,
        *,
        commitment: str = DEFAULT_COMMITMENT,
        timeout_s: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint
        self.commitment = commitment
        self._timeout_s = timeout_s
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._request_id = 0

    def __repr__(self) -> str:
        return f"RpcConnection({self.endpoint!r})"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout_s, transport=self._transport)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Issue one JSON-RPC request and return its `result`."""
        self._request_id += 1
        payload: Dict[str, Any] = {"jsonrpc": "2.0", "id": self._request_id, "method": method}
        if params is not None:
            payload["params"] = params

        logger.debug("RPC %s -> %s", method, self.endpoint)
        try:
            response = await self._get_client().post(self.endpoint, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise ExternalCallError(
                f"RPC {method} failed: HTTP {e.response.status_code} from {self.endpoint}"
            ) from e
        except httpx.HTTPError as e:
            raise ExternalCallError(f"RPC {method} failed: {e}") from e
        except ValueError as e:
            raise ExternalCallError(f"RPC {method} returned invalid JSON") from e

        if not isinstance(body, dict):
            raise ExternalCallError(f"RPC {method} returned a malformed response")
        error = body.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ExternalCallError(f"RPC {method} error: {message}")
        if "result" not in body:
            raise ExternalCallError(f"RPC {method} response has no result")
        return body["result"]

    def _config(self, **extra: Any) -> Dict[str, Any]:
        return {"commitment": self.commitment, **extra}

    async def get_balance(self, pubkey: str) -> int:
        value = _context_value("getBalance", await self.call("getBalance", [pubkey, self._config()]))
        return int(value)

    async def get_account_info(self, pubkey: str, *, encoding: str = "base64") -> Optional[Dict[str, Any]]:
        result = await self.call("getAccountInfo", [pubkey, self._config(encoding=encoding)])
        return _context_value("getAccountInfo", result)

    async def get_slot(self) -> int:
        return int(await self.call("getSlot", [self._config()]))

    async def get_block_height(self) -> int:
        return int(await self.call("getBlockHeight", [self._config()]))

    async def get_latest_blockhash(self) -> Dict[str, Any]:
        value = _context_value("getLatestBlockhash", await self.call("getLatestBlockhash", [self._config()]))
        if not isinstance(value, dict) or "blockhash" not in value:
            raise ExternalCallError("RPC getLatestBlockhash returned a malformed response")
        return value

    async def get_token_accounts_by_owner(self, owner: str, program_id: str) -> List[Dict[str, Any]]:
        result = await self.call(
            "getTokenAccountsByOwner",
            [owner, {"programId": program_id}, self._config(encoding="jsonParsed")],
        )
        value = _context_value("getTokenAccountsByOwner", result)
        return list(value or [])

    async def get_token_account_balance(self, token_account: str) -> Dict[str, Any]:
        result = await self.call("getTokenAccountBalance", [token_account, self._config()])
        value = _context_value("getTokenAccountBalance", result)
        if not isinstance(value, dict):
            raise ExternalCallError("RPC getTokenAccountBalance returned a malformed response")
        return value

    async def get_program_accounts(self, program_id: str, filters: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        result = await self.call(
            "getProgramAccounts",
            [program_id, self._config(encoding="jsonParsed", filters=filters)],
        )
        if not isinstance(result, list):
            raise ExternalCallError("RPC getProgramAccounts returned a malformed response")
        return result

    async def send_raw_transaction(self, raw: bytes) -> str:
        encoded = base64.b64encode(raw).decode("ascii")
        signature = await self.call(
            "sendTransaction",
            [encoded, {"encoding": "base64", "preflightCommitment": self.commitment}],
        )
        if not isinstance(signature, str):
            raise ExternalCallError("RPC sendTransaction returned a malformed response")
        return signature

    async def confirm_transaction(
        self,
        signature: str,
        *,
        timeout_s: float = 60.0,
        poll_interval_s: float = 0.5,
    ) -> Dict[str, Any]:
        """Poll signature status until confirmed, failed, or timed out.

        Returns the final status dict (`err` is None on success).
        """
        deadline = time.monotonic() + timeout_s
        while True:
            result = await self.call("getSignatureStatuses", [[signature], {"searchTransactionHistory": False}])
            statuses = _context_value("getSignatureStatuses", result)
            status = statuses[0] if isinstance(statuses, list) and statuses else None
            if isinstance(status, dict):
                if status.get("err") is not None:
                    return status
                if status.get("confirmationStatus") in _CONFIRMED_STATUSES:
                    return status
            if time.monotonic() >= deadline:
                raise ExternalCallError(f"Transaction {signature} was not confirmed within {timeout_s:g}s")
            await asyncio.sleep(poll_interval_s)
