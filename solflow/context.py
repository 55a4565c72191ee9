"""Per-run execution context: endpoint, wallet and lazily created clients."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import httpx

from .config import EngineSettings, normalize_endpoint
from .errors import MissingEndpointError
from .rpc import RpcConnection
from .wallet import WalletIdentity

logger = logging.getLogger(__name__)


class ExecutionContext:
    """Shared by every node of one run.

    The primary RPC connection is created on first use and reused for the
    rest of the run. Nodes that name a different endpoint get their own
    cached connection. Call `aclose()` (or use `async with`) when done.
    """

    def __init__(
        self,
        endpoint: Optional[str],
        *,
        wallet: Optional[WalletIdentity] = None,
        settings: Optional[EngineSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        resolved = normalize_endpoint(endpoint)
        if not resolved:
            raise MissingEndpointError()
        self.endpoint: str = resolved
        self.wallet = wallet or WalletIdentity()
        self.settings = settings or EngineSettings()
        self._transport = transport
        self._connection: Optional[RpcConnection] = None
        self._extra_connections: Dict[str, RpcConnection] = {}
        self._http: Optional[httpx.AsyncClient] = None

    @property
    def connection(self) -> Optional[RpcConnection]:
        """The primary connection, or None if nothing has used it yet."""
        return self._connection

    def _new_connection(self, endpoint: str) -> RpcConnection:
        logger.debug("Opening RPC connection to %s", endpoint)
        return RpcConnection(endpoint, timeout_s=self.settings.rpc_timeout_s, transport=self._transport)

    def get_connection(self) -> RpcConnection:
        if self._connection is None:
            self._connection = self._new_connection(self.endpoint)
        return self._connection

    def connection_for(self, endpoint: Optional[str]) -> RpcConnection:
        resolved = normalize_endpoint(endpoint)
        if not resolved or resolved == self.endpoint:
            return self.get_connection()
        conn = self._extra_connections.get(resolved)
        if conn is None:
            conn = self._new_connection(resolved)
            self._extra_connections[resolved] = conn
        return conn

    def http_client(self) -> httpx.AsyncClient:
        """Plain HTTP client for non-RPC services (swap quotes)."""
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.settings.rpc_timeout_s, transport=self._transport)
        return self._http

    async def aclose(self) -> None:
        if self._connection is not None:
            await self._connection.aclose()
        for conn in self._extra_connections.values():
            await conn.aclose()
        self._extra_connections.clear()
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "ExecutionContext":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
