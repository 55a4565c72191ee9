"""Environment-driven configuration for SolFlow hosts (CLI, web backend).

Every setting can also be passed explicitly; the environment only provides
defaults. Endpoints accept cluster aliases (`mainnet`, `devnet`, `testnet`).
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Optional

from .constants import DEFAULT_SWAP_QUOTE_URL, RPC_ENDPOINTS


def _env_str(*names: str) -> Optional[str]:
    for name in names:
        raw = os.getenv(name)
        if isinstance(raw, str) and raw.strip():
            return raw.strip()
    return None


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number (got {raw!r})") from e
    return value if value > 0 else default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = _env_str(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def normalize_endpoint(endpoint: Optional[str]) -> Optional[str]:
    """Expand cluster aliases and strip whitespace; empty -> None."""
    value = str(endpoint or "").strip()
    if not value:
        return None
    return RPC_ENDPOINTS.get(value.lower(), value)


def resolve_rpc_endpoint_from_env() -> Optional[str]:
    return normalize_endpoint(_env_str("SOLFLOW_RPC_ENDPOINT"))


def resolve_keypair_path_from_env() -> Optional[str]:
    return _env_str("SOLFLOW_KEYPAIR_PATH")


def resolve_log_level_from_env() -> str:
    return (_env_str("SOLFLOW_LOG_LEVEL") or "info").lower()


@dataclass(frozen=True)
class EngineSettings:
    """Run-level knobs shared by the CLI and the web backend."""

    endpoint: Optional[str] = None
    keypair_path: Optional[str] = None
    strict_handles: bool = False
    node_timeout_s: Optional[float] = None
    confirm_timeout_s: float = 60.0
    rpc_timeout_s: float = 30.0
    swap_quote_url: str = DEFAULT_SWAP_QUOTE_URL

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            endpoint=resolve_rpc_endpoint_from_env(),
            keypair_path=resolve_keypair_path_from_env(),
            strict_handles=_env_bool("SOLFLOW_STRICT_HANDLES"),
            node_timeout_s=_env_float("SOLFLOW_NODE_TIMEOUT_S", None),
            confirm_timeout_s=_env_float("SOLFLOW_CONFIRM_TIMEOUT_S", 60.0) or 60.0,
            rpc_timeout_s=_env_float("SOLFLOW_RPC_TIMEOUT_S", 30.0) or 30.0,
            swap_quote_url=_env_str("SOLFLOW_SWAP_QUOTE_URL") or DEFAULT_SWAP_QUOTE_URL,
        )
