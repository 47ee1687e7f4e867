"""
Parser settings resolved from the environment.

Single source of truth for the RPC endpoint, commitment and request timeout
used when a transaction is fetched by signature before parsing.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from solana_ixparse.config.env import (
    get_commitment,
    get_request_timeout,
    get_solana_rpc_url,
)


@dataclass
class ParserSettings:
    """Settings for transaction retrieval (env or explicit)."""

    solana_rpc_url: str = field(default_factory=get_solana_rpc_url)
    commitment: str = field(default_factory=get_commitment)
    request_timeout_sec: float = field(default_factory=get_request_timeout)
    max_supported_transaction_version: int = 0

    def __post_init__(self) -> None:
        self.solana_rpc_url = self.solana_rpc_url.strip()
        if not self.solana_rpc_url:
            raise ValueError("solana_rpc_url must be non-empty")
        if self.request_timeout_sec <= 0:
            raise ValueError("request_timeout_sec must be positive")


def get_settings() -> ParserSettings:
    """Return settings built from the current environment."""
    return ParserSettings()
