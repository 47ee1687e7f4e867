"""
Environment variable loading for solana_ixparse.

- SOLANA_NETWORK: devnet | mainnet (default: mainnet)
- SOLANA_RPC_URL: RPC endpoint used by parse_transaction (read from .env)
- HELIUS_API_KEY: Helius API key (fallback for RPC URL)
- IXPARSE_COMMITMENT: processed | confirmed | finalized (default: confirmed)
- IXPARSE_RPC_TIMEOUT_SEC: HTTP timeout for getTransaction (default: 30)
- Loads .env from the working directory or project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEVNET_RPC_URL = "https://api.devnet.solana.com"
MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
HELIUS_MAINNET_URL_TEMPLATE = "https://mainnet.helius-rpc.com/?api-key={key}"
HELIUS_DEVNET_URL_TEMPLATE = "https://devnet.helius-rpc.com/?api-key={key}"

VALID_COMMITMENTS = ("processed", "confirmed", "finalized")
DEFAULT_COMMITMENT = "confirmed"
DEFAULT_RPC_TIMEOUT_SEC = 30.0


def load_ixparse_env() -> None:
    """Load .env from project root. Safe to call multiple times."""
    load_dotenv(_ENV_PATH)


def get_solana_network() -> str:
    """
    Return SOLANA_NETWORK from env: devnet | mainnet.
    Default: mainnet.
    """
    load_ixparse_env()
    raw = (os.getenv("SOLANA_NETWORK") or os.getenv("SOLANA_CLUSTER") or "mainnet").strip().lower()
    if raw == "devnet":
        return "devnet"
    return "mainnet"


def get_solana_rpc_url() -> str:
    """
    Resolve Solana RPC URL from env.
    Order: SOLANA_RPC_URL > HELIUS_API_KEY (network-specific) > devnet/mainnet default.
    """
    load_ixparse_env()
    url = (os.getenv("SOLANA_RPC_URL") or "").strip()
    if url:
        return url
    network = get_solana_network()
    key = (os.getenv("HELIUS_API_KEY") or "").strip()
    if key:
        if network == "devnet":
            return HELIUS_DEVNET_URL_TEMPLATE.format(key=key)
        return HELIUS_MAINNET_URL_TEMPLATE.format(key=key)
    return DEVNET_RPC_URL if network == "devnet" else MAINNET_RPC_URL


def get_commitment() -> str:
    """Return IXPARSE_COMMITMENT; unknown values fall back to confirmed."""
    load_ixparse_env()
    raw = (os.getenv("IXPARSE_COMMITMENT") or DEFAULT_COMMITMENT).strip().lower()
    return raw if raw in VALID_COMMITMENTS else DEFAULT_COMMITMENT


def get_request_timeout() -> float:
    """Return IXPARSE_RPC_TIMEOUT_SEC as a positive float (default 30)."""
    load_ixparse_env()
    raw = (os.getenv("IXPARSE_RPC_TIMEOUT_SEC") or "").strip()
    try:
        value = float(raw) if raw else DEFAULT_RPC_TIMEOUT_SEC
    except ValueError:
        return DEFAULT_RPC_TIMEOUT_SEC
    return value if value > 0 else DEFAULT_RPC_TIMEOUT_SEC


def mask_rpc_url(rpc_url: str) -> str:
    """Hide the API key in a Helius-style URL for logging."""
    if "api-key=" in rpc_url:
        return rpc_url.split("api-key=")[0] + "api-key=***"
    return rpc_url
