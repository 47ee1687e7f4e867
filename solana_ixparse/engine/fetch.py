"""
Transaction retrieval by signature: JSON-RPC getTransaction over httpx.

One request, no retry or backoff; callers that need resilience wrap it.
A missing transaction and a failed request both come back as None, the
failure being logged with the RPC URL masked.
"""

from __future__ import annotations

import itertools
from typing import Any

import httpx

from solana_ixparse.config.env import mask_rpc_url
from solana_ixparse.config.settings import ParserSettings, get_settings
from solana_ixparse.ixparse_logging import get_logger

logger = get_logger(__name__)

SUPPORTED_ENCODINGS = ("json", "jsonParsed", "base64")

_request_ids = itertools.count(1)


def build_get_transaction_body(
    signature: str,
    *,
    commitment: str,
    encoding: str,
    max_supported_transaction_version: int = 0,
) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": next(_request_ids),
        "method": "getTransaction",
        "params": [
            signature,
            {
                "commitment": commitment,
                "encoding": encoding,
                "maxSupportedTransactionVersion": max_supported_transaction_version,
            },
        ],
    }


def fetch_transaction(
    signature: str,
    *,
    commitment: str | None = None,
    encoding: str = "json",
    settings: ParserSettings | None = None,
    client: httpx.Client | None = None,
) -> dict[str, Any] | None:
    """
    Fetch one transaction by signature.

    Args:
        signature: Base58 transaction signature.
        commitment: processed | confirmed | finalized; defaults to settings.
        encoding: json | jsonParsed | base64.
        settings: RPC URL and timeout; defaults to get_settings().
        client: Optional httpx.Client to reuse (not closed here).

    Returns:
        The getTransaction result dict, or None when the node does not know the
        transaction or the request failed.
    """
    if encoding not in SUPPORTED_ENCODINGS:
        raise ValueError(f"encoding must be one of {SUPPORTED_ENCODINGS}, got {encoding!r}")
    settings = settings or get_settings()
    body = build_get_transaction_body(
        signature,
        commitment=commitment or settings.commitment,
        encoding=encoding,
        max_supported_transaction_version=settings.max_supported_transaction_version,
    )
    try:
        if client is not None:
            data = _post(client, settings.solana_rpc_url, body)
        else:
            with httpx.Client(timeout=httpx.Timeout(settings.request_timeout_sec)) as own_client:
                data = _post(own_client, settings.solana_rpc_url, body)
    except (httpx.HTTPError, ValueError, RuntimeError) as e:
        logger.warning(
            "transaction_fetch_failed",
            signature=signature,
            rpc_url=mask_rpc_url(settings.solana_rpc_url),
            error=str(e),
        )
        return None

    result = data.get("result")
    if result is None:
        logger.info("transaction_not_found", signature=signature, commitment=body["params"][1]["commitment"])
        return None
    return result


def _post(client: httpx.Client, rpc_url: str, body: dict[str, Any]) -> dict[str, Any]:
    """Perform the JSON-RPC call; raise on transport or RPC error."""
    resp = client.post(rpc_url, json=body)
    resp.raise_for_status()
    data = resp.json()
    if not isinstance(data, dict):
        raise RuntimeError("Solana RPC returned a non-object response")
    if "error" in data:
        err = data["error"]
        if isinstance(err, dict):
            raise RuntimeError(f"Solana RPC error: {err.get('message', err)} (code={err.get('code')})")
        raise RuntimeError(f"Solana RPC error: {err}")
    return data
