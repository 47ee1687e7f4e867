"""
Tests for getTransaction retrieval over JSON-RPC (httpx client mocked).
"""

from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest

from solana_ixparse.config.settings import ParserSettings
from solana_ixparse.engine.fetch import build_get_transaction_body, fetch_transaction


@pytest.fixture
def settings():
    return ParserSettings(
        solana_rpc_url="https://mainnet.helius-rpc.com/?api-key=secret",
        commitment="confirmed",
        request_timeout_sec=10,
    )


def _client_returning(payload):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    client = MagicMock()
    client.post.return_value = response
    return client


def test_build_body():
    body = build_get_transaction_body("sig", commitment="finalized", encoding="jsonParsed")
    assert body["method"] == "getTransaction"
    assert body["params"] == [
        "sig",
        {"commitment": "finalized", "encoding": "jsonParsed", "maxSupportedTransactionVersion": 0},
    ]
    assert build_get_transaction_body("sig", commitment="confirmed", encoding="json")["id"] != body["id"]


def test_fetch_success(settings):
    result = {"slot": 5, "transaction": {"message": {}}, "meta": {}}
    client = _client_returning({"jsonrpc": "2.0", "id": 1, "result": result})
    assert fetch_transaction("sig", settings=settings, client=client) == result
    url, = client.post.call_args.args
    assert url == settings.solana_rpc_url
    assert client.post.call_args.kwargs["json"]["params"][1]["commitment"] == "confirmed"
    client.close.assert_not_called()


def test_fetch_commitment_override(settings):
    client = _client_returning({"result": {"slot": 1}})
    fetch_transaction("sig", commitment="finalized", settings=settings, client=client)
    assert client.post.call_args.kwargs["json"]["params"][1]["commitment"] == "finalized"


def test_fetch_not_found_returns_none(settings):
    client = _client_returning({"jsonrpc": "2.0", "id": 1, "result": None})
    assert fetch_transaction("sig", settings=settings, client=client) is None


def test_fetch_rpc_error_returns_none(settings):
    client = _client_returning({"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "Invalid param"}})
    assert fetch_transaction("sig", settings=settings, client=client) is None


def test_fetch_transport_error_returns_none(settings):
    client = MagicMock()
    client.post.side_effect = httpx.ConnectError("connection refused")
    assert fetch_transaction("sig", settings=settings, client=client) is None


def test_fetch_rejects_unknown_encoding(settings):
    with pytest.raises(ValueError):
        fetch_transaction("sig", encoding="base58", settings=settings, client=MagicMock())
