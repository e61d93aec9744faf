"""
Tests for the JSON-RPC transaction fetcher (solana_listener.fetcher).

RPC is replaced with httpx.MockTransport; async calls are driven with asyncio.run.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest
from structlog.testing import capture_logs

from backend_explainer.core.exceptions import RpcError, TransactionFetchError
from backend_explainer.solana_listener.fetcher import SolanaTransactionFetcher
from tests.tx_builders import WALLET, make_tx

RPC_URL = "https://rpc.test"


def _rpc_transport(
    signatures: list[str],
    transactions: dict[str, Any],
    calls: list[dict[str, Any]] | None = None,
) -> httpx.MockTransport:
    """Serve getSignaturesForAddress from signatures and getTransaction from transactions.

    A transactions value that is an Exception triggers a JSON-RPC error for that signature.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if calls is not None:
            calls.append(body)
        method = body["method"]
        if method == "getSignaturesForAddress":
            result = [
                {"signature": s, "slot": 100 - i, "err": None, "blockTime": 1700000000 - i, "confirmationStatus": "confirmed"}
                for i, s in enumerate(signatures)
            ]
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})
        if method == "getTransaction":
            value = transactions.get(body["params"][0])
            if isinstance(value, Exception):
                return httpx.Response(
                    200,
                    json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32009, "message": str(value)}},
                )
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": value})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def _fetcher(transport: httpx.MockTransport, **kwargs: Any) -> SolanaTransactionFetcher:
    kwargs.setdefault("min_retry_delay_sec", 0.0)
    return SolanaTransactionFetcher(RPC_URL, transport=transport, **kwargs)


def test_fetch_transactions_preserves_signature_order():
    txs = {f"sig{i}": make_tx(signatures=[f"sig{i}"]) for i in range(5)}
    fetcher = _fetcher(_rpc_transport(list(txs), txs), max_concurrency=2)
    result = asyncio.run(fetcher.fetch_transactions(WALLET, limit=5))
    assert [r["transaction"]["signatures"][0] for r in result] == ["sig0", "sig1", "sig2", "sig3", "sig4"]


def test_fetch_transactions_discards_failures_and_not_found():
    txs: dict[str, Any] = {
        "ok1": make_tx(signatures=["ok1"]),
        "missing": None,
        "broken": RuntimeError("Transaction version (1) is not supported"),
        "ok2": make_tx(signatures=["ok2"]),
    }
    fetcher = _fetcher(_rpc_transport(list(txs), txs))
    result = asyncio.run(fetcher.fetch_transactions(WALLET, limit=10))
    assert [r["transaction"]["signatures"][0] for r in result] == ["ok1", "ok2"]


def test_fetch_transactions_logs_carry_wallet_id():
    txs: dict[str, Any] = {
        "ok": make_tx(signatures=["ok"]),
        "broken": RuntimeError("node is behind"),
    }
    fetcher = _fetcher(_rpc_transport(list(txs), txs))
    with capture_logs() as logs:
        asyncio.run(fetcher.fetch_transactions(WALLET, limit=10))
    by_event = {entry["event"]: entry for entry in logs if "wallet_id" in entry}
    assert by_event["transaction_fetch_discarded"]["signature"] == "broken"
    assert by_event["wallet_transactions_fetched"]["wallet_id"] == WALLET
    assert by_event["wallet_transactions_fetched"]["transaction_count"] == 1


def test_request_params():
    calls: list[dict[str, Any]] = []
    txs = {"sig0": make_tx(signatures=["sig0"])}
    fetcher = _fetcher(_rpc_transport(["sig0"], txs, calls), commitment="finalized")
    asyncio.run(fetcher.fetch_transactions(WALLET, limit=7))
    sig_call, tx_call = calls
    assert sig_call["method"] == "getSignaturesForAddress"
    assert sig_call["params"] == [WALLET, {"limit": 7, "commitment": "finalized"}]
    assert tx_call["method"] == "getTransaction"
    assert tx_call["params"][0] == "sig0"
    assert tx_call["params"][1]["maxSupportedTransactionVersion"] == 0
    assert tx_call["params"][1]["commitment"] == "finalized"


def test_signature_rpc_error_propagates():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "Invalid param"}})

    fetcher = _fetcher(httpx.MockTransport(handler))
    with pytest.raises(RpcError) as exc_info:
        asyncio.run(fetcher.fetch_transactions(WALLET, limit=5))
    assert exc_info.value.code == -32602
    assert "Invalid param" in str(exc_info.value)


def test_transport_errors_are_retried_then_raised():
    attempts = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["n"] += 1
        raise httpx.ConnectError("connection refused", request=request)

    fetcher = _fetcher(httpx.MockTransport(handler), max_retries=3)
    with pytest.raises(TransactionFetchError):
        asyncio.run(fetcher.get_signatures(WALLET, limit=5))
    assert attempts["n"] == 3


def test_rate_limited_request_succeeds_on_retry():
    attempts = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["n"] += 1
        if attempts["n"] == 1:
            return httpx.Response(429)
        body = json.loads(request.content)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": [{"signature": "s", "slot": 1}]})

    fetcher = _fetcher(httpx.MockTransport(handler), max_retries=2)
    infos = asyncio.run(fetcher.get_signatures(WALLET, limit=1))
    assert [i.signature for i in infos] == ["s"]
    assert attempts["n"] == 2


def test_get_transaction_not_found_returns_none():
    fetcher = _fetcher(_rpc_transport([], {}))
    assert asyncio.run(fetcher.get_transaction("nope")) is None


def test_invalid_limit_rejected():
    fetcher = _fetcher(_rpc_transport([], {}))
    with pytest.raises(ValueError):
        asyncio.run(fetcher.fetch_transactions(WALLET, limit=0))


def test_constructor_validation():
    with pytest.raises(ValueError):
        SolanaTransactionFetcher("  ")
    with pytest.raises(ValueError):
        SolanaTransactionFetcher(RPC_URL, max_concurrency=0)
