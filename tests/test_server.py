"""
Tests for the FastAPI server (api_server.server) via TestClient.

The transaction source dependency is overridden with a stub.
"""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from backend_explainer.api_server.server import app, get_fetcher
from backend_explainer.core.exceptions import TransactionFetchError
from tests.tx_builders import SIGNATURE, WALLET, make_tx


class StubSource:
    def __init__(self, transactions: list[Any] | None = None, error: Exception | None = None) -> None:
        self.transactions = transactions or []
        self.error = error
        self.limits: list[int] = []

    async def fetch_transactions(self, address: str, limit: int = 100) -> list[dict[str, Any]]:
        self.limits.append(limit)
        if self.error is not None:
            raise self.error
        return self.transactions


@pytest.fixture
def stub_source():
    source = StubSource([make_tx()])
    app.dependency_overrides[get_fetcher] = lambda: source
    yield source
    app.dependency_overrides.clear()


@pytest.fixture
def client(stub_source):
    return TestClient(app)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_list_tools(client):
    resp = client.get("/tools")
    assert resp.status_code == 200
    assert [t["name"] for t in resp.json()["tools"]] == ["fetch_solana_transactions"]


def test_call_tool(client):
    resp = client.post(
        "/tools/call",
        json={"name": "fetch_solana_transactions", "arguments": {"walletAddress": WALLET, "limit": 3}},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["transactions"][0]["signature"] == SIGNATURE
    assert body["transactions"][0]["asset_id"] == "SOL"


def test_call_tool_error_payload(client):
    resp = client.post("/tools/call", json={"name": "nope", "arguments": {}})
    assert resp.status_code == 200
    assert resp.json()["isError"] is True


def test_wallet_transactions(client, stub_source):
    resp = client.get(f"/wallet/{WALLET}/transactions", params={"limit": 10})
    assert resp.status_code == 200
    (item,) = resp.json()
    assert item["amount"] == -1.0
    assert item["explorer_url"] == f"https://solscan.io/tx/{SIGNATURE}"
    assert stub_source.limits == [10]


def test_wallet_transactions_invalid_address(client):
    resp = client.get("/wallet/not-a-wallet/transactions")
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Invalid Solana wallet address"}


def test_wallet_transactions_limit_bounds(client):
    resp = client.get(f"/wallet/{WALLET}/transactions", params={"limit": 5000})
    assert resp.status_code == 422


def test_wallet_transactions_fetch_failure(client, stub_source):
    stub_source.error = TransactionFetchError("rpc down")
    resp = client.get(f"/wallet/{WALLET}/transactions")
    assert resp.status_code == 502
    assert "rpc down" in resp.json()["detail"]
