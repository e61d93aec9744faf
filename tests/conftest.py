"""
Pytest fixtures for explainer tests: clean configuration environment.
Payload builders live in tests/tx_builders.py.
"""

from __future__ import annotations

import pytest

_ENV_VARS = (
    "SOLANA_RPC_URL",
    "RPC_URL",
    "HELIUS_API_KEY",
    "SOLANA_NETWORK",
    "SOLANA_CLUSTER",
    "TX_FETCH_LIMIT",
    "TX_FETCH_CONCURRENCY",
    "RPC_TIMEOUT_SEC",
    "RPC_MAX_RETRIES",
    "RPC_COMMITMENT",
    "API_HOST",
    "API_PORT",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Unset explainer env vars and reset the cached settings."""
    from backend_explainer.config import get_settings

    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("backend_explainer.config.env.load_explainer_env", lambda: None)
    monkeypatch.setattr("backend_explainer.config.settings.load_explainer_env", lambda: None)
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()
