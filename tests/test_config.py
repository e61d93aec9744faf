"""
Tests for environment configuration (config.env, config.settings).
"""

from __future__ import annotations

import pytest

from backend_explainer.config import get_settings
from backend_explainer.config.env import (
    MAINNET_RPC_URL,
    DEVNET_RPC_URL,
    get_commitment,
    get_solana_rpc_url,
    get_tx_fetch_limit,
    mask_rpc_url,
)


def test_defaults(clean_env):
    settings = get_settings()
    assert settings.solana_network == "mainnet"
    assert settings.solana_rpc_url == MAINNET_RPC_URL
    assert settings.tx_fetch_limit == 100
    assert settings.fetch_concurrency == 10
    assert settings.request_timeout_sec == 30.0
    assert settings.max_retries == 3
    assert settings.commitment == "confirmed"
    assert settings.api_port == 8000


def test_rpc_url_precedence(clean_env):
    clean_env.setenv("HELIUS_API_KEY", "k")
    assert get_solana_rpc_url() == "https://mainnet.helius-rpc.com/?api-key=k"
    clean_env.setenv("SOLANA_NETWORK", "devnet")
    assert get_solana_rpc_url() == "https://devnet.helius-rpc.com/?api-key=k"
    clean_env.setenv("RPC_URL", "https://rpc.example")
    assert get_solana_rpc_url() == "https://rpc.example"
    clean_env.setenv("SOLANA_RPC_URL", "https://primary.example")
    assert get_solana_rpc_url() == "https://primary.example"


def test_devnet_default(clean_env):
    clean_env.setenv("SOLANA_NETWORK", "devnet")
    assert get_solana_rpc_url() == DEVNET_RPC_URL


def test_limit_is_capped(clean_env):
    clean_env.setenv("TX_FETCH_LIMIT", "5000")
    assert get_tx_fetch_limit() == 1000


def test_invalid_values_raise(clean_env):
    clean_env.setenv("TX_FETCH_CONCURRENCY", "zero")
    with pytest.raises(ValueError):
        get_settings()
    clean_env.setenv("TX_FETCH_CONCURRENCY", "4")
    clean_env.setenv("RPC_COMMITMENT", "eventually")
    with pytest.raises(ValueError):
        get_commitment()


def test_settings_are_cached(clean_env):
    assert get_settings() is get_settings()


def test_mask_rpc_url():
    assert mask_rpc_url("https://mainnet.helius-rpc.com/?api-key=secret") == "https://mainnet.helius-rpc.com/?api-key=***"
    assert mask_rpc_url(MAINNET_RPC_URL) == MAINNET_RPC_URL
