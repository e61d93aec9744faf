"""
Application settings assembled from environment configuration.

Exposes a typed, immutable snapshot (RPC URL, fetch limits, API bind address)
for use across the transaction fetcher, tool layer, API server and CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from backend_explainer.config.env import (
    get_commitment,
    get_fetch_concurrency,
    get_max_retries,
    get_request_timeout_sec,
    get_solana_network,
    get_solana_rpc_url,
    get_tx_fetch_limit,
    load_explainer_env,
)


@dataclass(frozen=True)
class Settings:
    solana_network: str
    solana_rpc_url: str
    tx_fetch_limit: int
    fetch_concurrency: int
    request_timeout_sec: float
    max_retries: int
    commitment: str
    api_host: str
    api_port: int
    log_level: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the current application settings.

    Cached for the process lifetime; tests call get_settings.cache_clear()
    after changing the environment.
    """
    load_explainer_env()
    return Settings(
        solana_network=get_solana_network(),
        solana_rpc_url=get_solana_rpc_url(),
        tx_fetch_limit=get_tx_fetch_limit(),
        fetch_concurrency=get_fetch_concurrency(),
        request_timeout_sec=get_request_timeout_sec(),
        max_retries=get_max_retries(),
        commitment=get_commitment(),
        api_host=os.getenv("API_HOST", "0.0.0.0").strip() or "0.0.0.0",
        api_port=int(os.getenv("API_PORT", "8000").strip() or "8000"),
        log_level=os.getenv("LOG_LEVEL", "info").strip().lower() or "info",
    )
