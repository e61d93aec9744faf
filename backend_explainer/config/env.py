"""
Environment variable loading and validation for the explainer backend.

- SOLANA_NETWORK: mainnet | devnet (default: mainnet)
- SOLANA_RPC_URL / RPC_URL: RPC endpoint (read from .env)
- HELIUS_API_KEY: Helius API key (fallback for RPC URL)
- TX_FETCH_LIMIT, TX_FETCH_CONCURRENCY, RPC_TIMEOUT_SEC, RPC_MAX_RETRIES, RPC_COMMITMENT
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is backend_explainer/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEVNET_RPC_URL = "https://api.devnet.solana.com"
MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
HELIUS_MAINNET_URL_TEMPLATE = "https://mainnet.helius-rpc.com/?api-key={key}"
HELIUS_DEVNET_URL_TEMPLATE = "https://devnet.helius-rpc.com/?api-key={key}"

DEFAULT_TX_LIMIT = 100
DEFAULT_FETCH_CONCURRENCY = 10
DEFAULT_REQUEST_TIMEOUT_SEC = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_COMMITMENT = "confirmed"
COMMITMENT_LEVELS = ("processed", "confirmed", "finalized")


def load_explainer_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides set env."""
    load_dotenv(_ENV_PATH)


def _env_int(name: str, default: int, *, minimum: int = 1) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def get_solana_network() -> str:
    """
    Return SOLANA_NETWORK from env: mainnet | devnet.
    Default: mainnet.
    """
    load_explainer_env()
    raw = (os.getenv("SOLANA_NETWORK") or os.getenv("SOLANA_CLUSTER") or "mainnet").strip().lower()
    if raw == "devnet":
        return "devnet"
    return "mainnet"


def get_solana_rpc_url() -> str:
    """
    Resolve Solana RPC URL from env.
    Order: SOLANA_RPC_URL > RPC_URL > HELIUS_API_KEY (network-specific) > network default.
    """
    load_explainer_env()
    url = (os.getenv("SOLANA_RPC_URL") or os.getenv("RPC_URL") or "").strip()
    if url:
        return url
    network = get_solana_network()
    key = (os.getenv("HELIUS_API_KEY") or "").strip()
    if key:
        if network == "devnet":
            return HELIUS_DEVNET_URL_TEMPLATE.format(key=key)
        return HELIUS_MAINNET_URL_TEMPLATE.format(key=key)
    return DEVNET_RPC_URL if network == "devnet" else MAINNET_RPC_URL


def get_tx_fetch_limit() -> int:
    """Default number of signatures to explain per wallet (1–1000)."""
    load_explainer_env()
    return min(_env_int("TX_FETCH_LIMIT", DEFAULT_TX_LIMIT), 1000)


def get_fetch_concurrency() -> int:
    """Max concurrent getTransaction requests."""
    load_explainer_env()
    return _env_int("TX_FETCH_CONCURRENCY", DEFAULT_FETCH_CONCURRENCY)


def get_request_timeout_sec() -> float:
    load_explainer_env()
    return _env_float("RPC_TIMEOUT_SEC", DEFAULT_REQUEST_TIMEOUT_SEC)


def get_max_retries() -> int:
    load_explainer_env()
    return _env_int("RPC_MAX_RETRIES", DEFAULT_MAX_RETRIES)


def get_commitment() -> str:
    """Return RPC_COMMITMENT (processed | confirmed | finalized); default confirmed."""
    load_explainer_env()
    raw = (os.getenv("RPC_COMMITMENT") or DEFAULT_COMMITMENT).strip().lower()
    if raw not in COMMITMENT_LEVELS:
        raise ValueError(f"RPC_COMMITMENT must be one of {COMMITMENT_LEVELS}, got {raw!r}")
    return raw


def mask_rpc_url(rpc: str) -> str:
    """Mask API key in URL if present."""
    if "api-key=" in rpc:
        return rpc.split("api-key=")[0] + "api-key=***"
    return rpc


def print_explainer_startup(script_name: str) -> None:
    """Print network and RPC endpoint at script start (stderr)."""
    network = get_solana_network()
    rpc = mask_rpc_url(get_solana_rpc_url())
    print(f"[explainer] {script_name} | network={network} | rpc={rpc}", file=sys.stderr)
