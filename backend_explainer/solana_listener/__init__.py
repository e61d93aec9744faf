"""
Solana transaction package.

Fetches raw transactions for a wallet over JSON-RPC, resolves their account
keys and reduces each one to a TransferSummary for presentation.
"""

from backend_explainer.solana_listener.account_keys import (
    AccountKeys,
    ResolutionMode,
    resolve_account_keys,
)
from backend_explainer.solana_listener.fetcher import SolanaTransactionFetcher
from backend_explainer.solana_listener.models import (
    EXPLORER_TX_URL_TEMPLATE,
    LAMPORTS_PER_SOL,
    NATIVE_ASSET_ID,
    SignatureInfo,
    TokenBalance,
    TransferSummary,
)
from backend_explainer.solana_listener.parser import extract_transfer, extract_transfers

__all__ = [
    "AccountKeys",
    "EXPLORER_TX_URL_TEMPLATE",
    "LAMPORTS_PER_SOL",
    "NATIVE_ASSET_ID",
    "ResolutionMode",
    "SignatureInfo",
    "SolanaTransactionFetcher",
    "TokenBalance",
    "TransferSummary",
    "extract_transfer",
    "extract_transfers",
    "resolve_account_keys",
]
