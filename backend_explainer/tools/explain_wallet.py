"""
Explain the recent transactions of one wallet and print the result as JSON.

Fetches the last N signatures via Solana RPC, reduces each transaction to a
transfer summary and prints the tool response (content + transactions).

Usage:
  py -m backend_explainer.tools.explain_wallet <wallet> --limit 20
  explain-wallet <wallet> --rpc-url https://api.devnet.solana.com
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from backend_explainer.api_server.solana_tools import (
    FETCH_SOLANA_TRANSACTIONS,
    handle_solana_tool,
)
from backend_explainer.config import get_settings
from backend_explainer.config.env import print_explainer_startup
from backend_explainer.core.exceptions import ExplainerError
from backend_explainer.explainer_logging import get_logger
from backend_explainer.solana_listener.fetcher import SolanaTransactionFetcher

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="explain-wallet",
        description="Summarize recent Solana transactions for a wallet.",
    )
    parser.add_argument("wallet", help="Wallet address (base58)")
    parser.add_argument("--limit", type=int, default=None, help="Number of recent transactions (default: TX_FETCH_LIMIT or 100)")
    parser.add_argument("--rpc-url", default=None, help="Solana RPC endpoint (default: SOLANA_RPC_URL)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    print_explainer_startup("explain_wallet")

    overrides = {"rpc_url": args.rpc_url} if args.rpc_url else {}
    fetcher = SolanaTransactionFetcher.from_settings(settings, **overrides)
    limit = args.limit if args.limit is not None else settings.tx_fetch_limit

    try:
        response = asyncio.run(
            handle_solana_tool(
                FETCH_SOLANA_TRANSACTIONS,
                {"walletAddress": args.wallet, "limit": limit},
                fetcher=fetcher,
            )
        )
    except ExplainerError as e:
        logger.error("explain_wallet_failed", wallet_id=args.wallet, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(response, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
