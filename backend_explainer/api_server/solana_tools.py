"""
Solana tools — callable operations exposed to tool-calling clients.

fetch_solana_transactions: recent transaction history of a wallet, reduced to
transfer summaries (amount, sender, receiver, explorer link, date).
Arguments are validated with pydantic; the model's JSON schema is published
as the tool's inputSchema.
"""

from __future__ import annotations

import json
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from solders.pubkey import Pubkey

from backend_explainer.config import get_settings
from backend_explainer.core.exceptions import (
    ExplainerError,
    InvalidToolArgumentsError,
    TransactionFetchError,
    UnknownToolError,
)
from backend_explainer.explainer_logging import bind_wallet, get_logger
from backend_explainer.solana_listener.fetcher import SolanaTransactionFetcher
from backend_explainer.solana_listener.models import TransferSummary
from backend_explainer.solana_listener.parser import extract_transfers

logger = get_logger(__name__)

FETCH_SOLANA_TRANSACTIONS = "fetch_solana_transactions"


class TransactionSource(Protocol):
    async def fetch_transactions(self, address: str, limit: int = 100) -> list[dict[str, Any]]:
        ...


class FetchSolanaTransactionsArgs(BaseModel):
    """Arguments of fetch_solana_transactions."""

    model_config = ConfigDict(populate_by_name=True)

    wallet_address: str = Field(
        ...,
        alias="walletAddress",
        min_length=32,
        max_length=44,
        description="Solana wallet address (base58)",
    )
    limit: int = Field(100, ge=1, le=1000, description="Number of recent transactions to fetch")

    @field_validator("wallet_address")
    @classmethod
    def _valid_pubkey(cls, value: str) -> str:
        try:
            Pubkey.from_string(value)
        except Exception as e:
            raise ValueError("Invalid Solana address") from e
        return value


SOLANA_TOOLS: list[dict[str, Any]] = [
    {
        "name": FETCH_SOLANA_TRANSACTIONS,
        "description": (
            "Fetches the recent Solana transaction history for a given wallet address. "
            "Only show relevant details to the user, such as the transaction amount, "
            "the sender and receiver addresses, link to tx on solscan and the transaction date."
        ),
        "inputSchema": FetchSolanaTransactionsArgs.model_json_schema(by_alias=True),
    },
]


def is_solana_tool(name: str) -> bool:
    return any(tool["name"] == name for tool in SOLANA_TOOLS)


def default_fetcher() -> SolanaTransactionFetcher:
    return SolanaTransactionFetcher.from_settings(get_settings())


def build_tool_response(summaries: list[TransferSummary], wallet_address: str) -> dict[str, Any]:
    """Present summaries as text content (pretty JSON + one-line recap) and structured data."""
    transactions = [s.to_dict() for s in summaries]
    return {
        "content": [
            {"type": "text", "text": json.dumps(transactions, indent=2)},
            {
                "type": "text",
                "text": f"Fetched {len(transactions)} transactions for wallet {wallet_address}.",
            },
        ],
        "transactions": transactions,
    }


def error_response(message: str) -> dict[str, Any]:
    return {
        "content": [{"type": "text", "text": f"Error: {message}"}],
        "isError": True,
    }


async def explain_wallet_transactions(
    wallet_address: str,
    limit: int,
    fetcher: TransactionSource,
) -> list[TransferSummary]:
    """Fetch recent transactions for wallet_address and reduce them to summaries."""
    raw_list = await fetcher.fetch_transactions(wallet_address, limit)
    return extract_transfers(raw_list, wallet_address)


async def handle_solana_tool(
    name: str,
    arguments: dict[str, Any] | None,
    *,
    fetcher: TransactionSource | None = None,
) -> dict[str, Any]:
    """
    Run a Solana tool by name.

    Raises UnknownToolError, InvalidToolArgumentsError or TransactionFetchError.
    """
    if name != FETCH_SOLANA_TRANSACTIONS:
        raise UnknownToolError(f"Unknown Solana tool: {name}")
    try:
        args = FetchSolanaTransactionsArgs.model_validate(arguments or {})
    except ValidationError as e:
        raise InvalidToolArgumentsError(
            f"Invalid arguments for {FETCH_SOLANA_TRANSACTIONS}: {e}"
        ) from e

    log = bind_wallet(__name__, args.wallet_address)
    source = fetcher if fetcher is not None else default_fetcher()
    try:
        summaries = await explain_wallet_transactions(args.wallet_address, args.limit, source)
    except (TransactionFetchError, ValueError) as e:
        log.warning("solana_tool_fetch_failed", error=str(e))
        raise TransactionFetchError(f"Failed to fetch Solana transactions: {e}") from e

    log.info(
        "solana_tool_completed",
        tool=name,
        transaction_count=len(summaries),
    )
    return build_tool_response(summaries, args.wallet_address)


async def call_tool(
    name: str,
    arguments: dict[str, Any] | None,
    *,
    fetcher: TransactionSource | None = None,
) -> dict[str, Any]:
    """Dispatch a tool call; errors become isError payloads instead of exceptions."""
    try:
        if is_solana_tool(name):
            return await handle_solana_tool(name, arguments, fetcher=fetcher)
        raise UnknownToolError(f"Unknown tool: {name}")
    except ExplainerError as e:
        return error_response(str(e))
