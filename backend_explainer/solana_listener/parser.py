"""
Solana transaction parser — raw RPC payloads to transfer summaries.

Reduces a getTransaction-style result to a TransferSummary for one wallet:
sender (fee payer), receiver (second account of the first multi-account
instruction), signed amount and asset. Token balance deltas for the wallet
take priority over native SOL balance deltas. Purely structural; never raises
on missing or malformed substructures.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable

from backend_explainer.explainer_logging import get_logger
from backend_explainer.solana_listener.account_keys import (
    NOT_FOUND,
    AccountKeys,
    get_message_and_meta,
    resolve_account_keys,
)
from backend_explainer.solana_listener.models import (
    MAX_TOKEN_DECIMALS,
    NATIVE_ASSET_ID,
    NATIVE_DECIMALS,
    TokenBalance,
    TransferSummary,
    explorer_url,
)

logger = get_logger(__name__)


def _first_signature(raw: dict[str, Any]) -> str | None:
    tx_obj = raw.get("transaction")
    sigs = tx_obj.get("signatures") if isinstance(tx_obj, dict) else None
    if isinstance(sigs, list) and sigs and isinstance(sigs[0], str):
        return sigs[0]
    return None


def format_block_time(block_time: Any) -> str | None:
    """
    blockTime (unix seconds) as ISO-8601 UTC with milliseconds, e.g. 2024-01-01T00:00:00.000Z.

    None when block_time is absent or not a finite number. A blockTime of 0 is
    a real timestamp here and yields 1970-01-01T00:00:00.000Z rather than None.
    """
    if block_time is None or isinstance(block_time, bool):
        return None
    try:
        seconds = int(block_time)
    except (OverflowError, TypeError, ValueError):
        return None
    try:
        dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def find_token_balance(entries: Any, owner: str) -> TokenBalance | None:
    """First token balance entry owned by owner; None if none matches."""
    if not isinstance(entries, list):
        return None
    for entry in entries:
        if isinstance(entry, dict) and entry.get("owner") == owner:
            return TokenBalance.from_rpc_item(entry)
    return None


def _native_balances(
    meta: dict[str, Any] | None,
    account_keys: AccountKeys,
    wallet_address: str,
) -> tuple[int | None, int | None]:
    """(pre, post) lamports for the wallet's account index, or (None, None)."""
    if meta is None or not len(account_keys):
        return None, None
    index = account_keys.index_of(wallet_address)
    if index == NOT_FOUND:
        return None, None
    pre = meta.get("preBalances")
    post = meta.get("postBalances")
    if not isinstance(pre, list) or not isinstance(post, list):
        return None, None
    if index >= len(pre) or index >= len(post):
        return None, None
    pre_balance, post_balance = pre[index], post[index]
    if not isinstance(pre_balance, int) or not isinstance(post_balance, int):
        return None, None
    return pre_balance, post_balance


def _scaled_delta(pre: int, post: int, decimals: int) -> float | None:
    """(post - pre) / 10**decimals; None for out-of-range decimals or a delta a float cannot hold."""
    if not 0 <= decimals <= MAX_TOKEN_DECIMALS:
        return None
    try:
        return (post - pre) / 10**decimals
    except OverflowError:
        return None


def _instruction_accounts(instruction: Any) -> list[Any]:
    if not isinstance(instruction, dict):
        return []
    accounts = instruction.get("accounts")
    if accounts is None:
        accounts = instruction.get("accountKeyIndexes")
    return accounts if isinstance(accounts, list) else []


def find_receiver(message: dict[str, Any] | None, account_keys: AccountKeys) -> str | None:
    """
    Second referenced account of the first instruction with two or more accounts.

    Heuristic: assumes a transfer-like account layout (source, destination, ...).
    Later instructions are never consulted, even if the chosen index cannot be
    resolved (e.g. it lives in an unloaded lookup table).
    """
    if message is None:
        return None
    instructions = message.get("instructions")
    if instructions is None:
        instructions = message.get("compiledInstructions")
    if not isinstance(instructions, list):
        return None
    for ix in instructions:
        accounts = _instruction_accounts(ix)
        if len(accounts) > 1:
            second = accounts[1]
            # jsonParsed instructions list addresses, not indexes
            if isinstance(second, str):
                return second or None
            return account_keys.get(second)
    return None


def extract_transfer(
    raw: dict[str, Any] | None,
    wallet_address: str,
) -> TransferSummary | None:
    """
    Build the TransferSummary of one getTransaction result for wallet_address.

    Returns None only when raw is None/absent (fetch failed). Every other
    missing piece (meta, token balances, matching account) leaves the
    dependent fields as None.
    """
    if not raw or not isinstance(raw, dict):
        return None

    signature = _first_signature(raw)
    date = format_block_time(raw.get("blockTime"))
    slot = raw.get("slot")
    message, meta = get_message_and_meta(raw)

    pre_token: TokenBalance | None = None
    post_token: TokenBalance | None = None
    if meta is not None and meta.get("preTokenBalances") is not None and meta.get("postTokenBalances") is not None:
        pre_token = find_token_balance(meta["preTokenBalances"], wallet_address)
        post_token = find_token_balance(meta["postTokenBalances"], wallet_address)

    account_keys = resolve_account_keys(raw)
    pre_balance, post_balance = _native_balances(meta, account_keys, wallet_address)

    sender: str | None = None
    receiver: str | None = None
    if message is not None:
        sender = account_keys.get(0)
        receiver = find_receiver(message, account_keys)

    amount: float | None = None
    asset_id: str | None = None
    if pre_token is not None and post_token is not None:
        amount = _scaled_delta(pre_token.amount, post_token.amount, pre_token.decimals)
        asset_id = pre_token.mint if amount is not None else None
    elif pre_balance is not None and post_balance is not None:
        amount = _scaled_delta(pre_balance, post_balance, NATIVE_DECIMALS)
        asset_id = NATIVE_ASSET_ID if amount is not None else None

    if account_keys.is_partial:
        logger.debug(
            "transfer_extracted_with_static_keys",
            signature=signature,
            receiver_found=receiver is not None,
        )

    return TransferSummary(
        signature=signature,
        explorer_url=explorer_url(signature) if signature else None,
        date=date,
        sender=sender,
        receiver=receiver,
        amount=amount,
        asset_id=asset_id,
        slot=int(slot) if isinstance(slot, int) else None,
    )


def extract_transfers(
    raw_list: Iterable[dict[str, Any] | None],
    wallet_address: str,
) -> list[TransferSummary]:
    """
    Extract summaries for a batch of getTransaction results.

    Skips absent records; returned list may be shorter than input. Order is preserved.
    """
    summaries: list[TransferSummary] = []
    for raw in raw_list:
        summary = extract_transfer(raw, wallet_address)
        if summary is not None:
            summaries.append(summary)
    return summaries
