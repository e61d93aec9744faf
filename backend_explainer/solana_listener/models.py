"""
Data models for Solana listener output.

- SignatureInfo: one getSignaturesForAddress item (unit of work for the fetcher).
- TokenBalance: one pre/post token balance record from transaction meta.
- TransferSummary: the normalized, human-meaningful view of one transaction
  from the perspective of a target wallet.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Asset id used for native SOL in TransferSummary.asset_id (token transfers carry the mint).
NATIVE_ASSET_ID = "SOL"
NATIVE_DECIMALS = 9
LAMPORTS_PER_SOL = 10**NATIVE_DECIMALS
# SPL mint decimals is a u8
MAX_TOKEN_DECIMALS = 255
EXPLORER_TX_URL_TEMPLATE = "https://solscan.io/tx/{signature}"


def explorer_url(signature: str) -> str:
    return EXPLORER_TX_URL_TEMPLATE.format(signature=signature)


@dataclass(frozen=True)
class SignatureInfo:
    """
    Normalized transaction signature info from getSignaturesForAddress.

    Mirrors Solana RPC response fields.
    """

    signature: str
    slot: int
    err: Any  # None if success; dict/object from RPC if failed
    block_time: int | None  # Unix timestamp; None if not available
    memo: str | None
    confirmation_status: str | None  # processed | confirmed | finalized

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "SignatureInfo":
        """Build from a single getSignaturesForAddress result item."""
        return cls(
            signature=item["signature"],
            slot=int(item["slot"]),
            err=item.get("err"),
            block_time=item.get("blockTime"),
            memo=item.get("memo"),
            confirmation_status=item.get("confirmationStatus"),
        )


@dataclass(frozen=True)
class TokenBalance:
    """
    One entry of meta.preTokenBalances / meta.postTokenBalances.

    Not index-aligned with account keys; matched to a wallet by owner.
    """

    owner: str | None
    mint: str | None
    amount: int
    """Raw integer amount (uiTokenAmount.amount); 0 when missing or unparseable."""
    decimals: int
    """uiTokenAmount.decimals; 0 when missing."""

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "TokenBalance":
        ui_amount = item.get("uiTokenAmount")
        if not isinstance(ui_amount, dict):
            ui_amount = {}
        return cls(
            owner=item.get("owner"),
            mint=item.get("mint"),
            amount=_to_int(ui_amount.get("amount")),
            decimals=_to_int(ui_amount.get("decimals")),
        )


def _to_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (OverflowError, TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class TransferSummary:
    """
    Transfer view of one transaction for a target wallet.

    amount is signed: negative is a net outflow from the wallet, positive a
    net inflow. amount and asset_id are both None when no balance for the
    wallet could be found.
    """

    signature: str | None
    explorer_url: str | None
    date: str | None
    """ISO-8601 UTC with millisecond precision (e.g. 2024-01-01T00:00:00.000Z)."""
    sender: str | None
    """Fee payer (account key 0)."""
    receiver: str | None
    """Second account of the first instruction referencing two or more accounts."""
    amount: float | None
    asset_id: str | None
    """NATIVE_ASSET_ID for SOL, otherwise the token mint."""
    slot: int | None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dict."""
        return {
            "signature": self.signature,
            "explorer_url": self.explorer_url,
            "date": self.date,
            "sender": self.sender,
            "receiver": self.receiver,
            "amount": self.amount,
            "asset_id": self.asset_id,
            "slot": self.slot,
        }
