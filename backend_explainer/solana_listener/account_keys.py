"""
Account-key resolution for raw getTransaction payloads.

Produces the flat, index-stable list of account addresses that lines up with
meta.preBalances / meta.postBalances. Accepts legacy messages (accountKeys
only), versioned messages (static accountKeys + addressTableLookups, with the
looked-up addresses in meta.loadedAddresses) and jsonParsed messages
(accountKeys as {pubkey, ...} dicts, already resolved).

When lookup tables are referenced but their addresses were not delivered with
the transaction, the result falls back to the static keys and is tagged
STATIC_ONLY instead of failing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from backend_explainer.explainer_logging import get_logger

logger = get_logger(__name__)

NOT_FOUND = -1


class ResolutionMode(str, Enum):
    FULL = "full"
    STATIC_ONLY = "static_only"


@dataclass(frozen=True)
class AccountKeys:
    """Resolved account keys tagged with how they were resolved."""

    keys: tuple[str, ...]
    mode: ResolutionMode

    def __len__(self) -> int:
        return len(self.keys)

    def get(self, index: Any) -> str | None:
        """Key at index, or None when index is not a valid position."""
        if not isinstance(index, int) or isinstance(index, bool):
            return None
        if not (0 <= index < len(self.keys)):
            return None
        return self.keys[index] or None

    def index_of(self, address: str) -> int:
        """First index whose key equals address exactly; NOT_FOUND otherwise."""
        for i, key in enumerate(self.keys):
            if key == address:
                return i
        return NOT_FOUND

    @property
    def is_partial(self) -> bool:
        return self.mode is ResolutionMode.STATIC_ONLY


EMPTY_ACCOUNT_KEYS = AccountKeys(keys=(), mode=ResolutionMode.FULL)


def _key_to_str(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, dict):
        return str(key.get("pubkey") or "")
    return ""


def static_account_keys(message: dict[str, Any]) -> list[str]:
    """accountKeys (or staticAccountKeys) as base58 strings; handles json vs jsonParsed."""
    keys = message.get("accountKeys")
    if keys is None:
        keys = message.get("staticAccountKeys")
    if not isinstance(keys, list):
        return []
    return [_key_to_str(k) for k in keys]


def _is_parsed_keys(message: dict[str, Any]) -> bool:
    keys = message.get("accountKeys")
    return isinstance(keys, list) and any(isinstance(k, dict) for k in keys)


def _lookup_index_count(lookups: Sequence[Any], field: str) -> int | None:
    total = 0
    for lookup in lookups:
        if not isinstance(lookup, dict):
            return None
        indexes = lookup.get(field) or []
        if not isinstance(indexes, list):
            return None
        total += len(indexes)
    return total


def _loaded_lookup_keys(
    lookups: Sequence[Any],
    meta: dict[str, Any] | None,
) -> list[str] | None:
    """
    Addresses loaded from lookup tables (writable, then readonly), or None
    when they were not delivered or do not match the lookups.
    """
    loaded = (meta or {}).get("loadedAddresses")
    if not isinstance(loaded, dict):
        return None
    writable = loaded.get("writable") or []
    readonly = loaded.get("readonly") or []
    if not isinstance(writable, list) or not isinstance(readonly, list):
        return None
    if len(writable) != _lookup_index_count(lookups, "writableIndexes"):
        return None
    if len(readonly) != _lookup_index_count(lookups, "readonlyIndexes"):
        return None
    return [_key_to_str(k) for k in writable] + [_key_to_str(k) for k in readonly]


def get_message_and_meta(
    raw: dict[str, Any] | None,
) -> tuple[dict[str, Any] | None, dict[str, Any] | None]:
    """Return (transaction.message, meta) from getTransaction-style result."""
    if not isinstance(raw, dict):
        return None, None
    meta = raw.get("meta")
    if not isinstance(meta, dict):
        meta = None
    tx_obj = raw.get("transaction")
    if not isinstance(tx_obj, dict):
        return None, meta
    message = tx_obj.get("message")
    if not isinstance(message, dict):
        return None, meta
    return message, meta


def resolve_account_keys(raw: dict[str, Any] | None) -> AccountKeys:
    """
    Resolve the account keys of a getTransaction result.

    Never raises: a missing message yields an empty FULL result, and lookup
    tables whose addresses are unavailable yield STATIC_ONLY with the static
    keys (instructions referencing lookup-table accounts then resolve to None).
    """
    message, meta = get_message_and_meta(raw)
    if message is None:
        return EMPTY_ACCOUNT_KEYS

    static = static_account_keys(message)
    lookups = message.get("addressTableLookups") or []
    # jsonParsed accountKeys already include lookup-table addresses
    if _is_parsed_keys(message) or not isinstance(lookups, list) or not lookups:
        return AccountKeys(keys=tuple(static), mode=ResolutionMode.FULL)

    loaded = _loaded_lookup_keys(lookups, meta)
    if loaded is None:
        logger.debug(
            "account_keys_static_fallback",
            lookup_tables=len(lookups),
            static_key_count=len(static),
        )
        return AccountKeys(keys=tuple(static), mode=ResolutionMode.STATIC_ONLY)
    return AccountKeys(keys=tuple(static + loaded), mode=ResolutionMode.FULL)
