"""
Application-level exceptions.

The transfer extractor and account-key resolver never raise these; they are
raised by the transaction source and the tool layer, and translated into
isError payloads or HTTP status codes at the edges.
"""

from __future__ import annotations


class ExplainerError(Exception):
    """Base class for all backend_explainer errors."""


class InvalidToolArgumentsError(ExplainerError):
    """Tool arguments failed validation."""


class UnknownToolError(ExplainerError):
    """Tool name is not registered."""


class TransactionFetchError(ExplainerError):
    """Transaction source could not deliver signatures or transactions."""


class RpcError(TransactionFetchError):
    """Solana JSON-RPC returned an error object."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(f"Solana RPC error: {message} (code={code})")
        self.rpc_message = message
        self.code = code
