"""
Core utilities: shared exceptions used across the listener, tool layer and API server.
"""

from backend_explainer.core.exceptions import (
    ExplainerError,
    InvalidToolArgumentsError,
    RpcError,
    TransactionFetchError,
    UnknownToolError,
)

__all__ = [
    "ExplainerError",
    "InvalidToolArgumentsError",
    "RpcError",
    "TransactionFetchError",
    "UnknownToolError",
]
