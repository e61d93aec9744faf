"""
Backend Explainer: human-readable summaries of Solana wallet transactions.

Fetches recent transactions for a wallet over JSON-RPC and reduces each raw
transaction record to a transfer summary (sender, receiver, signed amount,
asset). Exposed as a callable tool, an HTTP API and a command-line script.
"""

__version__ = "1.0.0"
