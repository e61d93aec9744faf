"""
API server package: tool surface and HTTP interface.

Publishes the Solana tools (listing + calls) and a REST route returning
transfer summaries; delegates fetching and extraction to solana_listener.
"""
