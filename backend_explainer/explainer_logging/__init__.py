"""
Structured logging for the explainer backend.

JSON logs with timestamp, event_type and keyword fields.
"""

from backend_explainer.explainer_logging.logger import bind_wallet, get_logger

__all__ = ["bind_wallet", "get_logger"]
