"""Contexto de observabilidade dos logs do cliente (correlation_id, feed)."""

from twikey.observability.log_context import (
    current_log_context,
    new_correlation_id,
    walk_context,
)

__all__ = [
    "current_log_context",
    "new_correlation_id",
    "walk_context",
]
