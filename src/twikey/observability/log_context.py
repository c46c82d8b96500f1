"""Contexto de log de uma operação do cliente (correlation_id + feed).

Um walk de feed roda dentro de `walk_context`: todo log emitido durante o
walk (login, dispatcher, páginas) carrega o mesmo correlation_id e o nome
do feed, sem que cada módulo precise repassá-los em `extra`.

Uso:
    with walk_context("transaction") as correlation_id:
        async for entry in client.transaction_feed():
            ...
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

_correlation_id: ContextVar[str] = ContextVar("twikey_correlation_id", default="")
_feed: ContextVar[str] = ContextVar("twikey_feed", default="")


def new_correlation_id() -> str:
    return uuid.uuid4().hex


def current_log_context() -> dict[str, str]:
    """Campos de contexto ativos; chaves ausentes não foram definidas."""
    context: dict[str, str] = {}
    correlation_id = _correlation_id.get()
    if correlation_id:
        context["correlation_id"] = correlation_id
    feed = _feed.get()
    if feed:
        context["feed"] = feed
    return context


@contextmanager
def walk_context(feed: str, correlation_id: str | None = None) -> Iterator[str]:
    """Associa feed e correlation_id aos logs emitidos dentro do bloco.

    Args:
        feed: Nome lógico do feed (FeedEndpoint.name)
        correlation_id: ID do walk; se None, um novo é gerado

    Yields:
        correlation_id efetivo
    """
    effective_id = correlation_id or new_correlation_id()
    id_token = _correlation_id.set(effective_id)
    feed_token = _feed.set(feed)
    try:
        yield effective_id
    finally:
        _feed.reset(feed_token)
        _correlation_id.reset(id_token)
